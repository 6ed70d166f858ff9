from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class ExtractedVitalResponse(BaseModel):
    name: str
    value: str


class VitalResponse(BaseModel):
    id: int
    report_id: int
    user_id: int
    vital_name: str
    vital_value: str
    recorded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VitalListResponse(BaseModel):
    vitals: list[VitalResponse]
    total: int
