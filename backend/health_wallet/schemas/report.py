from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from health_wallet.schemas.vital import ExtractedVitalResponse


class ReportResponse(BaseModel):
    id: int
    user_id: int
    file_url: str
    original_filename: Optional[str] = None
    report_type: str
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReportListResponse(BaseModel):
    reports: list[ReportResponse]
    total: int


class IngestionResponse(BaseModel):
    message: str = "Report processed"
    report_id: int
    vitals: list[ExtractedVitalResponse]
