from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ShareRequest(BaseModel):
    report_id: int
    shared_with: str = Field(..., min_length=1, description="Email or user ID of the grantee")


class PermissionResponse(BaseModel):
    id: int
    report_id: int
    grantee_identifier: str
    grantee_user_id: Optional[int] = None
    access_level: str
    granted_at: Optional[datetime] = None
    is_pending: bool

    class Config:
        from_attributes = True


class PermissionListResponse(BaseModel):
    permissions: list[PermissionResponse]
    total: int
