from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from health_wallet.database import get_db
from health_wallet.schemas.share import PermissionListResponse, PermissionResponse, ShareRequest
from health_wallet.services.sharing_service import sharing_service
from health_wallet.auth import get_current_user, UserPrincipal

router = APIRouter()


@router.post("", response_model=PermissionResponse, status_code=201)
async def share_report(
    req: ShareRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    if not current_user.can_share:
        raise HTTPException(status_code=403, detail="Your role does not permit sharing reports")
    permission = await sharing_service.grant(db, current_user, req.report_id, req.shared_with)
    return PermissionResponse.model_validate(permission)


@router.get("/{report_id}", response_model=PermissionListResponse)
async def list_grants(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    permissions = await sharing_service.grants_for_report(db, current_user, report_id)
    return PermissionListResponse(
        permissions=[PermissionResponse.model_validate(p) for p in permissions],
        total=len(permissions),
    )
