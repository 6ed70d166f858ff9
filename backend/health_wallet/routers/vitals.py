from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from health_wallet.database import get_db
from health_wallet.schemas.vital import VitalListResponse, VitalResponse
from health_wallet.services.query_service import query_service
from health_wallet.auth import get_current_user, UserPrincipal

router = APIRouter()


@router.get("/{user_id}", response_model=VitalListResponse)
async def list_vitals(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    # Non-owners only see vitals of reports shared with them
    vitals = await query_service.vitals_visible_to(db, current_user, user_id)
    return VitalListResponse(vitals=[VitalResponse.model_validate(v) for v in vitals], total=len(vitals))
