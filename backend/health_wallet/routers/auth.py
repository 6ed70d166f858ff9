from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from health_wallet.database import get_db
from health_wallet.auth import create_token, get_current_user, UserPrincipal
from health_wallet.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from health_wallet.services.user_service import user_service

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.register(db, body.name, body.email, body.password, body.role)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.authenticate(db, body.email, body.password)
    return TokenResponse(
        access_token=create_token(user),
        user_id=user.id,
        name=user.name,
        role=user.role,
    )


@router.get("/me", response_model=UserResponse)
async def me(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    user = await user_service.get_user(db, current_user.id)
    return UserResponse.model_validate(user)
