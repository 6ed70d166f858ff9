import logging
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from health_wallet.auth import hash_password, verify_password
from health_wallet.exceptions import DuplicateUser, InvalidCredentials, NotFound
from health_wallet.models.user import Role, User
from health_wallet.services.sharing_service import sharing_service

logger = logging.getLogger(__name__)


class UserService:
    async def register(self, db: AsyncSession, name: str, email: str, password: str, role: Role) -> User:
        email = email.strip().lower()
        existing = await db.scalar(select(User.id).where(User.email == email))
        if existing:
            raise DuplicateUser(f"User {email} already exists")

        user = User(name=name.strip(), email=email, password_hash=hash_password(password), role=Role(role).value)
        db.add(user)
        try:
            await db.flush()
            await sharing_service.bind_pending_grants(db, user)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise DuplicateUser(f"User {email} already exists") from e

        await db.refresh(user)
        logger.info("Registered %s user %s", user.role, user.id)
        return user

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        email = email.strip().lower()
        user = await db.scalar(select(User).where(User.email == email))
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Failed login for %s", email)
            raise InvalidCredentials("Invalid credentials")
        return user

    async def get_user(self, db: AsyncSession, user_id: int) -> User:
        user = await db.get(User, user_id)
        if not user:
            raise NotFound(f"User {user_id} not found")
        return user


user_service = UserService()
