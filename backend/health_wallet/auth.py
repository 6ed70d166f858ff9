"""
Auth module: password hashing, JWT creation/validation and the
get_current_user FastAPI dependency.

Every API route except register/login requires a bearer token. The role
carried in the token decides which operations the routers offer; it never
changes what data a user owns.
"""

import time
from dataclasses import dataclass
from typing import Optional
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import jwt, JWTError
from fastapi import HTTPException, Request
from health_wallet.config import get_settings
from health_wallet.models.user import Role

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return _password_hasher.verify(hashed_password, plain_password)
    except (VerificationError, InvalidHashError):
        return False


@dataclass
class UserPrincipal:
    """Resolved identity attached to each request."""
    id: int
    email: str
    name: str
    role: Role

    @property
    def is_patient(self) -> bool:
        return self.role == Role.PATIENT

    @property
    def can_upload(self) -> bool:
        return self.is_patient

    @property
    def can_share(self) -> bool:
        return self.is_patient

    @classmethod
    def from_user(cls, user) -> "UserPrincipal":
        return cls(id=user.id, email=user.email, name=user.name, role=Role(user.role))


def create_token(user) -> str:
    """Create a signed JWT for the given User model instance."""
    settings = get_settings()
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "exp": int(time.time()) + settings.token_expire_seconds,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[UserPrincipal]:
    """Decode and validate a JWT. Returns None if invalid/expired."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        return UserPrincipal(
            id=int(payload["sub"]),
            email=payload["email"],
            name=payload.get("name", payload["email"]),
            role=Role(payload["role"]),
        )
    except (JWTError, KeyError, ValueError):
        return None


async def get_current_user(request: Request) -> UserPrincipal:
    """
    FastAPI dependency. Extracts the JWT from the Authorization header and
    raises 401 when it is absent, malformed or expired.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    principal = decode_token(auth_header[7:])
    if principal is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal
