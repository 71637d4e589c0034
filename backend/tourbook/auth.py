from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from tourbook import config
from tourbook.db import get_db
from tourbook.errors import forbidden, unauthorized
from tourbook.repositories.user_repository import UserRepository
from tourbook.utils import serialize_doc

# PBKDF2 avoids bcrypt backend/version issues and the 72-byte bcrypt input limit.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def create_access_token(*, subject: str, role: str, minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    if minutes is None:
        minutes = config.ACCESS_TOKEN_MINUTES
    payload = {
        "sub": subject,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
    }
    return jwt.encode(payload, config.jwt_secret(), algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, config.jwt_secret(), algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise unauthorized("Invalid token")


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    out = serialize_doc(user)
    out.pop("passwordHash", None)
    return out


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db=Depends(get_db),
) -> dict[str, Any]:
    if credentials is None:
        raise unauthorized("Not authorized, no token")

    payload = decode_token(credentials.credentials)

    user = await UserRepository(db).get_by_id(payload.get("sub"))
    if not user or user.get("status", "active") != "active":
        raise unauthorized("User not found or inactive")

    return public_user(user)


def require_roles(required: list[str]):
    async def _dep(user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
        if user.get("role") not in required:
            raise forbidden()
        return user

    return _dep
