from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pymongo.errors import DuplicateKeyError

from tourbook.auth import create_access_token, get_current_user, hash_password, verify_password
from tourbook.db import get_db
from tourbook.errors import EMAIL_TAKEN, AppError, forbidden, unauthorized
from tourbook.repositories.user_repository import UserRepository
from tourbook.schemas import AuthResponse, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(user: dict) -> AuthResponse:
    user_id = str(user["_id"])
    role = user.get("role") or "user"
    return AuthResponse(
        id=user_id,
        name=user.get("name"),
        email=user["email"],
        role=role,
        token=create_access_token(subject=user_id, role=role),
    )


async def _authenticate(db, payload: LoginRequest) -> dict:
    user = await UserRepository(db).get_by_email(payload.email)
    if not user or not verify_password(payload.password, user.get("passwordHash") or ""):
        raise unauthorized("Invalid email or password")
    if user.get("status", "active") != "active":
        raise unauthorized("Account is inactive")
    return user


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(payload: RegisterRequest, db=Depends(get_db)):
    repo = UserRepository(db)
    if await repo.get_by_email(payload.email):
        raise AppError(400, EMAIL_TAKEN, "User with this email already exists")

    try:
        user = await repo.create(name=payload.name, email=payload.email, password_hash=hash_password(payload.password))
    except DuplicateKeyError:
        raise AppError(400, EMAIL_TAKEN, "User with this email already exists")

    logger.info("Registered user %s", user["email"])
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, db=Depends(get_db)):
    user = await _authenticate(db, payload)
    return _auth_response(user)


@router.post("/admin-login", response_model=AuthResponse)
async def admin_login(payload: LoginRequest, db=Depends(get_db)):
    user = await _authenticate(db, payload)
    if user.get("role") != "admin":
        raise forbidden("Access denied. Admin privileges required.")
    return _auth_response(user)


@router.get("/profile")
async def profile(user=Depends(get_current_user)):
    return user
