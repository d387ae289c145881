"""
Auth endpoints — email/password accounts with stateless JWT sessions.

Flow:
  1) POST /auth/register -> creates a customer account, returns {user, token}
  2) POST /auth/login    -> verifies credentials, returns {user, token}
  3) Clients send `Authorization: Bearer <token>` on protected routes
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from db_models import User
from deps import require_user
from domain.responses import success_response
from domain.errors import NotFoundError
from middleware.auth import issue_access_token, require_token_subject
from middleware.rate_limit import rate_limit
from models import LoginRequest, RegisterRequest, user_payload
from services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _session_payload(user: User) -> dict:
    return {
        "user": user_payload(user),
        "token": issue_access_token(user_id=user.id, role=user.role),
        "expiresInDays": settings.jwt_access_ttl_days,
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=10, window_seconds=60)),
):
    user = await auth_service.register_user(
        db,
        name=request.name,
        email=request.email,
        password=request.password,
    )
    await db.commit()
    return success_response(data=_session_payload(user), message="User registered successfully")


@router.post("/login")
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=20, window_seconds=60)),
):
    user = await auth_service.authenticate(db, email=request.email, password=request.password)
    await db.commit()
    logger.info(f"User #{user.id} logged in")
    return success_response(data=_session_payload(user), message="Login successful")


@router.get("/me")
async def me(
    user_id: int = Depends(require_token_subject),
    db: AsyncSession = Depends(get_db),
):
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User", str(user_id))
    return success_response(data={"user": user_payload(user)})


@router.post("/logout")
async def logout(user: User = Depends(require_user)):
    # Tokens are stateless; the client discards its copy.
    return success_response(message="Logged out successfully")
