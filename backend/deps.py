"""
Shared FastAPI dependencies.

Centralizes common dependencies so routers import from a single place
(DB session, auth guards, pagination).
"""

from __future__ import annotations

from typing import TypedDict

from fastapi import Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import User
from domain.constants import PRODUCTS_MAX_LIMIT
from domain.enums import UserRole
from domain.errors import PermissionDeniedError
from middleware.auth import require_token_subject


class Pagination(TypedDict):
    page: int
    limit: int
    offset: int


def page_params(default_limit: int):
    """Build a page/limit dependency with a per-endpoint default page size."""
    def _params(
        page: int = Query(1, ge=1, le=100_000),
        limit: int = Query(default_limit, ge=1, le=PRODUCTS_MAX_LIMIT),
    ) -> Pagination:
        return {"page": page, "limit": limit, "offset": (page - 1) * limit}

    return _params


async def require_user(
    user_id: int = Depends(require_token_subject),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Require a valid Bearer token whose subject is an active account.
    """
    user = await db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Account not found or disabled.")
    return user


async def require_admin(user: User = Depends(require_user)) -> User:
    """Require that the authenticated account has the admin role."""
    if user.role != UserRole.ADMIN.value:
        raise PermissionDeniedError("Admin role required for this endpoint.")
    return user
