"""
Account service — registration, password verification and login.

Passwords are hashed with bcrypt; only the hash is persisted.
"""

import logging
from datetime import datetime

import bcrypt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db_models import User
from domain.enums import UserRole
from domain.errors import UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    res = await db.execute(select(User).where(User.email == normalize_email(email)))
    return res.scalar_one_or_none()


async def register_user(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    role: str = UserRole.CUSTOMER.value,
) -> User:
    """Create an account. Emails are unique (case-insensitive)."""
    if await get_user_by_email(db, email):
        raise ValidationError("User already exists with this email")

    user = User(
        name=name,
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    logger.info(f"Registered {role} account #{user.id}")
    return user


async def authenticate(db: AsyncSession, *, email: str, password: str) -> User:
    """
    Verify credentials and stamp last_login.

    Unknown email and wrong password produce the same error so callers
    cannot probe which accounts exist.
    """
    user = await get_user_by_email(db, email)
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")

    user.last_login = datetime.utcnow()
    await db.flush()
    return user


async def count_users(db: AsyncSession) -> int:
    res = await db.execute(select(func.count(User.id)))
    return res.scalar_one()
