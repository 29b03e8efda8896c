"""
Authentication business logic: signup and credential checks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from finmimo.auth.password import (
    PasswordStrengthError,
    hash_password,
    validate_password_strength,
    verify_password,
)
from finmimo.db.models import Streak, User, UserProfile
from finmimo.errors import AuthenticationError, ConflictError, ValidationFailureError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid credentials"


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Signup / login
# ---------------------------------------------------------------------------


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    display_name: str,
    password_min_length: int,
) -> User:
    """
    Create a user together with its profile and streak rows.

    Raises:
        ValidationFailureError: If the password is too weak.
        ConflictError: If the email is already registered.
    """
    try:
        validate_password_strength(password, password_min_length)
    except PasswordStrengthError as e:
        raise ValidationFailureError(str(e)) from e

    if await get_user_by_email(db, email) is not None:
        msg = "Email already registered"
        raise ConflictError(msg)

    now = datetime.now(timezone.utc)
    user = User(
        email=email.lower().strip(),
        password_hash=hash_password(password),
        display_name=display_name.strip(),
        created_at=now,
    )
    db.add(user)
    await db.flush()

    db.add(UserProfile(user_id=user.id, daily_goal_minutes=10, total_xp=0, created_at=now))
    db.add(Streak(user_id=user.id, current=0, longest=0, freeze_count=1, updated_at=now))
    await db.flush()

    logger.info("user_created", user_id=user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """
    Return the user matching the credentials.

    Raises:
        AuthenticationError: On unknown email or wrong password, with the same message.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", email=email)
        raise AuthenticationError(INVALID_CREDENTIALS)

    logger.info("login_success", user_id=user.id)
    return user
