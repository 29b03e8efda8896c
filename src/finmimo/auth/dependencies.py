"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
import structlog
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.auth.jwt import verify_token
from finmimo.auth.service import get_user_by_id
from finmimo.config import Settings
from finmimo.database import get_session
from finmimo.db.models import User
from finmimo.dependencies import get_settings

_bearer = HTTPBearer(auto_error=False)


def _bind_user(request: Request, user: User) -> None:
    """Attach the caller to the log context and to the request for the access log."""
    structlog.contextvars.bind_contextvars(user_id=user.id)
    request.state.user_id = user.id


async def get_current_user_optional(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> User | None:
    """Extract user from JWT if present, return None otherwise."""
    if credentials is None:
        return None
    try:
        payload = verify_token(settings, credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError:
        return None
    user = await get_user_by_id(db, payload["sub"])
    if user is not None:
        _bind_user(request, user)
    return user


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Extract and verify the bearer JWT, return the User model.

    Raises 401 when the header is missing, the token is invalid, or the user
    no longer exists.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = verify_token(settings, credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    user = await get_user_by_id(db, payload["sub"])
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    _bind_user(request, user)
    return user
