"""Authentication API endpoints: signup and login."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.auth.jwt import create_access_token
from finmimo.auth.schemas import AuthResponse, LoginRequest, SignupRequest, UserResponse
from finmimo.auth.service import authenticate, create_user
from finmimo.config import Settings
from finmimo.database import get_session
from finmimo.db.models import User
from finmimo.dependencies import get_settings

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _auth_response(settings: Settings, user: User) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        token=create_access_token(settings, user.id),
    )


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(
    body: SignupRequest,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Create an account and return it with an access token."""
    user = await create_user(
        db,
        email=body.email,
        password=body.password,
        display_name=body.display_name,
        password_min_length=settings.password_min_length,
    )
    await db.commit()
    return _auth_response(settings, user)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Exchange email + password for an access token."""
    user = await authenticate(db, body.email, body.password)
    return _auth_response(settings, user)
