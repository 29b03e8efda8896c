"""Shared FastAPI dependencies."""

from fastapi import Request

from finmimo.config import Settings


def get_settings(request: Request) -> Settings:
    """Return the Settings instance the application was created with."""
    return request.app.state.settings
