"""
Authentication utilities for FastAPI routes.

Shared auth and client dependencies used by all route modules.
"""

import logging

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel
from supabase import Client

from tastebook.db.client import (
    create_session_client,
    get_authenticated_client,
    get_client,
    get_service_client,
)
from tastebook.services.auth import get_user_from_token

logger = logging.getLogger(__name__)


class AuthenticatedUser(BaseModel):
    """Authenticated user info from Supabase JWT."""
    id: str
    email: str | None
    access_token: str


async def get_current_user(authorization: str = Header(None)) -> AuthenticatedUser:
    """
    Validate Supabase JWT and extract user info.

    Expects Authorization header: "Bearer <access_token>"
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization format")

    access_token = authorization[7:]  # Remove "Bearer " prefix

    try:
        user = get_user_from_token(get_service_client(), access_token)
    except Exception as e:
        logger.warning(f"Auth validation failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return AuthenticatedUser(id=user.id, email=user.email, access_token=access_token)


def get_user_client(user: AuthenticatedUser = Depends(get_current_user)) -> Client:
    """Supabase client acting as the caller, so RLS applies."""
    return get_authenticated_client(user.access_token)


def get_public_client() -> Client:
    """Anonymous client for routes that need no session."""
    return get_client()


def get_session_client() -> Client:
    """Fresh client for the auth flows; its session ends with the request."""
    return create_session_client()
