"""
Auth API endpoints.

Sign-up, sign-in, sign-out and token refresh against Supabase Auth.
"""

import logging

from fastapi import APIRouter, Depends
from supabase import Client

from tastebook.cache import QueryCache, get_query_cache, streak_key
from tastebook.models.validation import RefreshInput, SignInInput, SignUpInput
from tastebook.services import auth as auth_service
from tastebook.web.auth import AuthenticatedUser, get_current_user, get_session_client, get_user_client
from tastebook.web.notifications import MutationResponse, success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup")
async def sign_up(
    body: SignUpInput,
    client: Client = Depends(get_session_client),
) -> MutationResponse:
    session = auth_service.sign_up(client, body.email, body.password, body.full_name)
    return success("Account created", session)


@router.post("/signin")
async def sign_in(
    body: SignInInput,
    client: Client = Depends(get_session_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    session = auth_service.sign_in(client, body.email, body.password)
    if session["user"]:
        cache.invalidate(streak_key(session["user"]["id"]))
    return success("Welcome back", session)


@router.post("/signout")
async def sign_out(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
) -> MutationResponse:
    auth_service.sign_out(client)
    logger.info(f"User {user.id} signed out")
    return success("Signed out")


@router.post("/refresh")
async def refresh(
    body: RefreshInput,
    client: Client = Depends(get_session_client),
) -> dict:
    return auth_service.refresh_session(client, body.refresh_token)
