"""Profile API endpoints."""

from fastapi import APIRouter, Depends, Request
from supabase import Client

from tastebook.cache import QueryCache, get_query_cache, user_profile_key, user_stats_key
from tastebook.models.entities import UserProfile
from tastebook.models.validation import UpdateProfileInput
from tastebook.services import profile as profile_service
from tastebook.web.auth import AuthenticatedUser, get_current_user, get_user_client
from tastebook.web.notifications import MutationResponse, success

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("")
async def get_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> UserProfile:
    return cache.get_or_fetch(user_profile_key(user.id), lambda: profile_service.get_profile(client, user.id))


@router.patch("")
async def update_profile(
    body: UpdateProfileInput,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    profile = profile_service.update_profile(client, user.id, body)
    cache.set(user_profile_key(user.id), profile)
    return success("Profile updated", profile)


@router.post("/avatar")
async def upload_avatar(
    request: Request,
    filename: str,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    """Replace the avatar. The request body is the raw image."""
    data = await request.body()
    content_type = request.headers.get("content-type", "")
    profile = profile_service.upload_avatar(client, user.id, data, filename, content_type)
    cache.set(user_profile_key(user.id), profile)
    return success("Avatar updated", profile)


@router.get("/stats")
async def user_stats(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> dict:
    return cache.get_or_fetch(user_stats_key(user.id), lambda: profile_service.get_user_stats(client, user.id))
