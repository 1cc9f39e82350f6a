"""
Favorite API endpoints.

Toggling updates the cached favorite flag optimistically and rolls it back
if the write fails.
"""

from fastapi import APIRouter, Depends
from supabase import Client

from tastebook.cache import (
    QueryCache,
    favorites_key,
    get_query_cache,
    is_favorite_key,
    user_stats_key,
)
from tastebook.models.entities import Favorite
from tastebook.models.validation import ToggleFavoriteInput
from tastebook.services import favorites as favorite_service
from tastebook.web.auth import AuthenticatedUser, get_current_user, get_user_client
from tastebook.web.notifications import MutationResponse, success

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("")
async def list_favorites(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> list[Favorite]:
    return cache.get_or_fetch(favorites_key(user.id), lambda: favorite_service.get_favorites(client, user.id))


@router.get("/{recipe_id}")
async def check_favorite(
    recipe_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> dict:
    is_fav = cache.get_or_fetch(
        is_favorite_key(user.id, recipe_id),
        lambda: favorite_service.is_favorite(client, user.id, recipe_id),
    )
    return {"recipe_id": recipe_id, "is_favorite": is_fav}


@router.post("/toggle")
async def toggle_favorite(
    body: ToggleFavoriteInput,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    key = is_favorite_key(user.id, body.recipe_id)
    with cache.optimistic(key, lambda _current: not body.is_favorite):
        outcome = favorite_service.toggle_favorite(client, user.id, body.recipe_id, body.is_favorite)

    cache.invalidate(favorites_key(user.id), user_stats_key(user.id), key, ("dashboard-stats", user.id))
    message = "Added to favorites" if outcome == "added" else "Removed from favorites"
    return success(message, {"recipe_id": body.recipe_id, "is_favorite": outcome == "added"})
