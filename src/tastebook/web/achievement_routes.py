"""Achievement API endpoints."""

from fastapi import APIRouter, Depends, Query
from supabase import Client

from tastebook.cache import QueryCache, achievements_key, get_query_cache, recent_achievements_key
from tastebook.models.entities import Achievement, UserAchievement
from tastebook.services import achievements as achievement_service
from tastebook.web.auth import AuthenticatedUser, get_current_user, get_user_client
from tastebook.web.notifications import MutationResponse, success

router = APIRouter(prefix="/achievements", tags=["achievements"])


@router.get("")
async def all_achievements(client: Client = Depends(get_user_client)) -> list[Achievement]:
    return achievement_service.get_all_achievements(client)


@router.get("/mine")
async def my_achievements(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> list[UserAchievement]:
    return cache.get_or_fetch(
        achievements_key(user.id),
        lambda: achievement_service.get_user_achievements(client, user.id),
    )


@router.get("/recent")
async def recent_achievements(
    limit: int = Query(3, gt=0, le=20),
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> list[UserAchievement]:
    return cache.get_or_fetch(
        (*recent_achievements_key(user.id), limit),
        lambda: achievement_service.get_recent_achievements(client, user.id, limit),
    )


@router.get("/progress")
async def progress(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
) -> dict:
    return achievement_service.get_achievement_progress(client, user.id)


@router.post("/check")
async def check_achievements(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    results = achievement_service.check_and_unlock_achievements(client, user.id)
    cache.invalidate(achievements_key(user.id), recent_achievements_key(user.id))

    unlocked = [row["achievement_name"] for row in results if row.get("just_unlocked")]
    if unlocked:
        return success(f"Achievement unlocked: {', '.join(unlocked)}", results)
    return success("Achievements updated", results)
