"""
Dashboard API endpoints.

Stats, streak, activity and the upcoming meals of the current week.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from supabase import Client

from tastebook.cache import (
    DASHBOARD_STALE,
    STREAK_STALE,
    QueryCache,
    achievements_key,
    dashboard_stats_key,
    get_query_cache,
    recent_achievements_key,
    streak_key,
    upcoming_meals_key,
)
from tastebook.models.validation import RecordActivityInput
from tastebook.services import profile as profile_service
from tastebook.services import streak as streak_service
from tastebook.web.auth import AuthenticatedUser, get_current_user, get_user_client
from tastebook.web.notifications import MutationResponse, success

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> dict:
    return cache.get_or_fetch(
        dashboard_stats_key(user.id),
        lambda: profile_service.get_dashboard_stats(client, user.id),
        DASHBOARD_STALE,
    )


@router.get("/streak")
async def current_streak(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> dict:
    streak = cache.get_or_fetch(
        streak_key(user.id),
        lambda: streak_service.get_current_streak(client, user.id),
        STREAK_STALE,
    )
    return {"streak": streak}


@router.get("/activity")
async def activity_history(
    days: int = Query(365, gt=0, le=366),
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
) -> list[date]:
    return streak_service.get_activity_history(client, user.id, days)


@router.post("/activity")
async def record_activity(
    body: RecordActivityInput,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    streak_service.record_activity(client, user.id, body.activity_type)
    cache.invalidate(streak_key(user.id), achievements_key(user.id), recent_achievements_key(user.id))
    return success("Activity recorded")


@router.get("/upcoming")
async def upcoming(
    limit: int = Query(3, gt=0, le=28),
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> list[dict]:
    return cache.get_or_fetch(
        (*upcoming_meals_key(user.id), limit),
        lambda: profile_service.get_upcoming_meals(client, user.id, limit=limit),
    )
