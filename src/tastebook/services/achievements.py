"""
Tastebook - Achievement service.

Reads fall back to empty results when the store errors so the dashboard
still renders.
"""

import logging

from postgrest.exceptions import APIError
from supabase import Client

from tastebook.domain.achievements import ProgressEntry, build_progress
from tastebook.errors import backend_error
from tastebook.models.entities import Achievement, UserAchievement
from tastebook.services.streak import get_current_streak

logger = logging.getLogger(__name__)


def get_all_achievements(client: Client) -> list[Achievement]:
    try:
        result = client.table("achievements").select("*").order("tier").execute()
    except APIError as e:
        logger.error(f"Error fetching achievements: {e.message}")
        return []
    return [Achievement.model_validate(row) for row in result.data or []]


def _unlocked_query(client: Client, user_id: str):
    return (
        client.table("user_achievements")
        .select("*, achievement:achievements(*)")
        .eq("user_id", user_id)
        .order("unlocked_at", desc=True)
    )


def get_user_achievements(client: Client, user_id: str) -> list[UserAchievement]:
    """Achievements the user unlocked, newest first."""
    try:
        result = _unlocked_query(client, user_id).execute()
    except APIError as e:
        logger.error(f"Error fetching achievements for {user_id}: {e.message}")
        return []
    return [UserAchievement.model_validate(row) for row in result.data or []]


def get_recent_achievements(client: Client, user_id: str, limit: int = 3) -> list[UserAchievement]:
    try:
        result = _unlocked_query(client, user_id).limit(limit).execute()
    except APIError as e:
        logger.error(f"Error fetching recent achievements for {user_id}: {e.message}")
        return []
    return [UserAchievement.model_validate(row) for row in result.data or []]


def check_and_unlock_achievements(client: Client, user_id: str) -> list[dict]:
    """
    Ask the database to unlock whatever the user now qualifies for.

    Returns one row per achievement checked:
    `{"achievement_id", "achievement_name", "just_unlocked"}`.
    """
    try:
        result = client.rpc("check_and_unlock_achievements", {"p_user_id": user_id}).execute()
    except APIError as e:
        logger.error(f"Error checking achievements for {user_id}: {e.message}")
        raise backend_error("checking achievements", e)
    return result.data or []


def _count(client: Client, table: str, user_id: str) -> int:
    result = (
        client.table(table)
        .select("*", count="exact", head=True)
        .eq("user_id", user_id)
        .execute()
    )
    return result.count or 0


def get_achievement_progress(client: Client, user_id: str) -> dict[str, ProgressEntry]:
    """Current counts and the next achievement to aim for, per category."""
    try:
        counts = {
            "recipes": _count(client, "recipes", user_id),
            "favorites": _count(client, "favorites", user_id),
            "plans": _count(client, "meal_plans", user_id),
        }
    except APIError as e:
        logger.error(f"Error counting progress for {user_id}: {e.message}")
        counts = {}
    counts["streak"] = get_current_streak(client, user_id)

    unlocked_ids = {ua.achievement_id for ua in get_user_achievements(client, user_id)}
    return build_progress(counts, get_all_achievements(client), unlocked_ids)
