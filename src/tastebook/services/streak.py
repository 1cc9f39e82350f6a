"""
Tastebook - Activity streak service.

Activity rows are unique per (user, day, type). The streak itself is
computed in the database by the `calculate_user_streak` function.
"""

import logging
from datetime import date, timedelta

from postgrest.exceptions import APIError
from supabase import Client

from tastebook.errors import backend_error
from tastebook.models.entities import ActivityType

logger = logging.getLogger(__name__)


def record_activity(
    client: Client,
    user_id: str,
    activity_type: ActivityType = "login",
    today: date | None = None,
) -> None:
    """Mark the user active today. Repeats on the same day are ignored."""
    activity_date = (today or date.today()).isoformat()
    try:
        client.table("user_activity").upsert(
            {"user_id": user_id, "activity_date": activity_date, "activity_type": activity_type},
            on_conflict="user_id,activity_date,activity_type",
            ignore_duplicates=True,
        ).execute()
    except APIError as e:
        logger.error(f"Error recording {activity_type} activity for {user_id}: {e.message}")
        raise backend_error("recording activity", e)


def get_current_streak(client: Client, user_id: str) -> int:
    """Consecutive active days ending today. Returns 0 when the RPC fails."""
    try:
        result = client.rpc("calculate_user_streak", {"p_user_id": user_id}).execute()
    except APIError as e:
        logger.error(f"Error calculating streak for {user_id}: {e.message}")
        return 0
    return int(result.data or 0)


def get_activity_history(
    client: Client,
    user_id: str,
    days: int = 365,
    today: date | None = None,
) -> list[date]:
    """Login dates in the last `days` days, newest first. [] on error."""
    start = (today or date.today()) - timedelta(days=days)
    try:
        result = (
            client.table("user_activity")
            .select("activity_date")
            .eq("user_id", user_id)
            .eq("activity_type", "login")
            .gte("activity_date", start.isoformat())
            .order("activity_date", desc=True)
            .execute()
        )
    except APIError as e:
        logger.error(f"Error fetching activity history for {user_id}: {e.message}")
        return []
    return [date.fromisoformat(row["activity_date"][:10]) for row in result.data or []]
