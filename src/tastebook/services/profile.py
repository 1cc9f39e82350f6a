"""
Tastebook - Profile and dashboard service.

Profile rows live in `users`. Dashboard numbers are assembled from head
counts and the current week's meal plan.
"""

import logging
import time
from datetime import date

from postgrest.exceptions import APIError
from supabase import Client

from tastebook.config import settings
from tastebook.domain.meal_plan import PlannedSlot, count_planned_meals, upcoming_meals
from tastebook.domain.weeks import format_week_start
from tastebook.errors import (
    InvalidInputError,
    NotFoundError,
    StorageError,
    backend_error,
    is_no_rows,
)
from tastebook.models.entities import Recipe, UserProfile
from tastebook.models.validation import UpdateProfileInput

logger = logging.getLogger(__name__)


# =============================================================================
# Profile
# =============================================================================


def get_profile(client: Client, user_id: str) -> UserProfile:
    try:
        result = client.table("users").select("*").eq("id", user_id).single().execute()
    except APIError as e:
        if is_no_rows(e):
            raise NotFoundError("Profile not found")
        logger.error(f"Error fetching profile {user_id}: {e.message}")
        raise backend_error("fetching profile", e)
    return UserProfile.model_validate(result.data)


def update_profile(client: Client, user_id: str, updates: UpdateProfileInput) -> UserProfile:
    """Write the set fields (full_name, bio, avatar_url) to the user's row."""
    data = updates.model_dump(exclude_unset=True)
    if not data:
        return get_profile(client, user_id)

    try:
        result = client.table("users").update(data).eq("id", user_id).execute()
    except APIError as e:
        logger.error(f"Error updating profile {user_id}: {e.message}")
        raise backend_error("updating profile", e)

    if not result.data:
        raise NotFoundError("Profile not found")
    return UserProfile.model_validate(result.data[0])


def upload_avatar(
    client: Client,
    user_id: str,
    data: bytes,
    filename: str,
    content_type: str,
) -> UserProfile:
    """
    Replace the user's avatar.

    Any image type up to `settings.max_avatar_bytes`. The previous file is
    removed first (best effort), the new one stored as `{user_id}-{ms}.{ext}`
    and its public URL saved on the profile.
    """
    if not content_type.startswith("image/"):
        raise InvalidInputError("File must be an image")
    if len(data) > settings.max_avatar_bytes:
        raise InvalidInputError("Image must be smaller than 2MB")

    bucket = client.storage.from_(settings.avatars_bucket)

    current = get_profile(client, user_id)
    if current.avatar_url:
        old_name = current.avatar_url.rstrip("/").split("/")[-1]
        try:
            bucket.remove([old_name])
        except Exception as e:
            logger.warning(f"Could not remove old avatar {old_name}: {e}")

    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else content_type.split("/")[-1]
    path = f"{user_id}-{int(time.time() * 1000)}.{ext}"
    try:
        bucket.upload(path, data, {"content-type": content_type, "cache-control": "3600", "upsert": "true"})
    except Exception as e:
        logger.error(f"Error uploading avatar for {user_id}: {e}")
        raise StorageError(f"Error uploading avatar: {e}")

    avatar_url = bucket.get_public_url(path)
    return update_profile(client, user_id, UpdateProfileInput(avatar_url=avatar_url))


# =============================================================================
# Stats
# =============================================================================


def _count(client: Client, table: str, user_id: str) -> int:
    result = (
        client.table(table)
        .select("*", count="exact", head=True)
        .eq("user_id", user_id)
        .execute()
    )
    return result.count or 0


def get_user_stats(client: Client, user_id: str) -> dict[str, int]:
    try:
        return {
            "recipes_count": _count(client, "recipes", user_id),
            "favorites_count": _count(client, "favorites", user_id),
            "plans_count": _count(client, "meal_plans", user_id),
        }
    except APIError as e:
        logger.error(f"Error fetching stats for {user_id}: {e.message}")
        raise backend_error("fetching stats", e)


def _week_meals(client: Client, user_id: str, today: date) -> dict:
    try:
        result = (
            client.table("meal_plans")
            .select("meals")
            .eq("user_id", user_id)
            .eq("week_start_date", format_week_start(today))
            .single()
            .execute()
        )
    except APIError as e:
        if is_no_rows(e):
            return {}
        raise
    return (result.data or {}).get("meals") or {}


def get_dashboard_stats(client: Client, user_id: str, today: date | None = None) -> dict[str, int]:
    """Recipe and favorite counts, meals planned this week, and total cooking minutes."""
    today = today or date.today()
    try:
        recipes_count = _count(client, "recipes", user_id)
        favorites_count = _count(client, "favorites", user_id)
        planned = count_planned_meals(_week_meals(client, user_id, today))
        times = (
            client.table("recipes")
            .select("prep_time, cook_time")
            .eq("user_id", user_id)
            .execute()
        )
    except APIError as e:
        logger.error(f"Error fetching dashboard stats for {user_id}: {e.message}")
        raise backend_error("fetching dashboard", e)

    total_cooking_time = sum(
        (row.get("prep_time") or 0) + (row.get("cook_time") or 0)
        for row in times.data or []
    )
    return {
        "recipes_count": recipes_count,
        "favorites_count": favorites_count,
        "planned_meals_this_week": planned,
        "total_cooking_time": total_cooking_time,
    }


def get_upcoming_meals(
    client: Client,
    user_id: str,
    today: date | None = None,
    limit: int = 3,
) -> list[dict]:
    """
    Next planned meals of the current week, from today on.

    Each entry is the slot plus its recipe; slots whose recipe no longer
    exists are dropped.
    """
    today = today or date.today()
    try:
        meals = _week_meals(client, user_id, today)
    except APIError as e:
        logger.error(f"Error fetching upcoming meals for {user_id}: {e.message}")
        raise backend_error("fetching upcoming meals", e)

    # Fetch every remaining slot, then trim, so missing recipes don't shorten the result
    slots: list[PlannedSlot] = upcoming_meals(meals, format_week_start(today), today, limit=28)
    if not slots:
        return []

    ids = sorted({slot["recipe_id"] for slot in slots})
    try:
        result = client.table("recipes").select("*").in_("id", ids).execute()
    except APIError as e:
        logger.error(f"Error fetching upcoming recipes for {user_id}: {e.message}")
        raise backend_error("fetching upcoming meals", e)
    recipes = {row["id"]: Recipe.model_validate(row) for row in result.data or []}

    upcoming = [
        {**slot, "recipe": recipes[slot["recipe_id"]]}
        for slot in slots
        if slot["recipe_id"] in recipes
    ]
    return upcoming[:limit]
