"""Tastebook - Favorites service."""

import logging
from typing import Literal

from postgrest.exceptions import APIError
from supabase import Client

from tastebook.errors import backend_error
from tastebook.models.entities import Favorite

logger = logging.getLogger(__name__)

RECIPE_SUMMARY_COLUMNS = "id,title,description,image_url,prep_time,cook_time,servings,difficulty,tags"


def get_favorites(client: Client, user_id: str) -> list[Favorite]:
    """User's favorites with a summary of each recipe, newest first."""
    try:
        result = (
            client.table("favorites")
            .select(f"*, recipe:recipes({RECIPE_SUMMARY_COLUMNS})")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
    except APIError as e:
        logger.error(f"Error fetching favorites for {user_id}: {e.message}")
        raise backend_error("fetching favorites", e)
    return [Favorite.model_validate(row) for row in result.data or []]


def is_favorite(client: Client, user_id: str, recipe_id: str) -> bool:
    """Whether the user saved the recipe. Lookup errors count as "no"."""
    try:
        result = (
            client.table("favorites")
            .select("id")
            .eq("user_id", user_id)
            .eq("recipe_id", recipe_id)
            .maybe_single()
            .execute()
        )
    except APIError as e:
        logger.error(f"Error checking favorite {recipe_id} for {user_id}: {e.message}")
        return False
    return bool(result is not None and result.data)


def toggle_favorite(
    client: Client,
    user_id: str,
    recipe_id: str,
    is_favorite: bool,
) -> Literal["added", "removed"]:
    """
    Flip a favorite given its current state.

    `is_favorite` is what the caller currently shows: True removes the row,
    False inserts one.
    """
    try:
        if is_favorite:
            (
                client.table("favorites")
                .delete()
                .eq("user_id", user_id)
                .eq("recipe_id", recipe_id)
                .execute()
            )
            logger.info(f"Favorite {recipe_id} removed for {user_id}")
            return "removed"

        client.table("favorites").insert({"user_id": user_id, "recipe_id": recipe_id}).execute()
        logger.info(f"Favorite {recipe_id} added for {user_id}")
        return "added"
    except APIError as e:
        logger.error(f"Error toggling favorite {recipe_id} for {user_id}: {e.message}")
        raise backend_error("updating favorites", e)
