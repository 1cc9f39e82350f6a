"""
Tastebook - Ingredient matcher queries.

Loads public recipes and hands them to the pure matcher.
"""

import logging
from collections.abc import Iterable

from postgrest.exceptions import APIError
from supabase import Client

from tastebook.domain.matcher import RecipeMatch, common_ingredients, normalize_selection, rank_matches
from tastebook.errors import backend_error
from tastebook.models.entities import Recipe

logger = logging.getLogger(__name__)


def _public_recipes(client: Client, columns: str = "*", limit: int | None = None) -> list[Recipe]:
    query = (
        client.table("recipes")
        .select(columns)
        .eq("is_public", True)
        .order("rating_avg", desc=True, nullsfirst=False)
    )
    if limit:
        query = query.limit(limit)
    result = query.execute()
    return [Recipe.model_validate(row) for row in result.data or []]


def find_matching_recipes(
    client: Client,
    ingredients: Iterable[str],
    limit: int = 10,
    min_match_percentage: float = 0,
) -> list[RecipeMatch]:
    """Best public recipes for what the user has at hand."""
    selected = list(ingredients)
    if not normalize_selection(selected):
        return []

    try:
        recipes = _public_recipes(client)
    except APIError as e:
        logger.error(f"Error loading recipes for matching: {e.message}")
        raise backend_error("searching recipes", e)

    return rank_matches(recipes, selected, limit, min_match_percentage)


def get_common_ingredients(client: Client, limit: int = 50) -> list[str]:
    """Most used ingredient names across the top 100 public recipes."""
    try:
        recipes = _public_recipes(client, "id, title, ingredients", limit=100)
    except APIError as e:
        logger.error(f"Error loading common ingredients: {e.message}")
        raise backend_error("loading ingredients", e)
    return common_ingredients(recipes, limit)
