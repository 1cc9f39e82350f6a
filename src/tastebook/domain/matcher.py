"""
Tastebook - Ingredient matcher.

Ranks recipes by how many of their ingredients the user already has.
A recipe ingredient counts as available when its normalized name and any
selected ingredient contain one another.
"""

from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, Field

from tastebook.domain.ingredients import normalize_ingredient_name
from tastebook.models.entities import Ingredient, Recipe


class RecipeMatch(BaseModel):
    """How well one recipe fits the selected ingredients."""

    recipe: Recipe
    match_percentage: float
    matching_ingredients: list[str] = Field(default_factory=list)
    missing_ingredients: list[Ingredient] = Field(default_factory=list)
    total_ingredients: int = 0


def _is_available(ingredient_name: str, selected: list[str]) -> bool:
    normalized = normalize_ingredient_name(ingredient_name)
    return any(
        term in normalized or normalized in term
        for term in selected
    )


def normalize_selection(selected: Iterable[str]) -> list[str]:
    """Normalize user selections, dropping blanks (a blank term would match everything)."""
    normalized = (normalize_ingredient_name(s) for s in selected)
    return [s for s in normalized if s]


def match_recipe(recipe: Recipe, selected: list[str]) -> RecipeMatch:
    """
    Score a single recipe against already-normalized selections.

    Recipes without ingredients score 0%.
    """
    total = len(recipe.ingredients)
    if total == 0:
        return RecipeMatch(recipe=recipe, match_percentage=0, total_ingredients=0)

    matching: list[str] = []
    missing: list[Ingredient] = []
    for ingredient in recipe.ingredients:
        if _is_available(ingredient.name, selected):
            matching.append(ingredient.name)
        else:
            missing.append(ingredient)

    return RecipeMatch(
        recipe=recipe,
        match_percentage=len(matching) / total * 100,
        matching_ingredients=matching,
        missing_ingredients=missing,
        total_ingredients=total,
    )


def rank_matches(
    recipes: Iterable[Recipe],
    selected: Iterable[str],
    limit: int = 10,
    min_match_percentage: float = 0,
) -> list[RecipeMatch]:
    """
    Match every recipe, drop those under the threshold and sort.

    Order: match percentage descending, then rating descending (unrated
    recipes count as 0). Python's sort is stable, so ties keep input order.
    """
    terms = normalize_selection(selected)
    matches = [match_recipe(recipe, terms) for recipe in recipes]
    kept = [m for m in matches if m.match_percentage >= min_match_percentage]
    kept.sort(key=lambda m: (-m.match_percentage, -(m.recipe.rating_avg or 0)))
    return kept[:limit]


def common_ingredients(recipes: Iterable[Recipe], limit: int = 50) -> list[str]:
    """Most frequent normalized ingredient names across `recipes`."""
    frequency: Counter[str] = Counter()
    for recipe in recipes:
        for ingredient in recipe.ingredients:
            frequency[normalize_ingredient_name(ingredient.name)] += 1
    return [name for name, _ in frequency.most_common(limit)]
