"""
Tastebook - Shopping list edits.

A shopping list is stored as a single JSON array of items. Every edit builds
a new array which is then written back wholesale.
"""

import uuid
from collections.abc import Mapping
from typing import Any

from tastebook.domain.ingredients import (
    INGREDIENT_CATEGORIES,
    categorize_ingredient,
    normalize_ingredient_name,
)
from tastebook.domain.meal_plan import Meals, iter_slots
from tastebook.errors import InvalidInputError, NotFoundError

Item = dict[str, Any]


def new_item(
    name: str,
    quantity: float,
    unit: str = "",
    category: str | None = None,
    from_recipes: list[str] | None = None,
) -> Item:
    """
    Build a list item with a fresh id.

    Items without a category (or filed under "others") are categorized
    from their name.
    """
    name = name.strip()
    if not name:
        raise InvalidInputError("Item name is required")
    if quantity <= 0:
        raise InvalidInputError("Quantity must be greater than 0")

    if not category or category == "others":
        category = categorize_ingredient(name)

    item: Item = {
        "id": str(uuid.uuid4()),
        "name": name,
        "quantity": quantity,
        "unit": unit,
        "category": category,
        "checked": False,
    }
    if from_recipes:
        item["from_recipes"] = from_recipes
    return item


def add_item(items: list[Item], item: Item) -> list[Item]:
    return [*items, item]


def _require(items: list[Item], item_id: str) -> None:
    if not any(item["id"] == item_id for item in items):
        raise NotFoundError("Shopping list item not found")


def toggle_item(items: list[Item], item_id: str) -> list[Item]:
    _require(items, item_id)
    return [
        {**item, "checked": not item.get("checked", False)} if item["id"] == item_id else item
        for item in items
    ]


def remove_item(items: list[Item], item_id: str) -> list[Item]:
    return [item for item in items if item["id"] != item_id]


def update_item(items: list[Item], item_id: str, quantity: float, unit: str) -> list[Item]:
    if quantity <= 0:
        raise InvalidInputError("Quantity must be greater than 0")
    _require(items, item_id)
    return [
        {**item, "quantity": quantity, "unit": unit} if item["id"] == item_id else item
        for item in items
    ]


def clear_checked(items: list[Item]) -> list[Item]:
    """Drop everything already bought."""
    return [item for item in items if not item.get("checked")]


def group_by_category(items: list[Item]) -> dict[str, list[Item]]:
    """Group items by category, categories in order of first appearance."""
    groups: dict[str, list[Item]] = {}
    for item in items:
        groups.setdefault(item.get("category") or "others", []).append(item)
    return groups


# =============================================================================
# Generation from a meal plan
# =============================================================================


def build_items_from_meal_plan(
    meals: Meals,
    recipes_by_id: Mapping[str, Mapping[str, Any]],
) -> list[Item]:
    """
    Turn a week's planned recipes into shopping list items.

    Each recipe's ingredient quantities are scaled by planned servings over
    the recipe's own servings. Lines sharing a normalized name and unit are
    merged; `from_recipes` lists the recipe titles that contributed.
    Slots whose recipe is missing from `recipes_by_id` are skipped.
    """
    merged: dict[tuple[str, str], Item] = {}

    for _day, _meal_type, slot in iter_slots(meals):
        recipe = recipes_by_id.get(slot["recipe_id"])
        if not recipe:
            continue

        base_servings = recipe.get("servings") or 1
        factor = (slot.get("servings") or 1) / base_servings
        title = recipe.get("title", "")

        for ingredient in recipe.get("ingredients") or []:
            name = (ingredient.get("name") or "").strip()
            if not name:
                continue
            unit = ingredient.get("unit") or ""
            quantity = round((ingredient.get("quantity") or 0) * factor, 2)
            category = ingredient.get("category")
            key = (normalize_ingredient_name(name), unit.lower())

            if key in merged:
                line = merged[key]
                line["quantity"] = round(line["quantity"] + quantity, 2)
                if title and title not in line["from_recipes"]:
                    line["from_recipes"].append(title)
            else:
                merged[key] = {
                    "name": name,
                    "quantity": quantity,
                    "unit": unit,
                    # Recipe categories are free text; only reuse known keys
                    "category": category if category in INGREDIENT_CATEGORIES else None,
                    "from_recipes": [title] if title else [],
                }

    return [
        new_item(
            line["name"],
            line["quantity"] or 1,
            line["unit"],
            line["category"],
            line["from_recipes"],
        )
        for line in merged.values()
    ]
