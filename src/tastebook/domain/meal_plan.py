"""
Tastebook - Weekly meal grid.

The grid is a 7 x 4 mapping: day key -> meal type -> {"recipe_id", "servings"}.
Edits return a new mapping so the caller's copy (often the cached one)
stays untouched until the store confirms the write.
"""

import copy
from collections.abc import Iterator
from datetime import date
from typing import Any, TypedDict

from tastebook.domain.weeks import DAY_KEYS, DateLike, week_dates
from tastebook.errors import InvalidInputError

MEAL_TYPES = ["desayuno", "comida", "cena", "snack"]
MEAL_TYPE_LABELS = {
    "desayuno": "Desayuno",
    "comida": "Comida",
    "cena": "Cena",
    "snack": "Snack",
}

Meals = dict[str, dict[str, dict[str, Any]]]


class PlannedSlot(TypedDict):
    date: date
    day: str
    meal_type: str
    recipe_id: str
    servings: int


def empty_meals() -> Meals:
    """A week with every day present and no slots filled."""
    return {day: {} for day in DAY_KEYS}


def _check_slot(day: str, meal_type: str) -> None:
    if day not in DAY_KEYS:
        raise InvalidInputError(f"Unknown day '{day}'")
    if meal_type not in MEAL_TYPES:
        raise InvalidInputError(f"Unknown meal type '{meal_type}'")


def add_recipe_to_meals(
    meals: Meals,
    day: str,
    meal_type: str,
    recipe_id: str,
    servings: int = 1,
) -> Meals:
    """Return a copy of `meals` with the slot set to `recipe_id`."""
    _check_slot(day, meal_type)
    if servings < 1:
        raise InvalidInputError("Servings must be at least 1")

    updated = copy.deepcopy(meals)
    updated.setdefault(day, {})[meal_type] = {
        "recipe_id": recipe_id,
        "servings": servings,
    }
    return updated


def remove_recipe_from_meals(meals: Meals, day: str, meal_type: str) -> Meals:
    """Return a copy of `meals` with the slot cleared. Clearing an empty slot is a no-op."""
    _check_slot(day, meal_type)
    updated = copy.deepcopy(meals)
    updated.get(day, {}).pop(meal_type, None)
    return updated


def iter_slots(meals: Meals) -> Iterator[tuple[str, str, dict[str, Any]]]:
    """Filled slots in grid order: Monday..Sunday, then breakfast..snack."""
    for day in DAY_KEYS:
        day_meals = meals.get(day) or {}
        for meal_type in MEAL_TYPES:
            slot = day_meals.get(meal_type)
            if slot:
                yield day, meal_type, slot


def count_planned_meals(meals: Meals) -> int:
    return sum(1 for _ in iter_slots(meals))


def upcoming_meals(
    meals: Meals,
    week_start: DateLike,
    today: date,
    limit: int = 3,
) -> list[PlannedSlot]:
    """Slots dated today or later, earliest first."""
    dates = week_dates(week_start)
    upcoming = [
        PlannedSlot(
            date=dates[day],
            day=day,
            meal_type=meal_type,
            recipe_id=slot["recipe_id"],
            servings=slot.get("servings", 1),
        )
        for day, meal_type, slot in iter_slots(meals)
        if dates[day] >= today
    ]
    # iter_slots already yields (date, meal type) order
    return upcoming[:limit]
