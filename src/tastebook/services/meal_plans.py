"""
Tastebook - Meal plan service.

One row per user and week in `meal_plans`; the week's grid lives in the
`meals` JSON column and is rewritten whole on every edit.
"""

import logging
from datetime import UTC, datetime

from postgrest.exceptions import APIError
from supabase import Client

from tastebook.domain.meal_plan import (
    Meals,
    add_recipe_to_meals,
    empty_meals,
    remove_recipe_from_meals,
)
from tastebook.domain.weeks import DateLike, format_week_start
from tastebook.errors import NotFoundError, backend_error, is_no_rows
from tastebook.models.entities import MealPlan

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


def get_meal_plan(client: Client, user_id: str, week_start_date: DateLike) -> MealPlan | None:
    """Plan for the week containing `week_start_date`, or None."""
    week = format_week_start(week_start_date)
    try:
        result = (
            client.table("meal_plans")
            .select("*")
            .eq("user_id", user_id)
            .eq("week_start_date", week)
            .single()
            .execute()
        )
    except APIError as e:
        if is_no_rows(e):
            return None
        logger.error(f"Error fetching meal plan for {user_id} week {week}: {e.message}")
        raise backend_error("fetching meal plan", e)
    return MealPlan.model_validate(result.data)


def create_meal_plan(client: Client, user_id: str, week_start_date: DateLike) -> MealPlan:
    week = format_week_start(week_start_date)
    try:
        result = (
            client.table("meal_plans")
            .insert({"user_id": user_id, "week_start_date": week, "meals": empty_meals()})
            .execute()
        )
    except APIError as e:
        logger.error(f"Error creating meal plan for {user_id} week {week}: {e.message}")
        raise backend_error("creating meal plan", e)

    logger.info(f"Meal plan created for {user_id} week {week}")
    return MealPlan.model_validate(result.data[0])


def get_or_create_meal_plan(client: Client, user_id: str, week_start_date: DateLike) -> MealPlan:
    plan = get_meal_plan(client, user_id, week_start_date)
    if plan is None:
        plan = create_meal_plan(client, user_id, week_start_date)
    return plan


def update_meal_plan(
    client: Client,
    plan_id: str,
    meals: Meals,
    notes: str | None = None,
) -> MealPlan:
    """Write the whole grid (and notes, when given) back to the plan."""
    data: dict = {"meals": meals, "updated_at": _utc_now()}
    if notes is not None:
        data["notes"] = notes

    try:
        result = client.table("meal_plans").update(data).eq("id", plan_id).execute()
    except APIError as e:
        logger.error(f"Error updating meal plan {plan_id}: {e.message}")
        raise backend_error("updating meal plan", e)

    if not result.data:
        raise NotFoundError("Meal plan not found")
    return MealPlan.model_validate(result.data[0])


def _raw_meals(plan: MealPlan) -> Meals:
    return plan.model_dump(mode="json")["meals"]


def add_recipe_to_meal_plan(
    client: Client,
    user_id: str,
    week_start_date: DateLike,
    day: str,
    meal_type: str,
    recipe_id: str,
    servings: int = 1,
) -> MealPlan:
    """Fill one slot, creating the week's plan if needed."""
    plan = get_or_create_meal_plan(client, user_id, week_start_date)
    meals = add_recipe_to_meals(_raw_meals(plan), day, meal_type, recipe_id, servings)
    return update_meal_plan(client, plan.id, meals)


def remove_recipe_from_meal_plan(
    client: Client,
    user_id: str,
    week_start_date: DateLike,
    day: str,
    meal_type: str,
) -> MealPlan:
    plan = get_meal_plan(client, user_id, week_start_date)
    if plan is None:
        raise NotFoundError("Meal plan not found")
    meals = remove_recipe_from_meals(_raw_meals(plan), day, meal_type)
    return update_meal_plan(client, plan.id, meals)


def delete_meal_plan(client: Client, plan_id: str) -> None:
    try:
        client.table("meal_plans").delete().eq("id", plan_id).execute()
    except APIError as e:
        logger.error(f"Error deleting meal plan {plan_id}: {e.message}")
        raise backend_error("deleting meal plan", e)


def get_user_meal_plans(client: Client, user_id: str) -> list[MealPlan]:
    """All of a user's plans, latest week first."""
    try:
        result = (
            client.table("meal_plans")
            .select("*")
            .eq("user_id", user_id)
            .order("week_start_date", desc=True)
            .execute()
        )
    except APIError as e:
        logger.error(f"Error listing meal plans for {user_id}: {e.message}")
        raise backend_error("listing meal plans", e)
    return [MealPlan.model_validate(row) for row in result.data or []]
