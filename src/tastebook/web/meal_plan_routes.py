"""
Meal plan API endpoints.

Weeks are addressed by any date inside them; the Monday is the key.
Slot edits are applied to the cached week optimistically.
"""

from collections.abc import Callable
from datetime import date

from fastapi import APIRouter, Depends
from supabase import Client

from tastebook.cache import (
    MEAL_PLAN_STALE,
    QueryCache,
    dashboard_stats_key,
    get_query_cache,
    meal_plan_key,
    meal_plan_list_key,
    upcoming_meals_key,
)
from tastebook.domain.meal_plan import Meals, add_recipe_to_meals, remove_recipe_from_meals
from tastebook.domain.weeks import format_date_range, format_week_start, get_week_range, shift_week
from tastebook.models.entities import MealPlan
from tastebook.models.validation import AddMealInput, MealPlanUpdateInput, RemoveMealInput
from tastebook.services import meal_plans as meal_plan_service
from tastebook.web.auth import AuthenticatedUser, get_current_user, get_user_client
from tastebook.web.notifications import MutationResponse, success

router = APIRouter(prefix="/meal-plans", tags=["meal-plans"])


def _week_view(week_start: str, plan: MealPlan | None) -> dict:
    start, end = get_week_range(week_start)
    return {
        "week_start": week_start,
        "label": format_date_range(start, end),
        "previous_week": shift_week(week_start, -1),
        "next_week": shift_week(week_start, 1),
        "plan": plan,
    }


def _edit_cached_meals(edit: Callable[[Meals], Meals]) -> Callable[[dict | None], dict | None]:
    """Updater applying a grid edit to a cached week view."""
    def updater(view: dict | None) -> dict | None:
        if not view or view.get("plan") is None:
            return view
        raw = view["plan"].model_dump(mode="json")
        raw["meals"] = edit(raw["meals"])
        return {**view, "plan": MealPlan.model_validate(raw)}
    return updater


def _invalidate_week(cache: QueryCache, user_id: str) -> None:
    cache.invalidate(
        meal_plan_list_key(user_id),
        upcoming_meals_key(user_id),
        dashboard_stats_key(user_id),
    )


@router.get("")
async def get_week(
    week: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> dict:
    """The plan for the week containing `week` (default: this week), or a null plan."""
    week_start = format_week_start(week or date.today())
    return cache.get_or_fetch(
        meal_plan_key(user.id, week_start),
        lambda: _week_view(week_start, meal_plan_service.get_meal_plan(client, user.id, week_start)),
        MEAL_PLAN_STALE,
    )


@router.get("/history")
async def list_plans(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> list[MealPlan]:
    return cache.get_or_fetch(
        meal_plan_list_key(user.id),
        lambda: meal_plan_service.get_user_meal_plans(client, user.id),
        MEAL_PLAN_STALE,
    )


@router.post("/meals")
async def add_meal(
    body: AddMealInput,
    week: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    week_start = format_week_start(week or date.today())
    key = meal_plan_key(user.id, week_start)
    edit = _edit_cached_meals(
        lambda meals: add_recipe_to_meals(meals, body.day, body.meal_type, body.recipe_id, body.servings)
    )

    with cache.optimistic(key, edit):
        plan = meal_plan_service.add_recipe_to_meal_plan(
            client, user.id, week_start, body.day, body.meal_type, body.recipe_id, body.servings
        )

    cache.set(key, _week_view(week_start, plan), MEAL_PLAN_STALE)
    _invalidate_week(cache, user.id)
    return success("Recipe added to the plan", plan)


@router.post("/meals/remove")
async def remove_meal(
    body: RemoveMealInput,
    week: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    week_start = format_week_start(week or date.today())
    key = meal_plan_key(user.id, week_start)
    edit = _edit_cached_meals(lambda meals: remove_recipe_from_meals(meals, body.day, body.meal_type))

    with cache.optimistic(key, edit):
        plan = meal_plan_service.remove_recipe_from_meal_plan(
            client, user.id, week_start, body.day, body.meal_type
        )

    cache.set(key, _week_view(week_start, plan), MEAL_PLAN_STALE)
    _invalidate_week(cache, user.id)
    return success("Recipe removed from the plan", plan)


@router.put("/{plan_id}")
async def update_plan(
    plan_id: str,
    body: MealPlanUpdateInput,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    plan = meal_plan_service.update_meal_plan(client, plan_id, body.grid(), body.notes)
    cache.invalidate(meal_plan_key(user.id))
    _invalidate_week(cache, user.id)
    return success("Meal plan saved", plan)


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    meal_plan_service.delete_meal_plan(client, plan_id)
    cache.invalidate(meal_plan_key(user.id))
    _invalidate_week(cache, user.id)
    return success("Meal plan deleted")
