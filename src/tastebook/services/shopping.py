"""
Tastebook - Shopping list service.

Each mutation reads the user's current list, applies one pure edit from
`tastebook.domain.shopping`, and writes the item array back.
"""

import logging
from datetime import UTC, datetime

from postgrest.exceptions import APIError
from supabase import Client

from tastebook.domain import shopping as edits
from tastebook.domain.shopping import Item
from tastebook.errors import NotFoundError, backend_error, is_no_rows
from tastebook.models.entities import MealPlan, ShoppingList
from tastebook.models.validation import ShoppingItemInput

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


def _latest_list(client: Client, user_id: str) -> dict | None:
    try:
        result = (
            client.table("shopping_lists")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(1)
            .single()
            .execute()
        )
    except APIError as e:
        if is_no_rows(e):
            return None
        logger.error(f"Error fetching shopping list for {user_id}: {e.message}")
        raise backend_error("fetching shopping list", e)
    return result.data


def get_or_create_shopping_list(client: Client, user_id: str) -> ShoppingList:
    """The user's most recent list; an empty one is created on first use."""
    row = _latest_list(client, user_id)
    if row is not None:
        return ShoppingList.model_validate(row)

    try:
        result = client.table("shopping_lists").insert({"user_id": user_id, "items": []}).execute()
    except APIError as e:
        logger.error(f"Error creating shopping list for {user_id}: {e.message}")
        raise backend_error("creating shopping list", e)

    logger.info(f"Shopping list created for {user_id}")
    return ShoppingList.model_validate(result.data[0])


def save_items(
    client: Client,
    list_id: str,
    items: list[Item],
    meal_plan_id: str | None = None,
) -> ShoppingList:
    """Replace the list's items."""
    data: dict = {"items": items, "updated_at": _utc_now()}
    if meal_plan_id:
        data["meal_plan_id"] = meal_plan_id

    try:
        result = client.table("shopping_lists").update(data).eq("id", list_id).execute()
    except APIError as e:
        logger.error(f"Error updating shopping list {list_id}: {e.message}")
        raise backend_error("updating shopping list", e)

    if not result.data:
        raise NotFoundError("Shopping list not found")
    return ShoppingList.model_validate(result.data[0])


def _current_items(shopping_list: ShoppingList) -> list[Item]:
    return [item.model_dump(exclude_none=True) for item in shopping_list.items]


def add_item(client: Client, user_id: str, item: ShoppingItemInput) -> ShoppingList:
    shopping_list = get_or_create_shopping_list(client, user_id)
    new = edits.new_item(item.name, item.quantity, item.unit, item.category)
    return save_items(client, shopping_list.id, edits.add_item(_current_items(shopping_list), new))


def toggle_item(client: Client, user_id: str, item_id: str) -> ShoppingList:
    shopping_list = get_or_create_shopping_list(client, user_id)
    return save_items(client, shopping_list.id, edits.toggle_item(_current_items(shopping_list), item_id))


def remove_item(client: Client, user_id: str, item_id: str) -> ShoppingList:
    shopping_list = get_or_create_shopping_list(client, user_id)
    return save_items(client, shopping_list.id, edits.remove_item(_current_items(shopping_list), item_id))


def update_item(
    client: Client,
    user_id: str,
    item_id: str,
    quantity: float,
    unit: str,
) -> ShoppingList:
    shopping_list = get_or_create_shopping_list(client, user_id)
    items = edits.update_item(_current_items(shopping_list), item_id, quantity, unit)
    return save_items(client, shopping_list.id, items)


def clear_checked(client: Client, user_id: str) -> ShoppingList:
    shopping_list = get_or_create_shopping_list(client, user_id)
    return save_items(client, shopping_list.id, edits.clear_checked(_current_items(shopping_list)))


def generate_from_meal_plan(client: Client, user_id: str, meal_plan: MealPlan) -> ShoppingList:
    """
    Append the ingredients of every recipe planned this week.

    Recipes are fetched in one query; slots pointing at deleted recipes are
    skipped. The list is linked to the plan.
    """
    meals = meal_plan.model_dump(mode="json")["meals"]
    recipe_ids = sorted({
        slot["recipe_id"]
        for day_meals in meals.values()
        for slot in day_meals.values()
    })

    recipes_by_id: dict[str, dict] = {}
    if recipe_ids:
        try:
            result = (
                client.table("recipes")
                .select("id, title, servings, ingredients")
                .in_("id", recipe_ids)
                .execute()
            )
        except APIError as e:
            logger.error(f"Error fetching planned recipes for {meal_plan.id}: {e.message}")
            raise backend_error("fetching planned recipes", e)
        recipes_by_id = {row["id"]: row for row in result.data or []}

    generated = edits.build_items_from_meal_plan(meals, recipes_by_id)
    shopping_list = get_or_create_shopping_list(client, user_id)
    items = _current_items(shopping_list)
    for item in generated:
        items = edits.add_item(items, item)

    logger.info(f"Added {len(generated)} items from meal plan {meal_plan.id} for {user_id}")
    return save_items(client, shopping_list.id, items, meal_plan_id=meal_plan.id)
