"""
Shopping list API endpoints.

Item edits are applied to the cached list optimistically; a failed write
restores the previous list.
"""

from collections.abc import Callable
from datetime import date

from fastapi import APIRouter, Depends
from supabase import Client

from tastebook.cache import SHOPPING_LIST_STALE, QueryCache, get_query_cache, shopping_list_key
from tastebook.domain import shopping as edits
from tastebook.domain.shopping import Item, group_by_category
from tastebook.domain.weeks import format_week_start
from tastebook.errors import NotFoundError
from tastebook.models.entities import ShoppingList
from tastebook.models.validation import ShoppingItemInput, ShoppingItemUpdate
from tastebook.services import meal_plans as meal_plan_service
from tastebook.services import shopping as shopping_service
from tastebook.web.auth import AuthenticatedUser, get_current_user, get_user_client
from tastebook.web.notifications import MutationResponse, success

router = APIRouter(prefix="/shopping-list", tags=["shopping-list"])


def _edit_cached_items(edit: Callable[[list[Item]], list[Item]]) -> Callable[[ShoppingList | None], ShoppingList | None]:
    def updater(current: ShoppingList | None) -> ShoppingList | None:
        if current is None:
            return None
        try:
            items = edit([item.model_dump(exclude_none=True) for item in current.items])
        except NotFoundError:
            # cached copy is behind the store; let the write decide
            return current
        return ShoppingList.model_validate({**current.model_dump(), "items": items})
    return updater


def _apply(
    cache: QueryCache,
    user_id: str,
    edit: Callable[[list[Item]], list[Item]],
    write: Callable[[], ShoppingList],
) -> ShoppingList:
    key = shopping_list_key(user_id)
    with cache.optimistic(key, _edit_cached_items(edit)):
        updated = write()
    cache.set(key, updated, SHOPPING_LIST_STALE)
    return updated


@router.get("")
async def get_shopping_list(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> dict:
    """The current list, plus its items grouped by category."""
    shopping_list = cache.get_or_fetch(
        shopping_list_key(user.id),
        lambda: shopping_service.get_or_create_shopping_list(client, user.id),
        SHOPPING_LIST_STALE,
    )
    items = [item.model_dump() for item in shopping_list.items]
    return {
        "list": shopping_list,
        "groups": group_by_category(items),
        "checked_count": sum(1 for item in items if item["checked"]),
    }


@router.post("/items", status_code=201)
async def add_item(
    body: ShoppingItemInput,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    updated = shopping_service.add_item(client, user.id, body)
    cache.set(shopping_list_key(user.id), updated, SHOPPING_LIST_STALE)
    return success("Item added", updated)


@router.post("/items/{item_id}/toggle")
async def toggle_item(
    item_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    updated = _apply(
        cache,
        user.id,
        lambda items: edits.toggle_item(items, item_id),
        lambda: shopping_service.toggle_item(client, user.id, item_id),
    )
    return success("Item updated", updated)


@router.patch("/items/{item_id}")
async def update_item(
    item_id: str,
    body: ShoppingItemUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    updated = _apply(
        cache,
        user.id,
        lambda items: edits.update_item(items, item_id, body.quantity, body.unit),
        lambda: shopping_service.update_item(client, user.id, item_id, body.quantity, body.unit),
    )
    return success("Item updated", updated)


@router.delete("/items/{item_id}")
async def remove_item(
    item_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    updated = _apply(
        cache,
        user.id,
        lambda items: edits.remove_item(items, item_id),
        lambda: shopping_service.remove_item(client, user.id, item_id),
    )
    return success("Item removed", updated)


@router.post("/clear-checked")
async def clear_checked(
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    updated = _apply(
        cache,
        user.id,
        edits.clear_checked,
        lambda: shopping_service.clear_checked(client, user.id),
    )
    return success("Checked items cleared", updated)


@router.post("/generate")
async def generate_from_plan(
    week: date | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    """Add the ingredients of the week's planned recipes to the list."""
    week_start = format_week_start(week or date.today())
    plan = meal_plan_service.get_meal_plan(client, user.id, week_start)
    if plan is None:
        raise NotFoundError("There is no meal plan for that week")

    updated = shopping_service.generate_from_meal_plan(client, user.id, plan)
    cache.set(shopping_list_key(user.id), updated, SHOPPING_LIST_STALE)
    return success("Shopping list generated from the meal plan", updated)
