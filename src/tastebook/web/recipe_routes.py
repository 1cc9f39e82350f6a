"""
Recipe API endpoints.

List, detail, create, update, delete and image upload. Reads go through
the query cache; writes invalidate the recipe key family.
"""

from fastapi import APIRouter, Depends, Query, Request
from supabase import Client

from tastebook.cache import (
    POPULAR_RECIPES_STALE,
    RECIPE_DETAIL_STALE,
    RECIPE_LIST_STALE,
    RECIPE_LISTS,
    QueryCache,
    dashboard_stats_key,
    get_query_cache,
    popular_recipes_key,
    recipe_detail_key,
    recipe_list_key,
    reviews_key,
    user_stats_key,
)
from tastebook.errors import NotFoundError
from tastebook.models.entities import Difficulty, Recipe, Review
from tastebook.models.validation import (
    CreateRecipeInput,
    RecipeFilters,
    RecipeSortBy,
    SortOrder,
    UpdateRecipeInput,
)
from tastebook.services import recipes as recipe_service
from tastebook.services import reviews as review_service
from tastebook.web.auth import AuthenticatedUser, get_current_user, get_public_client, get_user_client
from tastebook.web.notifications import MutationResponse, success

router = APIRouter(prefix="/recipes", tags=["recipes"])


def _invalidate_user_recipes(cache: QueryCache, user_id: str) -> None:
    cache.invalidate(RECIPE_LISTS, user_stats_key(user_id), dashboard_stats_key(user_id))


# =============================================================================
# Reads
# =============================================================================


@router.get("")
async def list_recipes(
    search: str | None = None,
    tags: list[str] | None = Query(None),
    max_time: int | None = Query(None, gt=0),
    difficulty: Difficulty | None = None,
    max_calories: float | None = Query(None, gt=0),
    is_public: bool | None = None,
    user_id: str | None = None,
    sort_by: RecipeSortBy = "created_at",
    sort_order: SortOrder = "desc",
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> list[Recipe]:
    filters = RecipeFilters(
        search=search,
        tags=tags,
        max_time=max_time,
        difficulty=difficulty,
        max_calories=max_calories,
        is_public=is_public,
        user_id=user_id,
    )
    key = recipe_list_key(user.id, (*filters.cache_key(), sort_by, sort_order))
    return cache.get_or_fetch(
        key,
        lambda: recipe_service.fetch_recipes(client, filters, sort_by, sort_order, viewer_id=user.id),
        RECIPE_LIST_STALE,
    )


@router.get("/popular")
async def popular_recipes(
    limit: int = Query(5, gt=0, le=50),
    client: Client = Depends(get_public_client),
    cache: QueryCache = Depends(get_query_cache),
) -> list[Recipe]:
    return cache.get_or_fetch(
        popular_recipes_key(limit),
        lambda: recipe_service.fetch_popular_recipes(client, limit),
        POPULAR_RECIPES_STALE,
    )


@router.get("/{recipe_id}")
async def get_recipe(
    recipe_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> Recipe:
    recipe = cache.get_or_fetch(
        recipe_detail_key(recipe_id, user.id),
        lambda: recipe_service.fetch_recipe_by_id(client, recipe_id),
        RECIPE_DETAIL_STALE,
    )
    if recipe is None:
        cache.invalidate(recipe_detail_key(recipe_id))
        raise NotFoundError("Recipe not found")
    return recipe


@router.get("/{recipe_id}/reviews")
async def list_reviews(
    recipe_id: str,
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> list[Review]:
    return cache.get_or_fetch(reviews_key(recipe_id), lambda: review_service.get_reviews(client, recipe_id))


@router.get("/{recipe_id}/rating")
async def recipe_rating(
    recipe_id: str,
    client: Client = Depends(get_user_client),
) -> dict:
    return review_service.get_average_rating(client, recipe_id)


# =============================================================================
# Writes
# =============================================================================


@router.post("", status_code=201)
async def create_recipe(
    body: CreateRecipeInput,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    recipe = recipe_service.create_recipe(client, body, user.id)
    _invalidate_user_recipes(cache, user.id)
    return success("Recipe created", recipe)


@router.patch("/{recipe_id}")
async def update_recipe(
    recipe_id: str,
    body: UpdateRecipeInput,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    recipe = recipe_service.update_recipe(client, recipe_id, body, user.id)
    cache.invalidate(recipe_detail_key(recipe_id))
    _invalidate_user_recipes(cache, user.id)
    return success("Recipe updated", recipe)


@router.delete("/{recipe_id}")
async def delete_recipe(
    recipe_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    recipe_service.delete_recipe(client, recipe_id, user.id)
    cache.invalidate(recipe_detail_key(recipe_id), reviews_key(recipe_id))
    _invalidate_user_recipes(cache, user.id)
    return success("Recipe deleted")


@router.post("/images", status_code=201)
async def upload_image(
    request: Request,
    filename: str,
    recipe_id: str | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
) -> MutationResponse:
    """
    Upload a recipe photo.

    The request body is the raw file; its type comes from Content-Type.
    """
    data = await request.body()
    content_type = request.headers.get("content-type", "")
    url = recipe_service.upload_recipe_image(client, user.id, data, filename, content_type, recipe_id)
    return success("Image uploaded", {"url": url})
