"""Review API endpoints."""

from fastapi import APIRouter, Depends
from supabase import Client

from tastebook.cache import QueryCache, get_query_cache, recipe_detail_key, reviews_key
from tastebook.models.validation import CreateReviewInput
from tastebook.services import reviews as review_service
from tastebook.web.auth import AuthenticatedUser, get_current_user, get_user_client
from tastebook.web.notifications import MutationResponse, success

router = APIRouter(prefix="/reviews", tags=["reviews"])


def _invalidate_recipe(cache: QueryCache, recipe_id: str) -> None:
    cache.invalidate(reviews_key(recipe_id), recipe_detail_key(recipe_id), ("popular-recipes",))


@router.post("", status_code=201)
async def create_review(
    body: CreateReviewInput,
    user: AuthenticatedUser = Depends(get_current_user),
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    review = review_service.create_review(client, user.id, body)
    _invalidate_recipe(cache, body.recipe_id)
    return success("Review published", review)


@router.delete("/{review_id}")
async def delete_review(
    review_id: str,
    recipe_id: str | None = None,
    client: Client = Depends(get_user_client),
    cache: QueryCache = Depends(get_query_cache),
) -> MutationResponse:
    review_service.delete_review(client, review_id)
    if recipe_id:
        _invalidate_recipe(cache, recipe_id)
    else:
        cache.invalidate(("reviews",), ("recipes", "detail"), ("popular-recipes",))
    return success("Review deleted")
