"""Ingredient matcher API endpoints."""

from fastapi import APIRouter, Depends, Query
from supabase import Client

from tastebook.cache import COMMON_INGREDIENTS_STALE, QueryCache, common_ingredients_key, get_query_cache
from tastebook.domain.ingredients import categorize_ingredient, category_info
from tastebook.domain.matcher import RecipeMatch
from tastebook.models.validation import MatchRequest
from tastebook.services import matcher as matcher_service
from tastebook.web.auth import get_public_client

router = APIRouter(prefix="/matcher", tags=["matcher"])


@router.post("")
async def match_recipes(
    body: MatchRequest,
    client: Client = Depends(get_public_client),
) -> list[RecipeMatch]:
    return matcher_service.find_matching_recipes(
        client, body.ingredients, body.limit, body.min_match_percentage
    )


@router.get("/common-ingredients")
async def common_ingredients(
    limit: int = Query(20, gt=0, le=100),
    client: Client = Depends(get_public_client),
    cache: QueryCache = Depends(get_query_cache),
) -> list[str]:
    return cache.get_or_fetch(
        (*common_ingredients_key(), limit),
        lambda: matcher_service.get_common_ingredients(client, limit),
        COMMON_INGREDIENTS_STALE,
    )


@router.get("/categorize")
async def categorize(name: str) -> dict:
    category = categorize_ingredient(name)
    return {"name": name, "category": category, **category_info(category)}
