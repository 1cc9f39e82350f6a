"""
Tastebook - Review service.

Reviews carry a 1-5 rating. The recipe's `rating_avg` and `rating_count`
are recomputed from the reviews after every create or delete.
"""

import logging

from postgrest.exceptions import APIError
from supabase import Client

from tastebook.domain.reviews import rating_summary
from tastebook.errors import NotFoundError, backend_error, is_no_rows
from tastebook.models.entities import Review
from tastebook.models.validation import CreateReviewInput

logger = logging.getLogger(__name__)


def get_reviews(client: Client, recipe_id: str) -> list[Review]:
    try:
        result = (
            client.table("reviews")
            .select("*, user:users(full_name, avatar_url)")
            .eq("recipe_id", recipe_id)
            .order("created_at", desc=True)
            .execute()
        )
    except APIError as e:
        logger.error(f"Error fetching reviews for recipe {recipe_id}: {e.message}")
        raise backend_error("fetching reviews", e)
    return [Review.model_validate(row) for row in result.data or []]


def _ratings(client: Client, recipe_id: str) -> list[int]:
    result = client.table("reviews").select("rating").eq("recipe_id", recipe_id).execute()
    return [row["rating"] for row in result.data or []]


def update_recipe_stats(client: Client, recipe_id: str) -> tuple[float, int]:
    """Recompute and store the recipe's rating average and count."""
    try:
        average, count = rating_summary(_ratings(client, recipe_id))
        client.table("recipes").update(
            {"rating_avg": average, "rating_count": count}
        ).eq("id", recipe_id).execute()
    except APIError as e:
        logger.error(f"Error updating rating stats for recipe {recipe_id}: {e.message}")
        raise backend_error("updating recipe rating", e)
    return average, count


def get_average_rating(client: Client, recipe_id: str) -> dict:
    """
    Rating average and count computed from the reviews.

    The values are also written back to the recipe so stale counters heal
    on read.
    """
    average, count = update_recipe_stats(client, recipe_id)
    return {"average": average, "count": count}


def create_review(client: Client, user_id: str, review: CreateReviewInput) -> Review:
    data = review.model_dump()
    data["user_id"] = user_id

    try:
        result = client.table("reviews").insert(data).execute()
    except APIError as e:
        logger.error(f"Error creating review on {review.recipe_id}: {e.message}")
        raise backend_error("creating review", e)

    update_recipe_stats(client, review.recipe_id)
    logger.info(f"Review on {review.recipe_id} created by {user_id}")
    return Review.model_validate(result.data[0])


def delete_review(client: Client, review_id: str) -> None:
    """Delete a review and refresh its recipe's rating."""
    try:
        existing = (
            client.table("reviews")
            .select("recipe_id")
            .eq("id", review_id)
            .single()
            .execute()
        )
    except APIError as e:
        if is_no_rows(e):
            raise NotFoundError("Review not found")
        logger.error(f"Error fetching review {review_id}: {e.message}")
        raise backend_error("deleting review", e)

    recipe_id = existing.data["recipe_id"]
    try:
        client.table("reviews").delete().eq("id", review_id).execute()
    except APIError as e:
        logger.error(f"Error deleting review {review_id}: {e.message}")
        raise backend_error("deleting review", e)

    update_recipe_stats(client, recipe_id)
