"""
Tastebook - Recipe service.

CRUD over the `recipes` table plus image uploads to Supabase Storage.
Ownership checks happen here before writes; RLS enforces them again
server-side.
"""

import logging
import secrets
import time
from datetime import UTC, datetime

from postgrest.exceptions import APIError
from supabase import Client

from tastebook.config import settings
from tastebook.errors import (
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    backend_error,
    is_no_rows,
)
from tastebook.models.entities import Recipe
from tastebook.models.validation import (
    CreateRecipeInput,
    RecipeFilters,
    RecipeSortBy,
    SortOrder,
    UpdateRecipeInput,
)

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}


def _utc_now() -> str:
    """Get current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


# =============================================================================
# Reads
# =============================================================================


def fetch_recipes(
    client: Client,
    filters: RecipeFilters | None = None,
    sort_by: RecipeSortBy = "created_at",
    sort_order: SortOrder = "desc",
    viewer_id: str | None = None,
) -> list[Recipe]:
    """
    List recipes matching `filters`.

    Visibility (unless `is_public` is explicitly False):
    - `user_id` filter set: only that user's recipes
    - otherwise: public recipes plus the viewer's own

    Total time and calories are filtered after the query since one is a sum
    of columns and the other lives in a JSON column.
    """
    filters = filters or RecipeFilters()
    query = client.table("recipes").select("*")

    if filters.is_public is not False:
        if filters.user_id:
            query = query.eq("user_id", filters.user_id)
        elif viewer_id:
            query = query.or_(f"is_public.eq.true,user_id.eq.{viewer_id}")
        else:
            query = query.eq("is_public", True)

    if filters.tags:
        query = query.contains("tags", filters.tags)

    if filters.difficulty:
        query = query.eq("difficulty", filters.difficulty)

    if filters.search:
        query = query.text_search(
            "title",
            filters.search,
            options={"type": "websearch", "config": "spanish"},
        )

    query = query.order(sort_by, desc=sort_order == "desc")

    try:
        result = query.execute()
    except APIError as e:
        logger.error(f"Error fetching recipes: {e.message}")
        raise backend_error("fetching recipes", e)

    recipes = [Recipe.model_validate(row) for row in result.data or []]

    if filters.max_time:
        recipes = [r for r in recipes if r.total_time <= filters.max_time]

    if filters.max_calories:
        recipes = [
            r for r in recipes
            if not r.nutrition.calories or r.nutrition.calories <= filters.max_calories
        ]

    return recipes


def _get_recipe_row(client: Client, recipe_id: str) -> dict | None:
    """Raw recipe row, or None when it does not exist. Does not count a view."""
    try:
        result = client.table("recipes").select("*").eq("id", recipe_id).single().execute()
    except APIError as e:
        if is_no_rows(e):
            return None
        logger.error(f"Error fetching recipe {recipe_id}: {e.message}")
        raise backend_error("fetching recipe", e)
    return result.data


def fetch_recipe_by_id(client: Client, recipe_id: str) -> Recipe | None:
    """Get a recipe and count the view."""
    row = _get_recipe_row(client, recipe_id)
    if row is None:
        return None

    views = (row.get("views_count") or 0) + 1
    try:
        client.table("recipes").update({"views_count": views}).eq("id", recipe_id).execute()
        row["views_count"] = views
    except APIError as e:
        # A lost view count should not hide the recipe
        logger.warning(f"Could not increment views for recipe {recipe_id}: {e.message}")

    return Recipe.model_validate(row)


def fetch_popular_recipes(client: Client, limit: int = 5) -> list[Recipe]:
    """Best-rated public recipes. Returns [] if the store errors."""
    try:
        result = (
            client.table("recipes")
            .select("*")
            .eq("is_public", True)
            .not_.is_("rating_avg", "null")
            .order("rating_avg", desc=True)
            .order("rating_count", desc=True)
            .limit(limit)
            .execute()
        )
    except APIError as e:
        logger.error(f"Error fetching popular recipes: {e.message}")
        return []
    return [Recipe.model_validate(row) for row in result.data or []]


# =============================================================================
# Writes
# =============================================================================


def create_recipe(client: Client, recipe: CreateRecipeInput, user_id: str | None) -> Recipe:
    """Insert a recipe owned by `user_id`."""
    data = recipe.model_dump(mode="json", exclude_none=True)
    if user_id:
        data["user_id"] = user_id

    try:
        result = client.table("recipes").insert(data).execute()
    except APIError as e:
        logger.error(f"Error creating recipe: {e.message}")
        raise backend_error("creating recipe", e)

    if not result.data:
        raise backend_error("creating recipe", Exception("no row returned"))

    created = Recipe.model_validate(result.data[0])
    logger.info(f"Recipe {created.id} created by {user_id}")
    return created


def _require_owner(client: Client, recipe_id: str, user_id: str | None, action: str) -> dict:
    if not user_id:
        raise PermissionDeniedError(f"You must be signed in to {action} a recipe")

    existing = _get_recipe_row(client, recipe_id)
    if existing is None:
        raise NotFoundError("Recipe not found")
    if existing.get("user_id") != user_id:
        raise PermissionDeniedError(f"You do not have permission to {action} this recipe")
    return existing


def update_recipe(
    client: Client,
    recipe_id: str,
    updates: UpdateRecipeInput,
    user_id: str | None,
) -> Recipe:
    """Apply the fields set on `updates` to a recipe the user owns."""
    _require_owner(client, recipe_id, user_id, "update")

    data = updates.model_dump(mode="json", exclude_unset=True)
    data["updated_at"] = _utc_now()

    try:
        result = client.table("recipes").update(data).eq("id", recipe_id).execute()
    except APIError as e:
        logger.error(f"Error updating recipe {recipe_id}: {e.message}")
        raise backend_error("updating recipe", e)

    if not result.data:
        raise NotFoundError("Recipe not found")
    return Recipe.model_validate(result.data[0])


def delete_recipe(client: Client, recipe_id: str, user_id: str | None) -> None:
    """Delete a recipe the user owns, and its stored image."""
    existing = _require_owner(client, recipe_id, user_id, "delete")

    image_url = existing.get("image_url")
    if image_url:
        image_name = image_url.rstrip("/").split("/")[-1]
        if image_name:
            try:
                client.storage.from_(settings.recipe_images_bucket).remove([f"{user_id}/{image_name}"])
            except Exception as e:
                logger.warning(f"Could not remove image for recipe {recipe_id}: {e}")

    try:
        client.table("recipes").delete().eq("id", recipe_id).execute()
    except APIError as e:
        logger.error(f"Error deleting recipe {recipe_id}: {e.message}")
        raise backend_error("deleting recipe", e)

    logger.info(f"Recipe {recipe_id} deleted by {user_id}")


def upload_recipe_image(
    client: Client,
    user_id: str | None,
    data: bytes,
    filename: str,
    content_type: str,
    recipe_id: str | None = None,
) -> str:
    """
    Upload a recipe photo and return its public URL.

    Accepts JPEG, PNG or WebP up to `settings.max_recipe_image_bytes`.
    Stored at `{user_id}/{recipe_id or timestamp}-{random}.{ext}`.
    """
    if not user_id:
        raise PermissionDeniedError("You must be signed in to upload images")
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidInputError("File type not allowed. Use JPEG, PNG or WebP.")
    if len(data) > settings.max_recipe_image_bytes:
        raise InvalidInputError("File is too large. Maximum 5MB.")

    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else content_type.split("/")[-1]
    prefix = recipe_id or str(int(time.time() * 1000))
    path = f"{user_id}/{prefix}-{secrets.token_hex(3)}.{ext}"

    bucket = client.storage.from_(settings.recipe_images_bucket)
    try:
        bucket.upload(
            path,
            data,
            {"content-type": content_type, "cache-control": "3600", "upsert": "false"},
        )
    except Exception as e:
        logger.error(f"Error uploading recipe image {path}: {e}")
        raise StorageError(f"Error uploading image: {e}")

    return bucket.get_public_url(path)
