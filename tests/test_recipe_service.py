"""Tests for the recipe service."""

import pytest

from tastebook.errors import InvalidInputError, NotFoundError, PermissionDeniedError
from tastebook.models.validation import CreateRecipeInput, RecipeFilters, UpdateRecipeInput
from tastebook.services import recipes as recipe_service


@pytest.fixture
def db(fake_supabase, sample_recipes):
    for row in sample_recipes:
        fake_supabase.add_row("recipes", row)
    fake_supabase.add_row("recipes", {
        "id": "private-other",
        "user_id": "user-2",
        "title": "Receta secreta",
        "is_public": False,
    })
    fake_supabase.add_row("recipes", {
        "id": "private-mine",
        "user_id": "user-1",
        "title": "Mi borrador",
        "is_public": False,
        "prep_time": 5,
    })
    return fake_supabase


class TestFetchRecipes:
    def test_viewer_sees_public_and_own(self, db):
        ids = [r.id for r in recipe_service.fetch_recipes(db, viewer_id="user-1")]
        assert "private-mine" in ids
        assert "private-other" not in ids
        assert len(ids) == 4

    def test_anonymous_sees_public_only(self, db):
        ids = {r.id for r in recipe_service.fetch_recipes(db)}
        assert ids == {"recipe-1", "recipe-2", "recipe-3"}

    def test_user_filter(self, db):
        recipes = recipe_service.fetch_recipes(db, RecipeFilters(user_id="user-2"), viewer_id="user-1")
        assert {r.id for r in recipes} == {"recipe-2", "recipe-3", "private-other"}

    def test_newest_first_by_default(self, db):
        ids = [r.id for r in recipe_service.fetch_recipes(db)]
        assert ids == ["recipe-3", "recipe-2", "recipe-1"]

    def test_max_time_uses_prep_plus_cook(self, db):
        recipes = recipe_service.fetch_recipes(db, RecipeFilters(max_time=45))
        assert {r.id for r in recipes} == {"recipe-1", "recipe-2"}

    def test_max_calories_keeps_recipes_without_calories(self, db):
        recipes = recipe_service.fetch_recipes(db, RecipeFilters(max_calories=200))
        assert {r.id for r in recipes} == {"recipe-2", "recipe-3"}

    def test_tags_and_difficulty(self, db):
        recipes = recipe_service.fetch_recipes(db, RecipeFilters(tags=["cena"], difficulty="media"))
        assert {r.id for r in recipes} == {"recipe-1", "recipe-3"}

    def test_search_and_sort(self, db):
        recipes = recipe_service.fetch_recipes(
            db, RecipeFilters(search="tortilla"), sort_by="rating_avg", sort_order="desc"
        )
        assert [r.id for r in recipes] == ["recipe-1"]

    def test_call_shape(self, mock_supabase):
        recipe_service.fetch_recipes(mock_supabase, RecipeFilters(search="pollo"), viewer_id="user-1")

        table = mock_supabase.table.return_value
        mock_supabase.table.assert_called_with("recipes")
        table.or_.assert_called_once_with("is_public.eq.true,user_id.eq.user-1")
        table.text_search.assert_called_once_with(
            "title", "pollo", options={"type": "websearch", "config": "spanish"}
        )
        table.order.assert_called_once_with("created_at", desc=True)


class TestFetchById:
    def test_counts_a_view(self, db):
        recipe = recipe_service.fetch_recipe_by_id(db, "recipe-1")
        assert recipe.views_count == 1
        assert recipe_service.fetch_recipe_by_id(db, "recipe-1").views_count == 2

    def test_missing_returns_none(self, db):
        assert recipe_service.fetch_recipe_by_id(db, "nope") is None


class TestWrites:
    def test_create_sets_owner(self, fake_supabase):
        body = CreateRecipeInput(
            title="Gazpacho",
            ingredients=[{"name": "Tomate", "quantity": 1, "unit": "kg"}],
            steps=["Triturar"],
            difficulty="facil",
        )
        recipe = recipe_service.create_recipe(fake_supabase, body, "user-1")

        assert recipe.user_id == "user-1"
        assert recipe.servings == 4
        assert fake_supabase.tables["recipes"][0]["title"] == "Gazpacho"

    def test_update_by_owner(self, db):
        recipe = recipe_service.update_recipe(db, "recipe-1", UpdateRecipeInput(title="Tortilla jugosa"), "user-1")

        assert recipe.title == "Tortilla jugosa"
        assert recipe.updated_at is not None
        assert recipe.views_count == 0

    def test_update_by_stranger_denied(self, db):
        with pytest.raises(PermissionDeniedError):
            recipe_service.update_recipe(db, "recipe-2", UpdateRecipeInput(title="Mía"), "user-1")

    def test_update_missing(self, db):
        with pytest.raises(NotFoundError):
            recipe_service.update_recipe(db, "nope", UpdateRecipeInput(title="Nada"), "user-1")

    def test_signed_out_denied(self, db):
        with pytest.raises(PermissionDeniedError):
            recipe_service.delete_recipe(db, "recipe-1", None)

    def test_delete_removes_image(self, db):
        db.tables["recipes"][0]["image_url"] = (
            "https://test.supabase.co/storage/v1/object/public/recipe-images/user-1/photo.jpg"
        )
        recipe_service.delete_recipe(db, "recipe-1", "user-1")

        assert all(r["id"] != "recipe-1" for r in db.tables["recipes"])
        assert db.storage.removed == [("recipe-images", "user-1/photo.jpg")]


class TestUploadImage:
    def test_uploads_and_returns_public_url(self, fake_supabase):
        url = recipe_service.upload_recipe_image(
            fake_supabase, "user-1", b"img", "foto.JPG", "image/jpeg", recipe_id="recipe-1"
        )

        assert "/recipe-images/user-1/recipe-1-" in url
        assert url.endswith(".jpg")
        (bucket, path), stored = next(iter(fake_supabase.storage.files.items()))
        assert bucket == "recipe-images"
        assert stored["options"]["upsert"] == "false"

    def test_rejects_type(self, fake_supabase):
        with pytest.raises(InvalidInputError):
            recipe_service.upload_recipe_image(fake_supabase, "user-1", b"x", "a.gif", "image/gif")

    def test_rejects_size(self, fake_supabase):
        too_big = b"0" * (5 * 1024 * 1024 + 1)
        with pytest.raises(InvalidInputError):
            recipe_service.upload_recipe_image(fake_supabase, "user-1", too_big, "a.png", "image/png")


class TestPopular:
    def test_rated_public_recipes_best_first(self, db):
        recipes = recipe_service.fetch_popular_recipes(db)
        assert [r.id for r in recipes] == ["recipe-1", "recipe-2"]

    def test_store_error_gives_empty_list(self, db):
        db.failing_tables.add("recipes")
        assert recipe_service.fetch_popular_recipes(db) == []
