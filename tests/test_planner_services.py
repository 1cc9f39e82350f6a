"""Tests for meal plan, shopping list, profile and auth services."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from tastebook.errors import AuthenticationError, InvalidInputError, NotFoundError
from tastebook.models.validation import ShoppingItemInput, UpdateProfileInput
from tastebook.services import auth as auth_service
from tastebook.services import meal_plans as meal_plan_service
from tastebook.services import profile as profile_service
from tastebook.services import shopping as shopping_service

WEEK = "2026-10-19"


class TestMealPlans:
    def test_missing_plan_is_none(self, fake_supabase):
        assert meal_plan_service.get_meal_plan(fake_supabase, "user-1", WEEK) is None

    def test_get_or_create_keys_by_monday(self, fake_supabase):
        plan = meal_plan_service.get_or_create_meal_plan(fake_supabase, "user-1", "2026-10-22")

        assert plan.week_start_date == date(2026, 10, 19)
        assert set(plan.meals) == {"monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"}
        again = meal_plan_service.get_or_create_meal_plan(fake_supabase, "user-1", WEEK)
        assert again.id == plan.id
        assert len(fake_supabase.tables["meal_plans"]) == 1

    def test_add_then_remove(self, fake_supabase):
        plan = meal_plan_service.add_recipe_to_meal_plan(
            fake_supabase, "user-1", WEEK, "tuesday", "cena", "recipe-1", 3
        )
        assert plan.meals["tuesday"]["cena"].recipe_id == "recipe-1"
        assert plan.meals["tuesday"]["cena"].servings == 3

        plan = meal_plan_service.remove_recipe_from_meal_plan(fake_supabase, "user-1", WEEK, "tuesday", "cena")
        assert plan.meals["tuesday"] == {}
        assert plan.updated_at is not None

    def test_remove_without_plan(self, fake_supabase):
        with pytest.raises(NotFoundError):
            meal_plan_service.remove_recipe_from_meal_plan(fake_supabase, "user-1", WEEK, "monday", "cena")

    def test_invalid_slot_rejected(self, fake_supabase):
        with pytest.raises(InvalidInputError):
            meal_plan_service.add_recipe_to_meal_plan(fake_supabase, "user-1", WEEK, "monday", "brunch", "r")

    def test_history_latest_week_first(self, fake_supabase):
        for week in ["2026-10-05", "2026-10-19", "2026-10-12"]:
            meal_plan_service.create_meal_plan(fake_supabase, "user-1", week)

        plans = meal_plan_service.get_user_meal_plans(fake_supabase, "user-1")
        assert [p.week_start_date.isoformat() for p in plans] == ["2026-10-19", "2026-10-12", "2026-10-05"]


class TestShoppingService:
    def test_list_created_on_first_use(self, fake_supabase):
        shopping_list = shopping_service.get_or_create_shopping_list(fake_supabase, "user-1")
        assert shopping_list.items == []
        assert shopping_service.get_or_create_shopping_list(fake_supabase, "user-1").id == shopping_list.id

    def test_add_then_remove(self, fake_supabase):
        added = shopping_service.add_item(fake_supabase, "user-1", ShoppingItemInput(name="Tomates", quantity=2))
        item = added.items[0]
        assert item.category == "vegetables"

        removed = shopping_service.remove_item(fake_supabase, "user-1", item.id)
        assert removed.items == []

    def test_toggle_twice_and_clear(self, fake_supabase):
        added = shopping_service.add_item(fake_supabase, "user-1", ShoppingItemInput(name="Leche", quantity=1, unit="l"))
        item_id = added.items[0].id

        assert shopping_service.toggle_item(fake_supabase, "user-1", item_id).items[0].checked is True
        assert shopping_service.toggle_item(fake_supabase, "user-1", item_id).items[0].checked is False

        shopping_service.toggle_item(fake_supabase, "user-1", item_id)
        assert shopping_service.clear_checked(fake_supabase, "user-1").items == []

    def test_update_item(self, fake_supabase):
        added = shopping_service.add_item(fake_supabase, "user-1", ShoppingItemInput(name="Arroz", quantity=1, unit="kg"))
        updated = shopping_service.update_item(fake_supabase, "user-1", added.items[0].id, 2.5, "kg")
        assert updated.items[0].quantity == 2.5

    def test_generate_from_meal_plan(self, fake_supabase, sample_recipes):
        for row in sample_recipes:
            fake_supabase.add_row("recipes", row)
        meal_plan_service.add_recipe_to_meal_plan(fake_supabase, "user-1", WEEK, "monday", "cena", "recipe-2", 2)
        plan = meal_plan_service.add_recipe_to_meal_plan(
            fake_supabase, "user-1", WEEK, "tuesday", "cena", "recipe-2", 2
        )

        shopping_list = shopping_service.generate_from_meal_plan(fake_supabase, "user-1", plan)

        names = {i.name: i for i in shopping_list.items}
        assert names["Tomate"].quantity == 6
        assert names["Tomate"].from_recipes == ["Ensalada de tomate"]
        assert shopping_list.meal_plan_id == plan.id


class TestProfile:
    @pytest.fixture
    def db(self, fake_supabase, sample_recipes):
        fake_supabase.add_row("users", {
            "id": "user-1",
            "email": "ana@example.com",
            "full_name": "Ana",
            "avatar_url": "https://test.supabase.co/storage/v1/object/public/public/user-1-1.png",
        })
        fake_supabase.add_row("recipes", {**sample_recipes[0]})
        fake_supabase.add_row("recipes", {**sample_recipes[1], "user_id": "user-1"})
        fake_supabase.add_row("favorites", {"user_id": "user-1", "recipe_id": "recipe-3"})
        return fake_supabase

    def test_update_profile(self, db):
        profile = profile_service.update_profile(db, "user-1", UpdateProfileInput(bio="Cocino los domingos"))
        assert profile.bio == "Cocino los domingos"
        assert profile.full_name == "Ana"

    def test_missing_profile(self, fake_supabase):
        with pytest.raises(NotFoundError):
            profile_service.get_profile(fake_supabase, "ghost")

    def test_upload_avatar_replaces_old_file(self, db):
        profile = profile_service.upload_avatar(db, "user-1", b"png", "me.png", "image/png")

        assert db.storage.removed == [("public", "user-1-1.png")]
        assert "/public/user-1-" in profile.avatar_url
        assert profile.avatar_url.endswith(".png")

    @pytest.mark.parametrize("content_type,size", [("application/pdf", 10), ("image/png", 2 * 1024 * 1024 + 1)])
    def test_avatar_validation(self, db, content_type, size):
        with pytest.raises(InvalidInputError):
            profile_service.upload_avatar(db, "user-1", b"0" * size, "me.png", content_type)

    def test_user_stats(self, db):
        meal_plan_service.create_meal_plan(db, "user-1", WEEK)
        assert profile_service.get_user_stats(db, "user-1") == {
            "recipes_count": 2,
            "favorites_count": 1,
            "plans_count": 1,
        }

    def test_dashboard_stats(self, db):
        meal_plan_service.add_recipe_to_meal_plan(db, "user-1", WEEK, "monday", "cena", "recipe-1")
        meal_plan_service.add_recipe_to_meal_plan(db, "user-1", WEEK, "friday", "comida", "recipe-2")

        stats = profile_service.get_dashboard_stats(db, "user-1", today=date(2026, 10, 25))
        assert stats == {
            "recipes_count": 2,
            "favorites_count": 1,
            "planned_meals_this_week": 2,
            "total_cooking_time": 55,
        }

    def test_dashboard_without_plan(self, db):
        stats = profile_service.get_dashboard_stats(db, "user-1", today=date(2026, 10, 19))
        assert stats["planned_meals_this_week"] == 0

    def test_upcoming_meals(self, db):
        for day, meal_type, recipe_id in [
            ("monday", "cena", "recipe-1"),
            ("wednesday", "comida", "recipe-2"),
            ("wednesday", "desayuno", "missing-recipe"),
            ("thursday", "desayuno", "recipe-1"),
        ]:
            meal_plan_service.add_recipe_to_meal_plan(db, "user-1", WEEK, day, meal_type, recipe_id)

        upcoming = profile_service.get_upcoming_meals(db, "user-1", today=date(2026, 10, 21), limit=3)

        assert [(m["day"], m["recipe"].id) for m in upcoming] == [
            ("wednesday", "recipe-2"),
            ("thursday", "recipe-1"),
        ]


class TestAuth:
    def _auth_response(self, user_id="user-1", email="ana@example.com"):
        return MagicMock(
            user=MagicMock(id=user_id, email=email),
            session=MagicMock(access_token="access", refresh_token="refresh", expires_at=123),
        )

    def test_sign_up_creates_profile(self, fake_supabase):
        fake_supabase.auth.sign_up.return_value = self._auth_response()

        session = auth_service.sign_up(fake_supabase, "ana@example.com", "secreto", "Ana")

        assert session["user"]["id"] == "user-1"
        assert fake_supabase.tables["users"][0]["full_name"] == "Ana"
        fake_supabase.auth.sign_up.assert_called_once_with({
            "email": "ana@example.com",
            "password": "secreto",
            "options": {"data": {"full_name": "Ana"}},
        })

    def test_sign_in_records_login(self, fake_supabase):
        fake_supabase.auth.sign_in_with_password.return_value = self._auth_response()

        session = auth_service.sign_in(fake_supabase, "ana@example.com", "secreto")

        assert session["access_token"] == "access"
        assert fake_supabase.tables["user_activity"][0]["activity_type"] == "login"

    def test_sign_in_survives_activity_failure(self, fake_supabase):
        fake_supabase.auth.sign_in_with_password.return_value = self._auth_response()
        fake_supabase.failing_tables.add("user_activity")

        assert auth_service.sign_in(fake_supabase, "ana@example.com", "secreto")["refresh_token"] == "refresh"

    def test_bad_credentials(self, fake_supabase):
        fake_supabase.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        with pytest.raises(AuthenticationError):
            auth_service.sign_in(fake_supabase, "ana@example.com", "wrong")

    def test_user_from_token(self, fake_supabase):
        fake_supabase.auth.get_user.return_value = MagicMock(user=None)
        assert auth_service.get_user_from_token(fake_supabase, "bad") is None
