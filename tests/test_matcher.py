"""Tests for the ingredient matcher."""

import pytest

from tastebook.domain.matcher import (
    common_ingredients,
    match_recipe,
    normalize_selection,
    rank_matches,
)
from tastebook.models.entities import Recipe
from tastebook.services import matcher as matcher_service


@pytest.fixture
def recipes(sample_recipes):
    return [Recipe.model_validate(row) for row in sample_recipes]


def _recipe(recipe_id, names, rating=None):
    return Recipe(
        id=recipe_id,
        title=recipe_id,
        ingredients=[{"name": n} for n in names],
        rating_avg=rating,
    )


class TestMatchRecipe:
    def test_counts_matching_and_missing(self, recipes):
        match = match_recipe(recipes[0], ["cebolla", "huevo"])

        assert match.total_ingredients == 4
        assert match.match_percentage == 50
        assert match.matching_ingredients == ["Huevos", "Cebolla"]
        assert [i.name for i in match.missing_ingredients] == ["Patatas", "Aceite de oliva"]

    def test_substring_match_works_both_ways(self):
        recipe = _recipe("r", ["Tomate cherry", "Ajo"])
        assert match_recipe(recipe, ["tomate"]).match_percentage == 50
        assert match_recipe(recipe, ["ajo picado"]).match_percentage == 50

    def test_recipe_without_ingredients_scores_zero(self):
        match = match_recipe(_recipe("empty", []), ["tomate"])
        assert match.match_percentage == 0
        assert match.total_ingredients == 0


class TestRankMatches:
    def test_sorted_by_percentage_and_threshold_applied(self, recipes):
        ranked = rank_matches(recipes, ["Tomates", "Cebolla"])
        assert [m.recipe.id for m in ranked] == ["recipe-2", "recipe-1", "recipe-3"]
        assert [m.match_percentage for m in ranked] == [100, 25, 0]

        filtered = rank_matches(recipes, ["Tomates", "Cebolla"], min_match_percentage=30)
        assert [m.recipe.id for m in filtered] == ["recipe-2"]

    def test_ties_broken_by_rating(self):
        recipes = [
            _recipe("unrated", ["pollo"]),
            _recipe("low", ["pollo"], rating=2.0),
            _recipe("high", ["pollo"], rating=4.8),
        ]
        ranked = rank_matches(recipes, ["pollo"])
        assert [m.recipe.id for m in ranked] == ["high", "low", "unrated"]

    def test_limit(self, recipes):
        assert len(rank_matches(recipes, ["cebolla"], limit=1)) == 1

    def test_blank_selections_are_ignored(self, recipes):
        assert normalize_selection(["", "   ", "Ajo"]) == ["ajo"]
        ranked = rank_matches(recipes, ["", "  "], min_match_percentage=1)
        assert ranked == []


class TestCommonIngredients:
    def test_most_frequent_first(self, recipes):
        names = common_ingredients(recipes, limit=3)
        assert names[0] == "cebolla"
        assert len(names) == 3


class TestFindMatchingRecipes:
    @pytest.fixture
    def db(self, fake_supabase, sample_recipes):
        for row in sample_recipes:
            fake_supabase.add_row("recipes", row)
        return fake_supabase

    def test_whitespace_only_selection_matches_nothing(self, db):
        assert matcher_service.find_matching_recipes(db, ["   "], 10, 0) == []

    def test_ranks_public_recipes(self, db):
        matches = matcher_service.find_matching_recipes(db, ["tomate", "cebolla"], 10, 50)
        assert [m.recipe.id for m in matches] == ["recipe-2"]
