"""
Tastebook - Input validation.

Request bodies for the recipe editor, reviews, profile and shopping list.
Constraint messages are shown to the user as-is.
"""

from typing import Literal, get_args

from pydantic import BaseModel, Field, field_validator

from tastebook.models.entities import DayKey, Difficulty, MealType, Nutrition

RecipeSortBy = Literal["created_at", "rating_avg", "views_count", "favorites_count"]
SortOrder = Literal["asc", "desc"]


# =============================================================================
# Recipes
# =============================================================================


class IngredientInput(BaseModel):
    """Single ingredient row in the recipe editor."""

    name: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit: str = Field(min_length=1)
    category: str | None = None


def _check_steps(steps: list[str] | None) -> list[str] | None:
    if steps is None:
        return None
    for step in steps:
        if not step.strip():
            raise ValueError("Steps cannot be empty")
    return steps


class CreateRecipeInput(BaseModel):
    """
    Recipe creation form.

    - Title: 3-100 characters
    - Description: at most 500 characters
    - At least one ingredient and one step
    - Times: positive whole minutes
    - Servings: positive, default 4
    """

    title: str = Field(min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    ingredients: list[IngredientInput] = Field(min_length=1)
    steps: list[str] = Field(min_length=1)
    prep_time: int | None = Field(default=None, gt=0)
    cook_time: int | None = Field(default=None, gt=0)
    servings: int = Field(default=4, gt=0)
    difficulty: Difficulty
    tags: list[str] = Field(default_factory=list)
    is_public: bool = False
    image_url: str | None = None
    nutrition: Nutrition | None = None

    @field_validator("steps")
    @classmethod
    def steps_not_blank(cls, v):
        return _check_steps(v)


class UpdateRecipeInput(BaseModel):
    """Partial recipe update. Only fields that are set get written."""

    title: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    ingredients: list[IngredientInput] | None = Field(default=None, min_length=1)
    steps: list[str] | None = Field(default=None, min_length=1)
    prep_time: int | None = Field(default=None, gt=0)
    cook_time: int | None = Field(default=None, gt=0)
    servings: int | None = Field(default=None, gt=0)
    difficulty: Difficulty | None = None
    tags: list[str] | None = None
    is_public: bool | None = None
    image_url: str | None = None
    nutrition: Nutrition | None = None

    @field_validator("steps")
    @classmethod
    def steps_not_blank(cls, v):
        return _check_steps(v)


class RecipeFilters(BaseModel):
    """Recipe list filters."""

    search: str | None = None
    tags: list[str] | None = None
    max_time: int | None = Field(default=None, gt=0)
    difficulty: Difficulty | None = None
    max_calories: float | None = Field(default=None, gt=0)
    is_public: bool | None = None
    user_id: str | None = None

    def cache_key(self) -> tuple:
        """Hashable form used inside query keys."""
        return tuple(sorted(
            (k, tuple(v) if isinstance(v, list) else v)
            for k, v in self.model_dump(exclude_none=True).items()
        ))


# =============================================================================
# Meal Plans
# =============================================================================


class AddMealInput(BaseModel):
    day: str
    meal_type: str
    recipe_id: str
    servings: int = Field(default=1, ge=1)


class RemoveMealInput(BaseModel):
    day: str
    meal_type: str


class MealSlotInput(BaseModel):
    recipe_id: str = Field(min_length=1)
    servings: int = Field(default=1, ge=1)


class MealPlanUpdateInput(BaseModel):
    """Whole-week save. Only known days and meal types are accepted."""

    meals: dict[DayKey, dict[MealType, MealSlotInput]]
    notes: str | None = None

    def grid(self) -> dict:
        """The full week, with days missing from the request left empty."""
        meals = {day: {} for day in get_args(DayKey)}
        meals.update(self.model_dump()["meals"])
        return meals


# =============================================================================
# Shopping List
# =============================================================================


class ShoppingItemInput(BaseModel):
    name: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit: str = ""
    category: str | None = None


class ShoppingItemUpdate(BaseModel):
    quantity: float
    unit: str


# =============================================================================
# Reviews & Profile
# =============================================================================


class CreateReviewInput(BaseModel):
    recipe_id: str
    rating: int = Field(ge=1, le=5)
    comment: str | None = None
    images: list[str] = Field(default_factory=list)


class UpdateProfileInput(BaseModel):
    full_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None


class ToggleFavoriteInput(BaseModel):
    recipe_id: str
    is_favorite: bool


class RecordActivityInput(BaseModel):
    activity_type: Literal["login", "recipe_created", "meal_planned"]


class MatchRequest(BaseModel):
    ingredients: list[str]
    limit: int = Field(default=5, gt=0)
    min_match_percentage: float = Field(default=30, ge=0, le=100)


# =============================================================================
# Auth
# =============================================================================


class SignUpInput(BaseModel):
    email: str
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1)


class SignInInput(BaseModel):
    email: str
    password: str


class RefreshInput(BaseModel):
    refresh_token: str
