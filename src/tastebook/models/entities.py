"""
Tastebook - Database Entity Models.

These models map to the Supabase tables used by the app. They are used for:
- Parsing rows returned by the store
- API response validation
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["facil", "media", "dificil"]
Tier = Literal["bronze", "silver", "gold", "platinum"]
ActivityType = Literal["login", "recipe_created", "meal_planned"]
DayKey = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
MealType = Literal["desayuno", "comida", "cena", "snack"]


# =============================================================================
# Users
# =============================================================================


class UserProfile(BaseModel):
    """Row in public.users, created at sign-up."""

    id: str
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    preferences: dict = Field(default_factory=dict)
    stats: dict = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


# =============================================================================
# Recipes
# =============================================================================


class Ingredient(BaseModel):
    """Ingredient line embedded in a recipe's JSON column."""

    name: str
    quantity: float = 0
    unit: str = ""
    category: str | None = None


class Nutrition(BaseModel):
    """Per-serving nutrition facts."""

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    fiber: float | None = None


class Recipe(BaseModel):
    """
    A recipe row.

    Rating and view counters are maintained by the store and by the
    review service; clients never set them on create.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str | None = None
    title: str
    description: str | None = None
    ingredients: list[Ingredient] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    prep_time: int | None = None
    cook_time: int | None = None
    servings: int = 4
    difficulty: Difficulty | None = None
    image_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    nutrition: Nutrition = Field(default_factory=Nutrition)
    is_public: bool = False
    views_count: int = 0
    favorites_count: int = 0
    rating_avg: float | None = None
    rating_count: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_time(self) -> int:
        return (self.prep_time or 0) + (self.cook_time or 0)


# =============================================================================
# Meal Plans
# =============================================================================


class MealPlanMeal(BaseModel):
    """Recipe reference stored in one (day, meal type) slot."""

    recipe_id: str
    servings: int = 1


class MealPlan(BaseModel):
    """
    A week of planned meals.

    `meals` is keyed by day ("monday".."sunday") then meal type
    ("desayuno", "comida", "cena", "snack").
    """

    id: str
    user_id: str
    week_start_date: date
    meals: dict[str, dict[str, MealPlanMeal]] = Field(default_factory=dict)
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# =============================================================================
# Shopping Lists
# =============================================================================


class ShoppingListItem(BaseModel):
    """One line of a shopping list (stored inside the list's JSON column)."""

    id: str
    name: str
    quantity: float
    unit: str
    category: str
    checked: bool = False
    from_recipes: list[str] | None = None


class ShoppingList(BaseModel):
    """A user's shopping list."""

    id: str
    user_id: str
    meal_plan_id: str | None = None
    items: list[ShoppingListItem] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


# =============================================================================
# Social
# =============================================================================


class RecipeSummary(BaseModel):
    """Recipe columns joined onto favorites."""

    id: str
    title: str
    description: str | None = None
    image_url: str | None = None
    prep_time: int | None = None
    cook_time: int | None = None
    servings: int = 4
    difficulty: str | None = None
    tags: list[str] = Field(default_factory=list)


class Favorite(BaseModel):
    id: str
    user_id: str
    recipe_id: str
    created_at: datetime | None = None
    recipe: RecipeSummary | None = None


class ReviewAuthor(BaseModel):
    full_name: str | None = None
    avatar_url: str | None = None


class Review(BaseModel):
    id: str
    recipe_id: str
    user_id: str
    rating: int
    comment: str | None = None
    images: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user: ReviewAuthor | None = None


# =============================================================================
# Gamification
# =============================================================================


class AchievementCriteria(BaseModel):
    """Thresholds that unlock an achievement. Only one is usually set."""

    recipes_created: int | None = None
    favorites_count: int | None = None
    plans_created: int | None = None
    streak_days: int | None = None


class Achievement(BaseModel):
    id: str
    code: str | None = None
    name: str
    description: str | None = None
    icon: str | None = None
    tier: Tier | None = None
    points: int = 0
    criteria: AchievementCriteria = Field(default_factory=AchievementCriteria)


class UserAchievement(BaseModel):
    user_id: str
    achievement_id: str
    unlocked_at: datetime
    achievement: Achievement | None = None


class UserActivity(BaseModel):
    user_id: str
    activity_date: date
    activity_type: ActivityType
