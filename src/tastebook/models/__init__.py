"""
Tastebook - Data Models.

Pydantic models for database entities and validated inputs.
"""

from tastebook.models.entities import (
    Achievement,
    AchievementCriteria,
    Favorite,
    Ingredient,
    MealPlan,
    MealPlanMeal,
    Nutrition,
    Recipe,
    Review,
    ShoppingList,
    ShoppingListItem,
    UserAchievement,
    UserActivity,
    UserProfile,
)

__all__ = [
    "UserProfile",
    "Ingredient",
    "Nutrition",
    "Recipe",
    "MealPlanMeal",
    "MealPlan",
    "ShoppingListItem",
    "ShoppingList",
    "Favorite",
    "Review",
    "Achievement",
    "AchievementCriteria",
    "UserAchievement",
    "UserActivity",
]
