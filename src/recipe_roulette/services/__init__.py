from .recipe_service import RecipeService
from .meal_planner_service import MealPlannerService
from .shopping_list_service import ShoppingListService

__all__ = ["RecipeService", "MealPlannerService", "ShoppingListService"]
