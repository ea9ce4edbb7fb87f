"""
Meal planning: the single global meal plan and its planned meals.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Union

from ..data.models import MealPlan, PlannedMeal
from ..data.schemas import PlannedMealDraft, PlannedMealUpdate
from ..data.store import MEAL_PLAN_KEY
from ..errors import NotFoundError
from .base import StoreBackedService

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]


class MealPlannerService(StoreBackedService):
    """Planned meals stored as one MealPlan aggregate."""

    def _load(self) -> MealPlan:
        data = self.store.get(MEAL_PLAN_KEY, None)
        if data is None:
            return MealPlan()
        return MealPlan.from_dict(data)

    def _save(self, meal_plan: MealPlan):
        self._persist(MEAL_PLAN_KEY, meal_plan.to_dict())

    def fetch_meal_plan(self) -> MealPlan:
        """
        Get the meal plan, storing an empty one on first use.

        Returns:
            MealPlan whose id stays stable across calls
        """
        with self.store.locked(MEAL_PLAN_KEY):
            if self.store.get(MEAL_PLAN_KEY, None) is None:
                meal_plan = MealPlan()
                self._save(meal_plan)
                logger.info(f"Created meal plan {meal_plan.id}")
                return meal_plan
            return self._load()

    def add_planned_meal(self, data: Dict[str, Any]) -> str:
        """
        Add a meal to the plan.

        Args:
            data: PlannedMeal fields (date, meal_type, recipe_id or
                custom_meal_name, servings)

        Returns:
            ID of the new planned meal
        """
        draft = PlannedMealDraft.model_validate(data)
        meal = PlannedMeal(**draft.model_dump())

        with self.store.locked(MEAL_PLAN_KEY):
            meal_plan = self._load()
            meal_plan.planned_meals.append(meal)
            self._save(meal_plan)

        logger.info(f"Planned {meal}")
        return meal.id

    def update_planned_meal(self, meal_id: str, updates: Dict[str, Any]) -> PlannedMeal:
        """
        Apply a partial update to a planned meal.

        Raises:
            NotFoundError: If no planned meal has this ID
        """
        changes = PlannedMealUpdate.model_validate(updates).model_dump(exclude_unset=True)

        with self.store.locked(MEAL_PLAN_KEY):
            meal_plan = self._load()
            meal = meal_plan.find_meal(meal_id)
            if meal is None:
                raise NotFoundError("Planned meal", meal_id)

            for field_name, value in changes.items():
                if value is None and field_name in ("date", "meal_type", "servings"):
                    continue
                setattr(meal, field_name, value)

            self._save(meal_plan)

        return meal

    def remove_planned_meal(self, meal_id: str):
        """
        Remove a planned meal.

        Raises:
            NotFoundError: If no planned meal has this ID
        """
        with self.store.locked(MEAL_PLAN_KEY):
            meal_plan = self._load()
            remaining = [m for m in meal_plan.planned_meals if m.id != meal_id]
            if len(remaining) == len(meal_plan.planned_meals):
                raise NotFoundError("Planned meal", meal_id)
            meal_plan.planned_meals = remaining
            self._save(meal_plan)

    def get_planned_meals_for_date(self, day: DateLike) -> List[PlannedMeal]:
        """Get planned meals on a calendar date (time of day is ignored)."""
        return self._load().meals_on(day)

    def get_planned_meals_for_date_range(self, start: DateLike, end: DateLike) -> List[PlannedMeal]:
        """Get planned meals from start to end, both days inclusive."""
        return self._load().meals_between(start, end)

    def move_meal_to_date(self, meal_id: str, new_date: DateLike) -> PlannedMeal:
        return self.update_planned_meal(meal_id, {"date": new_date})

    def change_meal_type(self, meal_id: str, new_type: str) -> PlannedMeal:
        return self.update_planned_meal(meal_id, {"meal_type": new_type})

    def get_planned_dates(self) -> List[date]:
        """Get all unique dates that have planned meals."""
        return self._load().planned_dates()
