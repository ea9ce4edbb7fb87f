"""
Integration tests for generating shopping lists from recipes and meal plans.
"""

import threading

import pytest

from recipe_roulette.errors import EmptyResultError, NotFoundError
from recipe_roulette.services import ShoppingListService


def _plan_week(meal_planner, pancake_id, cookie_id):
    meal_planner.add_planned_meal({"date": "2025-10-20", "meal_type": "breakfast", "recipe_id": pancake_id, "servings": 2})
    meal_planner.add_planned_meal({"date": "2025-10-22", "meal_type": "snack", "recipe_id": cookie_id})
    meal_planner.add_planned_meal({"date": "2025-10-24", "custom_meal_name": "Pizza night"})
    meal_planner.add_planned_meal({"date": "2025-10-28", "recipe_id": pancake_id})


class TestGenerateFromRecipe:
    """Test one-recipe generation."""

    def test_creates_named_list(self, shopping, pancake_id):
        list_id = shopping.generate_list_from_recipe(pancake_id)

        shopping_list = shopping.get_list(list_id)
        assert shopping_list.name == "Ingredients for Buttermilk Pancakes"
        assert [(i.name, i.quantity, i.unit, i.section) for i in shopping_list.items] == [
            ("Flour", 2.0, "cups", "Boxed Goods"),
            ("Milk", 1.5, "cups", "Dairy"),
            ("Eggs", 2.0, "", "Other"),
            ("Butter", 3.0, "tbsp", "Dairy"),
        ]
        assert not any(i.completed for i in shopping_list.items)
        assert shopping.get_active_list() == list_id

    def test_item_ids_are_unique(self, shopping, pancake_id):
        list_id = shopping.generate_list_from_recipe(pancake_id)
        shopping.generate_list_from_recipe(pancake_id, list_id=list_id)

        ids = [i.id for i in shopping.get_list(list_id).items]
        assert len(ids) == 8
        assert len(set(ids)) == 8

    def test_appends_without_merging(self, shopping, pancake_id):
        list_id = shopping.create_list("Weekly")
        shopping.add_item(list_id, {"name": "Flour", "quantity": 1, "unit": "cups"})

        assert shopping.generate_list_from_recipe(pancake_id, list_id=list_id) == list_id

        names = [i.name for i in shopping.get_list(list_id).items]
        assert names == ["Flour", "Flour", "Milk", "Eggs", "Butter"]
        assert len(shopping.fetch_lists()) == 1

    def test_recipe_without_ingredients(self, shopping, recipes):
        recipe_id = recipes.add_recipe({"title": "Water", "description": "Just water"})

        list_id = shopping.generate_list_from_recipe(recipe_id)

        assert shopping.get_list(list_id).items == []

    def test_missing_recipe_writes_nothing(self, shopping):
        with pytest.raises(NotFoundError, match="Recipe with ID ghost not found"):
            shopping.generate_list_from_recipe("ghost")

        assert shopping.fetch_lists() == []
        assert shopping.get_active_list() is None

    def test_missing_target_list(self, shopping, pancake_id):
        other = shopping.create_list("Weekly")

        with pytest.raises(NotFoundError, match="Shopping list"):
            shopping.generate_list_from_recipe(pancake_id, list_id="ghost")

        assert [sl.id for sl in shopping.fetch_lists()] == [other]
        assert shopping.get_list(other).items == []


class TestGenerateFromMealPlan:
    """Test meal-plan generation with consolidation."""

    def test_consolidates_across_recipes(self, app, shopping, meal_planner, pancake_id, cookie_id, week):
        _plan_week(meal_planner, pancake_id, cookie_id)

        list_id = app.generate_shopping_list(*week)

        shopping_list = shopping.get_list(list_id)
        assert shopping_list.name == "Meal Plan (10/20/2025 - 10/26/2025)"
        assert [(i.name, i.quantity, i.unit, i.section) for i in shopping_list.items] == [
            ("Flour", 3.0, "cups", "Boxed Goods"),
            ("Milk", 1.5, "cups", "Dairy"),
            ("Eggs", 2.0, "", "Other"),
            ("Butter", 11.0, "tbsp", "Dairy"),
            ("Chocolate chips", 2.0, "cups", "Snacks"),
            ("Flour", 100.0, "grams", "Boxed Goods"),
        ]

    def test_regenerating_appends(self, shopping, meal_planner, pancake_id, cookie_id, week):
        _plan_week(meal_planner, pancake_id, cookie_id)
        list_id = shopping.generate_list_from_meal_plan(*week)

        shopping.generate_list_from_meal_plan(*week, list_id=list_id)

        items = shopping.get_list(list_id).items
        assert len(items) == 12
        assert [i.quantity for i in items if i.name == "Butter"] == [11.0, 11.0]

    def test_empty_range_writes_nothing(self, shopping, meal_planner, pancake_id, cookie_id):
        _plan_week(meal_planner, pancake_id, cookie_id)

        with pytest.raises(EmptyResultError, match="No planned meals found in the selected date range"):
            shopping.generate_list_from_meal_plan("2025-11-01", "2025-11-07")

        assert shopping.fetch_lists() == []

    def test_custom_meals_only(self, shopping, meal_planner):
        meal_planner.add_planned_meal({"date": "2025-10-21", "custom_meal_name": "Takeout"})
        meal_planner.add_planned_meal({"date": "2025-10-22", "recipe_id": "deleted-recipe"})

        with pytest.raises(EmptyResultError, match="No recipes found in the planned meals"):
            shopping.generate_list_from_meal_plan("2025-10-20", "2025-10-26")

        assert shopping.fetch_lists() == []

    def test_empty_result_leaves_target_untouched(self, shopping, week):
        list_id = shopping.create_list("Weekly")
        before = shopping.get_list(list_id)

        with pytest.raises(EmptyResultError):
            shopping.generate_list_from_meal_plan(*week, list_id=list_id)

        assert shopping.get_list(list_id) == before

    def test_scaling_to_servings(self, store, recipes, meal_planner, pancake_id, week):
        scaled = ShoppingListService(store, recipes, meal_planner, scale_to_servings=True)
        meal_planner.add_planned_meal({"date": "2025-10-20", "recipe_id": pancake_id, "servings": 2})

        list_id = scaled.generate_list_from_meal_plan(*week)

        flour = scaled.get_list(list_id).items[0]
        assert (flour.name, flour.quantity) == ("Flour", 1.0)
        assert recipes.get_recipe_by_id(pancake_id).ingredients[0].quantity == 2.0


class TestConcurrentGeneration:
    """Concurrent generation into one list must not lose writes."""

    def test_parallel_appends(self, shopping, pancake_id):
        list_id = shopping.create_list("Weekly")
        errors = []

        def worker():
            try:
                shopping.generate_list_from_recipe(pancake_id, list_id=list_id)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(shopping.get_list(list_id).items) == 32
