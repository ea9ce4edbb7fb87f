"""
Integration tests for RecipeService against the in-memory store.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from recipe_roulette.data.store import RECIPES_KEY
from recipe_roulette.errors import NotFoundError


class TestRecipeCrud:
    """Test adding, reading, updating and deleting recipes."""

    def test_add_and_get(self, recipes, pancake_id):
        recipe = recipes.get_recipe_by_id(pancake_id)

        assert recipe.title == "Buttermilk Pancakes"
        assert recipe.servings == 4
        assert [i.name for i in recipe.ingredients] == ["Flour", "Milk", "Eggs", "Butter"]
        assert [s.order for s in recipe.instructions] == [1, 2]
        assert recipe.created_at == recipe.updated_at

    def test_get_missing_returns_none(self, recipes):
        assert recipes.get_recipe_by_id("nope") is None

    def test_fetch_recipes(self, recipes, pancake_id, cookie_id):
        assert {r.id for r in recipes.fetch_recipes()} == {pancake_id, cookie_id}

    def test_add_rejects_blank_title(self, recipes, pancake_recipe_data):
        pancake_recipe_data["title"] = "   "

        with pytest.raises(ValidationError):
            recipes.add_recipe(pancake_recipe_data)

        assert recipes.fetch_recipes() == []

    def test_add_dedupes_tags(self, recipes, pancake_recipe_data):
        pancake_recipe_data["tags"] = ["sweet", "breakfast", "sweet"]

        recipe = recipes.get_recipe_by_id(recipes.add_recipe(pancake_recipe_data))

        assert recipe.tags == ["sweet", "breakfast"]

    def test_update_keeps_id_and_refreshes_timestamp(self, recipes, store, pancake_id):
        raw = store.get(RECIPES_KEY)
        raw[0]["updated_at"] = datetime(2020, 1, 1)
        store.set(RECIPES_KEY, raw)

        updated = recipes.update_recipe(pancake_id, {"id": "hijacked", "title": "Sunday Pancakes", "servings": 6})

        assert updated.id == pancake_id
        assert updated.title == "Sunday Pancakes"
        assert updated.servings == 6
        assert updated.updated_at > datetime(2020, 1, 1)
        stored = recipes.get_recipe_by_id(pancake_id)
        assert stored.title == "Sunday Pancakes"
        assert stored.description == "Fluffy weekend pancakes"

    def test_update_replaces_instructions_in_order(self, recipes, pancake_id):
        updated = recipes.update_recipe(pancake_id, {
            "instructions": [
                {"order": 3, "instruction": "Serve"},
                {"order": 1, "instruction": "Mix"},
            ],
        })

        assert [s.instruction for s in updated.instructions] == ["Mix", "Serve"]

    def test_update_missing_raises(self, recipes):
        with pytest.raises(NotFoundError, match="Recipe with ID ghost not found"):
            recipes.update_recipe("ghost", {"title": "x"})

    def test_delete(self, recipes, pancake_id, cookie_id):
        recipes.delete_recipe(pancake_id)

        assert [r.id for r in recipes.fetch_recipes()] == [cookie_id]

        with pytest.raises(NotFoundError):
            recipes.delete_recipe(pancake_id)


class TestRecipeSearch:
    """Test search and filter."""

    def test_search_by_title_ingredient_and_tag(self, recipes, pancake_id, cookie_id):
        assert [r.id for r in recipes.search_recipes("PANCAKE")] == [pancake_id]
        assert [r.id for r in recipes.search_recipes("chocolate")] == [cookie_id]
        assert {r.id for r in recipes.search_recipes("sweet")} == {pancake_id, cookie_id}

    def test_datetime_looking_title_is_searchable(self, recipes):
        recipe_id = recipes.add_recipe({"title": "2025-10-20T10:00:00", "description": "Dated batch"})

        assert recipes.get_recipe_by_id(recipe_id).title == "2025-10-20T10:00:00"
        assert [r.id for r in recipes.search_recipes("2025-10-20")] == [recipe_id]

    def test_blank_search_returns_all(self, recipes, pancake_id, cookie_id):
        assert len(recipes.search_recipes("  ")) == 2

    def test_filter_combines_criteria(self, recipes, pancake_id, cookie_id):
        assert [r.id for r in recipes.filter_recipes(tags=["baking"])] == [cookie_id]
        assert [r.id for r in recipes.filter_recipes(difficulty="easy")] == [pancake_id]
        assert [r.id for r in recipes.filter_recipes(max_prep_time=10)] == [pancake_id]
        assert [r.id for r in recipes.filter_recipes(max_cook_time=12)] == [cookie_id]
        assert recipes.filter_recipes(query="flour", difficulty="hard") == []
