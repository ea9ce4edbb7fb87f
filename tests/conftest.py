"""
Pytest configuration and shared fixtures.

Fixtures are reusable test setup that can be injected into tests.
"""

from datetime import date

import pytest

from recipe_roulette.config import Settings
from recipe_roulette.data.store import KeyValueStore, MemoryBackend, SQLiteBackend
from recipe_roulette.main import RecipeRouletteApp


@pytest.fixture
def store():
    """
    Fresh in-memory store for each test.

    Usage in tests:
        def test_something(store):
            store.set("key", {...})
    """
    kv = KeyValueStore(backend=MemoryBackend())
    kv.initialize()
    return kv


@pytest.fixture
def sqlite_store(tmp_path):
    """Store backed by a SQLite file in a temporary directory."""
    kv = KeyValueStore(backend=SQLiteBackend(tmp_path / "test_data" / "kv.db"))
    kv.initialize()
    return kv


@pytest.fixture
def app(store):
    """Application wired to the in-memory store."""
    settings = Settings(storage_backend="memory")
    return RecipeRouletteApp(settings=settings, store=store)


@pytest.fixture
def recipes(app):
    return app.recipes


@pytest.fixture
def meal_planner(app):
    return app.meal_planner


@pytest.fixture
def shopping(app):
    return app.shopping


@pytest.fixture
def pancake_recipe_data():
    """Sample recipe payload for testing."""
    return {
        "title": "Buttermilk Pancakes",
        "description": "Fluffy weekend pancakes",
        "prep_time": 10,
        "cook_time": 15,
        "servings": 4,
        "difficulty": "easy",
        "tags": ["breakfast", "sweet"],
        "ingredients": [
            {"name": "Flour", "quantity": 2, "unit": "cups", "section": "Boxed Goods"},
            {"name": "Milk", "quantity": 1.5, "unit": "cups", "section": "Dairy"},
            {"name": "Eggs", "quantity": 2, "unit": ""},
            {"name": "Butter", "quantity": 3, "unit": "tbsp", "section": "Dairy"},
        ],
        "instructions": [
            {"order": 2, "instruction": "Cook on a hot griddle"},
            {"order": 1, "instruction": "Whisk everything together"},
        ],
    }


@pytest.fixture
def cookie_recipe_data():
    """Second sample recipe sharing flour and butter with the pancakes."""
    return {
        "title": "Chocolate Chip Cookies",
        "description": "Classic chewy cookies",
        "prep_time": 15,
        "cook_time": 12,
        "servings": 24,
        "difficulty": "medium",
        "tags": ["dessert", "sweet", "baking"],
        "ingredients": [
            {"name": "flour", "quantity": 1, "unit": "Cups", "section": "Boxed Goods"},
            {"name": "Butter", "quantity": 8, "unit": "tbsp", "section": "Dairy"},
            {"name": "Chocolate chips", "quantity": 2, "unit": "cups", "section": "Snacks"},
            {"name": "Flour", "quantity": 100, "unit": "grams", "section": "Boxed Goods"},
        ],
        "instructions": [
            {"order": 1, "instruction": "Cream butter and sugar"},
        ],
    }


@pytest.fixture
def pancake_id(recipes, pancake_recipe_data):
    return recipes.add_recipe(pancake_recipe_data)


@pytest.fixture
def cookie_id(recipes, cookie_recipe_data):
    return recipes.add_recipe(cookie_recipe_data)


@pytest.fixture
def week():
    """Monday and Sunday of a sample week."""
    return date(2025, 10, 20), date(2025, 10, 26)
