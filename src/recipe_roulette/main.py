"""
Application wiring for Recipe Roulette.

Builds the key-value store from settings and hands the same store to every
service.
"""

import logging
from datetime import date, datetime
from typing import Optional, Union

from .config import Settings, configure_logging
from .data.store import KeyValueStore, MemoryBackend, SQLiteBackend
from .services import MealPlannerService, RecipeService, ShoppingListService

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> KeyValueStore:
    """Create and initialize the store selected by `settings.storage_backend`."""
    if settings.storage_backend == "memory":
        backend = MemoryBackend()
    else:
        backend = SQLiteBackend(settings.db_path)

    store = KeyValueStore(backend=backend, namespace=settings.namespace)
    store.initialize()
    return store


class RecipeRouletteApp:
    """Main entry point holding the store and the three services."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[KeyValueStore] = None,
        setup_logging: bool = False,
    ):
        """
        Initialize the application.

        Args:
            settings: Settings to use (defaults to Settings.from_env())
            store: Pre-built store, e.g. an in-memory one for tests
            setup_logging: Configure root logging from settings
        """
        self.settings = settings or Settings.from_env()

        errors = self.settings.validate()
        if errors:
            raise ValueError("Invalid settings: " + "; ".join(errors))

        if setup_logging:
            configure_logging(self.settings)

        if store is None:
            store = create_store(self.settings)
        self.store = store

        raise_on_write_failure = self.settings.raise_on_write_failure
        self.recipes = RecipeService(self.store, raise_on_write_failure=raise_on_write_failure)
        self.meal_planner = MealPlannerService(self.store, raise_on_write_failure=raise_on_write_failure)
        self.shopping = ShoppingListService(
            self.store,
            recipes=self.recipes,
            meal_planner=self.meal_planner,
            raise_on_write_failure=raise_on_write_failure,
            scale_to_servings=self.settings.scale_to_servings,
        )

        logger.info(f"Recipe Roulette ready ({self.settings.storage_backend} storage)")

    def generate_shopping_list(
        self,
        start: Union[date, datetime, str],
        end: Union[date, datetime, str],
        list_id: Optional[str] = None,
    ) -> str:
        """Generate a shopping list from the meal plan for a date range."""
        return self.shopping.generate_list_from_meal_plan(start, end, list_id=list_id)

    def close(self):
        self.store.close()
