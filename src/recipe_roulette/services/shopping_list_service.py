"""
Shopping lists: CRUD, item operations and list generation.

Generation turns a recipe, or every recipe planned over a date range, into
shopping-list items. Meal-plan generation consolidates duplicate
ingredients gathered in that one call; writing into an existing list always
appends and never merges with items already on it.
"""

import logging
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Optional, Union

from ..data.models import Ingredient, ShoppingItem, ShoppingList, as_date
from ..data.schemas import ShoppingItemDraft, ShoppingItemUpdate, ShoppingListDraft
from ..data.store import ACTIVE_LIST_KEY, SHOPPING_LISTS_KEY, KeyValueStore
from ..errors import EmptyResultError, NotFoundError, StorageError
from ..shopping.consolidator import consolidate_ingredients
from ..shopping.parser import parse_recipe_text, split_item_input
from ..shopping.sections import classify_section, resolve_section
from .base import StoreBackedService
from .meal_planner_service import MealPlannerService
from .recipe_service import RecipeService

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]


def format_list_date(value: DateLike) -> str:
    """Format a date as M/D/YYYY for generated list names."""
    day = as_date(value)
    return f"{day.month}/{day.day}/{day.year}"


def item_from_ingredient(ingredient: Ingredient) -> ShoppingItem:
    """New unchecked shopping item for an ingredient; no section means "Other"."""
    return ShoppingItem(
        name=ingredient.name,
        quantity=ingredient.quantity,
        unit=ingredient.unit,
        section=resolve_section(ingredient.section, ingredient.name),
        completed=False,
    )


class ShoppingListService(StoreBackedService):
    """Shopping lists stored as one collection, plus the active-list pointer."""

    def __init__(
        self,
        store: KeyValueStore,
        recipes: RecipeService,
        meal_planner: MealPlannerService,
        raise_on_write_failure: bool = True,
        scale_to_servings: bool = False,
    ):
        """
        Initialize the shopping list service.

        Args:
            store: Key-value store shared by all services
            recipes: Recipe lookup used by generation
            meal_planner: Source of planned meals for meal-plan generation
            raise_on_write_failure: See StoreBackedService
            scale_to_servings: Scale each planned recipe to the meal's servings
        """
        super().__init__(store, raise_on_write_failure=raise_on_write_failure)
        self.recipes = recipes
        self.meal_planner = meal_planner
        self.scale_to_servings = scale_to_servings

    # ==================== Persistence ====================

    def _load(self) -> List[ShoppingList]:
        return [ShoppingList.from_dict(sl) for sl in self.store.get(SHOPPING_LISTS_KEY, [])]

    def _save(self, lists: List[ShoppingList]):
        self._persist(SHOPPING_LISTS_KEY, [sl.to_dict() for sl in lists])

    @staticmethod
    def _find(lists: List[ShoppingList], list_id: str) -> ShoppingList:
        for shopping_list in lists:
            if shopping_list.id == list_id:
                return shopping_list
        raise NotFoundError("Shopping list", list_id)

    @contextmanager
    def _editing(self, list_id: str) -> Iterator[ShoppingList]:
        """
        Load, yield and save one list under the collection lock.

        Nothing is written if the body raises.
        """
        with self.store.locked(SHOPPING_LISTS_KEY):
            lists = self._load()
            shopping_list = self._find(lists, list_id)
            yield shopping_list
            shopping_list.touch()
            self._save(lists)

    # ==================== Lists ====================

    def fetch_lists(self) -> List[ShoppingList]:
        """Get all shopping lists."""
        return self._load()

    def get_list(self, list_id: str) -> ShoppingList:
        """
        Get a shopping list by ID.

        Raises:
            NotFoundError: If no list has this ID
        """
        return self._find(self._load(), list_id)

    def get_active_list(self) -> Optional[str]:
        """Get the active shopping list ID, if any."""
        return self.store.get(ACTIVE_LIST_KEY, None)

    def set_active_list(self, list_id: Optional[str]):
        """
        Mark a list as active (None clears it).

        Raises:
            NotFoundError: If no list has this ID
        """
        if list_id is not None:
            self.get_list(list_id)
        self._persist(ACTIVE_LIST_KEY, list_id)

    def create_list(self, name: str) -> str:
        """
        Create an empty shopping list. The first list ever created becomes active.

        Returns:
            ID of the new list
        """
        return self._insert_list(ShoppingList(name=ShoppingListDraft(name=name).name))

    def _insert_list(self, shopping_list: ShoppingList) -> str:
        with self.store.locked(SHOPPING_LISTS_KEY):
            lists = self._load()
            previous = [sl.to_dict() for sl in lists]
            lists.append(shopping_list)
            self._save(lists)

            if len(lists) == 1:
                self._persist_active_or_restore(shopping_list.id, previous)

        logger.info(f"Created shopping list {shopping_list.id} ({shopping_list.name}) with {len(shopping_list.items)} items")
        return shopping_list.id

    def _persist_active_or_restore(self, list_id: Optional[str], previous_lists: List[Dict[str, Any]]):
        """
        Write the active-list pointer after the lists collection changed.

        If the pointer write raises, the collection is put back to
        `previous_lists` first so the caller never sees a half-applied change.
        """
        try:
            self._persist(ACTIVE_LIST_KEY, list_id)
        except StorageError:
            logger.error(f"Active list update failed, restoring {len(previous_lists)} shopping lists")
            self.store.set(SHOPPING_LISTS_KEY, previous_lists)
            raise

    def rename_list(self, list_id: str, name: str):
        """
        Rename a shopping list.

        Raises:
            NotFoundError: If no list has this ID
        """
        new_name = ShoppingListDraft(name=name).name
        with self._editing(list_id) as shopping_list:
            shopping_list.name = new_name

    def delete_list(self, list_id: str):
        """
        Delete a shopping list.

        If it was active, the first remaining list (or nothing) becomes active.

        Raises:
            NotFoundError: If no list has this ID
        """
        with self.store.locked(SHOPPING_LISTS_KEY):
            lists = self._load()
            remaining = [sl for sl in lists if sl.id != list_id]
            if len(remaining) == len(lists):
                raise NotFoundError("Shopping list", list_id)
            previous = [sl.to_dict() for sl in lists]
            self._save(remaining)

            if self.get_active_list() == list_id:
                self._persist_active_or_restore(remaining[0].id if remaining else None, previous)

        logger.info(f"Deleted shopping list {list_id}")

    # ==================== Items ====================

    def add_item(self, list_id: str, data: Dict[str, Any]) -> str:
        """
        Add an item to a shopping list.

        Args:
            list_id: Target list
            data: Item fields (see ShoppingItemDraft). Without a section the
                item is classified by name.

        Returns:
            ID of the new item

        Raises:
            NotFoundError: If no list has this ID
        """
        draft = ShoppingItemDraft.model_validate(data)
        item = ShoppingItem(
            name=draft.name,
            quantity=draft.quantity,
            unit=draft.unit,
            section=resolve_section(draft.section or classify_section(draft.name), draft.name),
            completed=draft.completed,
            note=draft.note,
            priority=draft.priority,
        )

        with self._editing(list_id) as shopping_list:
            shopping_list.items.append(item)

        return item.id

    def add_items_from_input(self, list_id: str, text: str, priority: str = "medium") -> List[str]:
        """
        Quick-add comma separated names ("eggs, milk, paper towels").

        Each item is classified by name. Returns the new item IDs.
        """
        items = [
            ShoppingItem(name=name, section=classify_section(name), priority=priority)
            for name in split_item_input(text)
        ]
        if not items:
            return []

        with self._editing(list_id) as shopping_list:
            shopping_list.items.extend(items)

        return [item.id for item in items]

    def import_recipe_text(self, list_id: str, text: str) -> List[str]:
        """
        Add the ingredient lines found in pasted recipe text.

        Only lines containing a digit are treated as ingredients. Returns the
        new item IDs.
        """
        items = [
            ShoppingItem(
                name=parsed.name,
                quantity=parsed.amount,
                unit=parsed.unit,
                section=classify_section(parsed.name),
            )
            for parsed in parse_recipe_text(text)
        ]
        if not items:
            return []

        with self._editing(list_id) as shopping_list:
            shopping_list.items.extend(items)

        logger.info(f"Imported {len(items)} ingredients into shopping list {list_id}")
        return [item.id for item in items]

    def _find_item(self, shopping_list: ShoppingList, item_id: str) -> ShoppingItem:
        item = shopping_list.find_item(item_id)
        if item is None:
            raise NotFoundError("Item", item_id, f"in shopping list with ID {shopping_list.id}")
        return item

    def update_item(self, list_id: str, item_id: str, updates: Dict[str, Any]) -> ShoppingItem:
        """
        Apply a partial update to an item. The item id cannot change.

        Raises:
            NotFoundError: If the list or the item does not exist
        """
        changes = ShoppingItemUpdate.model_validate(updates).model_dump(exclude_unset=True)

        with self._editing(list_id) as shopping_list:
            item = self._find_item(shopping_list, item_id)
            for field_name, value in changes.items():
                if value is None and field_name != "note":
                    continue
                setattr(item, field_name, value)
            if "section" in changes:
                item.section = resolve_section(item.section, item.name)

        return item

    def remove_item(self, list_id: str, item_id: str):
        """
        Remove an item from a list.

        Raises:
            NotFoundError: If the list or the item does not exist
        """
        with self._editing(list_id) as shopping_list:
            item = self._find_item(shopping_list, item_id)
            shopping_list.items.remove(item)

    def toggle_item_completion(self, list_id: str, item_id: str) -> bool:
        """
        Flip an item's purchased flag.

        Returns:
            The new `completed` value
        """
        with self._editing(list_id) as shopping_list:
            item = self._find_item(shopping_list, item_id)
            item.completed = not item.completed

        return item.completed

    def clear_completed_items(self, list_id: str) -> int:
        """
        Remove all purchased items from a list.

        Returns:
            Number of items removed
        """
        with self._editing(list_id) as shopping_list:
            before = len(shopping_list.items)
            shopping_list.items = [item for item in shopping_list.items if not item.completed]
            removed = before - len(shopping_list.items)

        return removed

    # ==================== Generation ====================

    def _write_generated(self, items: List[ShoppingItem], list_id: Optional[str], default_name: str) -> str:
        """Append generated items to `list_id`, or to a new list named `default_name`."""
        if list_id is None:
            return self._insert_list(ShoppingList(name=default_name, items=items))

        with self._editing(list_id) as shopping_list:
            shopping_list.items.extend(items)

        logger.info(f"Added {len(items)} generated items to shopping list {list_id}")
        return list_id

    def generate_list_from_recipe(self, recipe_id: str, list_id: Optional[str] = None) -> str:
        """
        Add one item per recipe ingredient to a shopping list.

        Args:
            recipe_id: Recipe to shop for
            list_id: Existing list to append to; a new list named
                "Ingredients for <title>" is created when omitted

        Returns:
            ID of the list the items were written to

        Raises:
            NotFoundError: If the recipe or the target list does not exist
                (nothing is written)
        """
        recipe = self.recipes.get_recipe_by_id(recipe_id)
        if recipe is None:
            logger.error(f"Error generating shopping list from recipe with ID {recipe_id}: not found")
            raise NotFoundError("Recipe", recipe_id)

        items = [item_from_ingredient(ing) for ing in recipe.ingredients]
        return self._write_generated(items, list_id, f"Ingredients for {recipe.title}")

    def gather_meal_plan_ingredients(self, start: DateLike, end: DateLike) -> List[Ingredient]:
        """
        Collect the ingredients of every recipe planned from start to end.

        Meals without a recipe and meals whose recipe is no longer stored are
        skipped. Sections are resolved before returning, so a missing
        section is already "Other".

        Raises:
            EmptyResultError: If no meals are planned in the range, or none
                of them resolves to a stored recipe
        """
        meals = self.meal_planner.get_planned_meals_for_date_range(start, end)
        if not meals:
            raise EmptyResultError("No planned meals found in the selected date range")

        gathered: List[Ingredient] = []
        resolved = 0

        for meal in meals:
            if not meal.recipe_id:
                continue

            recipe = self.recipes.get_recipe_by_id(meal.recipe_id)
            if recipe is None:
                logger.warning(f"Planned meal {meal.id} references missing recipe {meal.recipe_id}")
                continue

            resolved += 1
            if self.scale_to_servings:
                ingredients = recipe.get_scaled_ingredients(meal.servings)
            else:
                ingredients = recipe.ingredients

            gathered.extend(
                replace(ing, section=resolve_section(ing.section, ing.name))
                for ing in ingredients
            )

        if resolved == 0:
            raise EmptyResultError("No recipes found in the planned meals")

        return gathered

    def generate_list_from_meal_plan(
        self,
        start: DateLike,
        end: DateLike,
        list_id: Optional[str] = None,
    ) -> str:
        """
        Build a consolidated shopping list for all meals planned in a date range.

        Args:
            start: First day of the range (inclusive)
            end: Last day of the range (inclusive)
            list_id: Existing list to append to; a new list named
                "Meal Plan (<start> - <end>)" is created when omitted

        Returns:
            ID of the list the items were written to

        Raises:
            EmptyResultError: If there is nothing to shop for (nothing is written)
            NotFoundError: If `list_id` does not exist (nothing is written)
        """
        try:
            gathered = self.gather_meal_plan_ingredients(start, end)
        except EmptyResultError as e:
            logger.error(f"Error generating shopping list from meal plan: {e}")
            raise

        consolidated = consolidate_ingredients(gathered)
        items = [item_from_ingredient(ing) for ing in consolidated]
        name = f"Meal Plan ({format_list_date(start)} - {format_list_date(end)})"

        logger.info(
            f"Generated {len(items)} items from {len(gathered)} ingredients "
            f"for {format_list_date(start)} - {format_list_date(end)}"
        )
        return self._write_generated(items, list_id, name)
