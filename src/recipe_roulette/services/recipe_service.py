"""
Recipe storage, search and filtering.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..data.models import Ingredient, Recipe, RecipeStep, new_id
from ..data.schemas import IngredientDraft, RecipeDraft, RecipeStepDraft, RecipeUpdate
from ..data.store import RECIPES_KEY
from ..errors import NotFoundError
from .base import StoreBackedService

logger = logging.getLogger(__name__)


def _build_ingredients(drafts: List[IngredientDraft]) -> List[Ingredient]:
    return [
        Ingredient(
            id=d.id or new_id(),
            name=d.name,
            quantity=d.quantity,
            unit=d.unit,
            section=d.section,
        )
        for d in drafts
    ]


def _build_steps(drafts: List[RecipeStepDraft]) -> List[RecipeStep]:
    return [
        RecipeStep(id=d.id or new_id(), order=d.order, instruction=d.instruction)
        for d in drafts
    ]


class RecipeService(StoreBackedService):
    """Recipe collection stored under a single key."""

    def _load(self) -> List[Recipe]:
        return [Recipe.from_dict(r) for r in self.store.get(RECIPES_KEY, [])]

    def _save(self, recipes: List[Recipe]):
        self._persist(RECIPES_KEY, [r.to_dict() for r in recipes])

    def fetch_recipes(self) -> List[Recipe]:
        """Get all stored recipes."""
        return self._load()

    def get_recipe_by_id(self, recipe_id: str) -> Optional[Recipe]:
        """
        Get a recipe by ID.

        Returns:
            Recipe object or None if not found
        """
        for recipe in self._load():
            if recipe.id == recipe_id:
                return recipe
        return None

    def add_recipe(self, data: Dict[str, Any]) -> str:
        """
        Validate and store a new recipe.

        Args:
            data: Recipe fields (see RecipeDraft); id and timestamps are assigned

        Returns:
            ID of the new recipe

        Raises:
            pydantic.ValidationError: If the recipe data is invalid
        """
        draft = RecipeDraft.model_validate(data)
        now = datetime.now()

        recipe = Recipe(
            title=draft.title,
            description=draft.description,
            image_url=draft.image_url,
            prep_time=draft.prep_time,
            cook_time=draft.cook_time,
            servings=draft.servings,
            difficulty=draft.difficulty,
            tags=draft.tags,
            ingredients=_build_ingredients(draft.ingredients),
            instructions=_build_steps(draft.instructions),
            notes=draft.notes,
            created_at=now,
            updated_at=now,
        )

        with self.store.locked(RECIPES_KEY):
            recipes = self._load()
            recipes.append(recipe)
            self._save(recipes)

        logger.info(f"Added recipe {recipe.id} ({recipe.title})")
        return recipe.id

    def update_recipe(self, recipe_id: str, updates: Dict[str, Any]) -> Recipe:
        """
        Apply a partial update to a recipe.

        The id never changes and updated_at is refreshed.

        Raises:
            NotFoundError: If no recipe has this ID
        """
        changes = RecipeUpdate.model_validate(updates).model_dump(exclude_unset=True)

        with self.store.locked(RECIPES_KEY):
            recipes = self._load()
            recipe = next((r for r in recipes if r.id == recipe_id), None)
            if recipe is None:
                raise NotFoundError("Recipe", recipe_id)

            for field_name, value in changes.items():
                if field_name == "ingredients":
                    recipe.ingredients = _build_ingredients(
                        [IngredientDraft.model_validate(i) for i in value]
                    )
                elif field_name == "instructions":
                    recipe.instructions = sorted(
                        _build_steps([RecipeStepDraft.model_validate(s) for s in value]),
                        key=lambda step: step.order,
                    )
                elif value is not None or field_name in ("image_url", "notes"):
                    setattr(recipe, field_name, value)

            recipe.updated_at = datetime.now()
            self._save(recipes)

        return recipe

    def delete_recipe(self, recipe_id: str):
        """
        Delete a recipe.

        Raises:
            NotFoundError: If no recipe has this ID
        """
        with self.store.locked(RECIPES_KEY):
            recipes = self._load()
            remaining = [r for r in recipes if r.id != recipe_id]
            if len(remaining) == len(recipes):
                raise NotFoundError("Recipe", recipe_id)
            self._save(remaining)

        logger.info(f"Deleted recipe {recipe_id}")

    def search_recipes(self, query: str) -> List[Recipe]:
        """
        Search recipes by title, description, ingredient names and tags.

        A blank query returns every recipe.
        """
        recipes = self._load()
        if not query.strip():
            return recipes
        return [r for r in recipes if r.matches_query(query)]

    def filter_recipes(
        self,
        query: Optional[str] = None,
        tags: Optional[List[str]] = None,
        difficulty: Optional[str] = None,
        max_prep_time: Optional[int] = None,
        max_cook_time: Optional[int] = None,
    ) -> List[Recipe]:
        """
        Filter recipes on several criteria at once.

        Args:
            query: Search term (see search_recipes)
            tags: Recipe must carry at least one of these tags
            difficulty: "easy", "medium" or "hard"
            max_prep_time: Maximum prep time in minutes
            max_cook_time: Maximum cook time in minutes

        Returns:
            Recipes matching every given criterion
        """
        results = []
        for recipe in self._load():
            if query and not recipe.matches_query(query):
                continue
            if tags and not any(tag in recipe.tags for tag in tags):
                continue
            if difficulty and recipe.difficulty != difficulty:
                continue
            if max_prep_time is not None and recipe.prep_time > max_prep_time:
                continue
            if max_cook_time is not None and recipe.cook_time > max_cook_time:
                continue
            results.append(recipe)
        return results
