"""
Ingredient consolidation for generated shopping lists.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Tuple

from ..data.models import Ingredient

logger = logging.getLogger(__name__)


def consolidation_key(ingredient: Ingredient) -> Tuple[str, str]:
    """Case-insensitive (name, unit) identity of a purchasable item."""
    return (ingredient.name.lower(), (ingredient.unit or "").lower())


def consolidate_ingredients(ingredients: Iterable[Ingredient]) -> List[Ingredient]:
    """
    Merge ingredients that share a (name, unit) key by summing quantities.

    Args:
        ingredients: Ingredients gathered from one or more recipes

    Returns:
        One Ingredient per distinct key. Name, unit and section come from
        the first occurrence. Units are never converted, so "flour"/"cups"
        and "flour"/"grams" stay separate. Inputs are not modified.
    """
    consolidated: Dict[Tuple[str, str], Ingredient] = {}
    total = 0

    for ingredient in ingredients:
        total += 1
        key = consolidation_key(ingredient)
        existing = consolidated.get(key)

        if existing is None:
            consolidated[key] = replace(ingredient)
        else:
            existing.quantity += ingredient.quantity

    logger.debug(f"Consolidated {total} ingredients into {len(consolidated)} entries")
    return list(consolidated.values())
