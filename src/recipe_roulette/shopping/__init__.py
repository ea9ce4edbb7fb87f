"""
Ingredient pipeline: parsing, store-section classification and consolidation.
"""

from .parser import ParsedIngredient, parse_ingredient, parse_amount, parse_recipe_text, split_item_input
from .sections import SECTIONS, SECTION_KEYWORDS, classify_section, resolve_section, is_valid_section
from .consolidator import consolidate_ingredients

__all__ = [
    "ParsedIngredient",
    "parse_ingredient",
    "parse_amount",
    "parse_recipe_text",
    "split_item_input",
    "SECTIONS",
    "SECTION_KEYWORDS",
    "classify_section",
    "resolve_section",
    "is_valid_section",
    "consolidate_ingredients",
]
