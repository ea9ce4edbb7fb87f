"""
Free-text ingredient parsing.

A line is split into three zones: an optional leading quantity (integers,
decimals such as ".5", fractions and mixed numbers such as "1 1/2"), the next
bare word as the unit, and the remainder as the name. The unit may be
attached to the number ("500g flour"). A single word after the quantity is
the name ("3 eggs"), but otherwise the unit rule is greedy, so "2 large eggs"
yields unit "large". Multi-word amounts ("a pinch of salt",
"1 (15 oz) can beans") are not understood.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from ..data.models import Ingredient

INGREDIENT_PATTERN = re.compile(
    r"^(?P<quantity>(?:\d|\.\d)[\d./]*(?:\s+\d[\d./]*)*)"
    r"\s*(?:(?P<unit>[a-zA-Z]+)\s+)?"
    r"(?P<name>[^\d\s].*)$"
)

QUANTITY_TOKEN = re.compile(r"^(?:(\d+)/(\d+)|\d+(?:\.\d+)?|\.\d+)$")


@dataclass
class ParsedIngredient:
    """Result of parsing one line. Fields default to empty strings."""

    name: str
    quantity: str = ""
    unit: str = ""

    @property
    def amount(self) -> float:
        """Numeric value of `quantity` (0.0 when absent)."""
        return parse_amount(self.quantity)

    def to_ingredient(self, section: Optional[str] = None) -> Ingredient:
        return Ingredient(
            name=self.name,
            quantity=self.amount,
            unit=self.unit,
            section=section,
        )


def parse_ingredient(line: str) -> ParsedIngredient:
    """
    Parse an ingredient line into name, quantity and unit.

    Args:
        line: e.g. "2 cups flour"

    Returns:
        ParsedIngredient; a line without a numeric prefix comes back with
        empty quantity and unit and the trimmed line as its name

    Note:
        Blank lines are not rejected here and come back with a blank name;
        callers filter them first.
    """
    text = line.strip()
    match = INGREDIENT_PATTERN.match(text)

    if not match:
        return ParsedIngredient(name=text)

    return ParsedIngredient(
        name=match.group("name").strip(),
        quantity=match.group("quantity").strip(),
        unit=(match.group("unit") or "").strip(),
    )


def parse_amount(text: str) -> float:
    """
    Convert a quantity string to a number.

    Handles "2", "0.5", ".5", "1/2" and mixed numbers like "1 1/2".
    Returns 0.0 for empty or unparseable input.
    """
    total = 0.0
    tokens = (text or "").split()
    if not tokens:
        return 0.0

    for token in tokens:
        match = QUANTITY_TOKEN.match(token)
        if not match:
            return 0.0
        if match.group(1) is not None:
            denominator = int(match.group(2))
            if denominator == 0:
                return 0.0
            total += int(match.group(1)) / denominator
        else:
            total += float(token)

    return total


def parse_recipe_text(text: str) -> List[ParsedIngredient]:
    """
    Pull ingredient lines out of pasted recipe text.

    Splits on newlines and commas and keeps only non-blank lines that contain
    a digit (a rough "has a quantity" test), dropping results with no name.
    """
    lines = [line.strip() for line in re.split(r"\n|,", text)]
    parsed = [
        parse_ingredient(line)
        for line in lines
        if line and re.search(r"\d", line)
    ]
    return [p for p in parsed if p.name]


def split_item_input(text: str) -> List[str]:
    """Split comma-separated quick-add input into item names."""
    return [name.strip() for name in text.split(",") if name.strip()]
