"""
Data models for Recipe Roulette.

These models define the core entities used throughout the system:
- Recipe: stored recipes with ingredients and ordered steps
- ShoppingList / ShoppingItem: persisted shopping lists
- MealPlan / PlannedMeal: meals planned on calendar dates
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Union

from .store import parse_datetime

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")
DIFFICULTIES = ("easy", "medium", "hard")
PRIORITIES = ("high", "medium", "low")
PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def new_id() -> str:
    """Generate an opaque unique id."""
    return str(uuid.uuid4())


def as_datetime(value: Union[str, datetime, None]) -> datetime:
    """Accept a datetime or an ISO-8601 string (store reads revive strings)."""
    if value is None:
        return datetime.now()
    if isinstance(value, datetime):
        return value
    return parse_datetime(value)


def as_text(value: Union[str, datetime, None]) -> Optional[str]:
    """
    Undo datetime revival on a free-text field.

    The store revives every ISO-8601 datetime string it reads, including a
    name or note that merely looks like one. Text fields go through this on
    load so they stay strings.
    """
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def as_date(value: Union[str, date, datetime]) -> date:
    """Normalize a calendar date given as date, datetime or ISO string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if "T" in value:
        return parse_datetime(value).date()
    return date.fromisoformat(value)


@dataclass
class Ingredient:
    """A structured ingredient: name, numeric quantity, unit and store section."""

    name: str
    quantity: float = 0.0  # 0.0 when the amount is unknown
    unit: str = ""
    section: Optional[str] = None
    id: str = field(default_factory=new_id)

    def __str__(self) -> str:
        """Human-readable ingredient string."""
        if self.quantity and self.unit:
            return f"{format_quantity(self.quantity)} {self.unit} {self.name}"
        elif self.quantity:
            return f"{format_quantity(self.quantity)} {self.name}"
        return self.name

    def scale(self, factor: float) -> "Ingredient":
        """Return a copy with the quantity multiplied by `factor`."""
        return replace(self, quantity=self.quantity * factor)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "section": self.section,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Ingredient":
        return cls(
            id=data.get("id") or new_id(),
            name=as_text(data["name"]),
            quantity=float(data.get("quantity") or 0.0),
            unit=as_text(data.get("unit")) or "",
            section=data.get("section"),
        )


def format_quantity(quantity: float) -> str:
    """Format a quantity without a trailing '.0' for whole numbers."""
    if quantity == int(quantity):
        return str(int(quantity))
    return f"{quantity:.2f}".rstrip("0").rstrip(".")


@dataclass
class RecipeStep:
    """One instruction step; `order` is its explicit position."""

    order: int
    instruction: str
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict:
        return {"id": self.id, "order": self.order, "instruction": self.instruction}

    @classmethod
    def from_dict(cls, data: Dict) -> "RecipeStep":
        return cls(
            id=data.get("id") or new_id(),
            order=int(data["order"]),
            instruction=as_text(data["instruction"]),
        )


@dataclass
class Recipe:
    """A stored recipe. Ingredients and steps are owned by value."""

    title: str
    description: str
    ingredients: List[Ingredient] = field(default_factory=list)
    instructions: List[RecipeStep] = field(default_factory=list)
    prep_time: int = 0  # minutes
    cook_time: int = 0  # minutes
    servings: int = 1
    difficulty: str = "medium"
    tags: List[str] = field(default_factory=list)
    image_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        """Keep steps in their explicit order."""
        self.instructions.sort(key=lambda step: step.order)

    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time

    def get_ingredient_names(self) -> List[str]:
        """Get ingredient names (lower-cased)."""
        return [ing.name.lower() for ing in self.ingredients]

    def matches_query(self, query: str) -> bool:
        """
        Check whether a search term appears in the recipe.

        Searches title, description, ingredient names and tags
        (case-insensitive substring match).
        """
        normalized = query.lower().strip()
        if normalized in self.title.lower() or normalized in self.description.lower():
            return True
        if any(normalized in name for name in self.get_ingredient_names()):
            return True
        return any(normalized in tag.lower() for tag in self.tags)

    def get_scaled_ingredients(self, target_servings: float) -> List[Ingredient]:
        """
        Get ingredients scaled from this recipe's servings to `target_servings`.

        Note:
            Original ingredients are unchanged.
        """
        factor = target_servings / self.servings if self.servings else 1.0
        return [ing.scale(factor) for ing in self.ingredients]

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "prep_time": self.prep_time,
            "cook_time": self.cook_time,
            "servings": self.servings,
            "difficulty": self.difficulty,
            "tags": list(self.tags),
            "ingredients": [ing.to_dict() for ing in self.ingredients],
            "instructions": [step.to_dict() for step in self.instructions],
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Recipe":
        """Create Recipe from dictionary."""
        return cls(
            id=data["id"],
            title=as_text(data["title"]),
            description=as_text(data.get("description", "")),
            image_url=as_text(data.get("image_url")),
            prep_time=data.get("prep_time", 0),
            cook_time=data.get("cook_time", 0),
            servings=data.get("servings", 1),
            difficulty=data.get("difficulty", "medium"),
            tags=[as_text(tag) for tag in data.get("tags", [])],
            ingredients=[Ingredient.from_dict(i) for i in data.get("ingredients", [])],
            instructions=[RecipeStep.from_dict(s) for s in data.get("instructions", [])],
            notes=as_text(data.get("notes")),
            created_at=as_datetime(data.get("created_at")),
            updated_at=as_datetime(data.get("updated_at")),
        )


@dataclass
class ShoppingItem:
    """Single item on a shopping list. `id` never changes once created."""

    name: str
    quantity: float = 0.0
    unit: str = ""
    section: str = "Other"
    completed: bool = False
    note: Optional[str] = None
    priority: str = "medium"
    id: str = field(default_factory=new_id)

    def __str__(self) -> str:
        if self.quantity and self.unit:
            return f"{self.name}: {format_quantity(self.quantity)} {self.unit}"
        elif self.quantity:
            return f"{self.name}: {format_quantity(self.quantity)}"
        return self.name

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "section": self.section,
            "completed": self.completed,
            "note": self.note,
            "priority": self.priority,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ShoppingItem":
        return cls(
            id=data["id"],
            name=as_text(data["name"]),
            quantity=float(data.get("quantity") or 0.0),
            unit=as_text(data.get("unit")) or "",
            section=data.get("section") or "Other",
            completed=bool(data.get("completed", False)),
            note=as_text(data.get("note")),
            priority=data.get("priority", "medium"),
        )


@dataclass
class ShoppingList:
    """A named shopping list. `updated_at` moves on every mutation."""

    name: str
    items: List[ShoppingItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    def touch(self):
        """Refresh the modification timestamp."""
        self.updated_at = datetime.now()

    def find_item(self, item_id: str) -> Optional[ShoppingItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    @property
    def completed_count(self) -> int:
        return sum(1 for item in self.items if item.completed)

    def group_by_section(self) -> List[Tuple[str, List[ShoppingItem]]]:
        """
        Group items by store section for display.

        Returns:
            (section, items) pairs in canonical section order, each group
            sorted high -> medium -> low priority. Items whose section is not
            a known label are shown under "Other"; empty sections are omitted.
        """
        from ..shopping.sections import SECTIONS, sort_by_priority

        grouped: Dict[str, List[ShoppingItem]] = {section: [] for section in SECTIONS}
        for item in self.items:
            grouped.get(item.section, grouped["Other"]).append(item)

        return [
            (section, sort_by_priority(grouped[section]))
            for section in SECTIONS
            if grouped[section]
        ]

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "items": [item.to_dict() for item in self.items],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ShoppingList":
        """Create ShoppingList from dictionary."""
        return cls(
            id=data["id"],
            name=as_text(data["name"]),
            items=[ShoppingItem.from_dict(i) for i in data.get("items", [])],
            created_at=as_datetime(data.get("created_at")),
            updated_at=as_datetime(data.get("updated_at")),
        )


@dataclass
class PlannedMeal:
    """
    A meal planned for a calendar date.

    Either `recipe_id` or `custom_meal_name` is meaningful, by convention.
    """

    date: date
    meal_type: str = "dinner"
    recipe_id: Optional[str] = None
    custom_meal_name: Optional[str] = None
    servings: int = 1
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.date = as_date(self.date)

    def __str__(self) -> str:
        label = self.custom_meal_name or self.recipe_id or "Unnamed meal"
        return f"{self.date.isoformat()} - {self.meal_type.title()}: {label} (serves {self.servings})"

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "meal_type": self.meal_type,
            "recipe_id": self.recipe_id,
            "custom_meal_name": self.custom_meal_name,
            "servings": self.servings,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "PlannedMeal":
        return cls(
            id=data["id"],
            date=as_date(data["date"]),
            meal_type=data.get("meal_type", "dinner"),
            recipe_id=data.get("recipe_id"),
            custom_meal_name=as_text(data.get("custom_meal_name")),
            servings=data.get("servings", 1),
        )


@dataclass
class MealPlan:
    """The single global meal plan."""

    planned_meals: List[PlannedMeal] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def find_meal(self, meal_id: str) -> Optional[PlannedMeal]:
        for meal in self.planned_meals:
            if meal.id == meal_id:
                return meal
        return None

    def meals_on(self, day: Union[date, datetime, str]) -> List[PlannedMeal]:
        """Get all meals planned for a calendar date."""
        target = as_date(day)
        return [meal for meal in self.planned_meals if meal.date == target]

    def meals_between(
        self,
        start: Union[date, datetime, str],
        end: Union[date, datetime, str],
    ) -> List[PlannedMeal]:
        """Get meals whose date falls in [start, end], inclusive."""
        start_date, end_date = as_date(start), as_date(end)
        return [
            meal for meal in self.planned_meals
            if start_date <= meal.date <= end_date
        ]

    def planned_dates(self) -> List[date]:
        """Get the unique dates that have planned meals, in first-seen order."""
        return list(dict.fromkeys(meal.date for meal in self.planned_meals))

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "planned_meals": [meal.to_dict() for meal in self.planned_meals],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "MealPlan":
        return cls(
            id=data["id"],
            planned_meals=[PlannedMeal.from_dict(m) for m in data.get("planned_meals", [])],
        )
