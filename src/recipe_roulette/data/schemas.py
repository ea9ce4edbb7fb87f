"""
Input validation for service operations.

Service methods accept plain dicts; these pydantic models check them before
anything is written to the store. Update models ignore unknown keys, so an
`id` passed in an update is dropped rather than applied.
"""

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import as_date

Difficulty = Literal["easy", "medium", "hard"]
MealType = Literal["breakfast", "lunch", "dinner", "snack"]
Priority = Literal["high", "medium", "low"]


def _required_text(value: str, field_name: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} is required")
    return value


# =============================================================================
# Shopping lists
# =============================================================================

class ShoppingListDraft(BaseModel):
    """Name for a new or renamed shopping list."""
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _required_text(v, "List name")


class ShoppingItemDraft(BaseModel):
    """A new shopping-list item (the id is generated on insert)."""
    name: str
    quantity: float = Field(default=0.0, ge=0)
    unit: str = ""
    section: Optional[str] = None
    completed: bool = False
    note: Optional[str] = None
    priority: Priority = "medium"

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _required_text(v, "Item name")


class ShoppingItemUpdate(BaseModel):
    """Partial update for an existing item."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    quantity: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    section: Optional[str] = None
    completed: Optional[bool] = None
    note: Optional[str] = None
    priority: Optional[Priority] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _required_text(v, "Item name")


# =============================================================================
# Recipes
# =============================================================================

class IngredientDraft(BaseModel):
    """Ingredient as supplied with a recipe."""
    name: str
    quantity: float = Field(default=0.0, ge=0)
    unit: str = ""
    section: Optional[str] = None
    id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _required_text(v, "Ingredient name")


class RecipeStepDraft(BaseModel):
    """Instruction step with its explicit position."""
    order: int = Field(ge=0)
    instruction: str
    id: Optional[str] = None

    @field_validator("instruction")
    @classmethod
    def validate_instruction(cls, v: str) -> str:
        return _required_text(v, "Instruction")


class RecipeDraft(BaseModel):
    """A new recipe (id and timestamps are assigned on insert)."""
    title: str
    description: str
    image_url: Optional[str] = None
    prep_time: int = Field(default=0, ge=0)
    cook_time: int = Field(default=0, ge=0)
    servings: int = Field(default=1, gt=0)
    difficulty: Difficulty = "medium"
    tags: List[str] = Field(default_factory=list)
    ingredients: List[IngredientDraft] = Field(default_factory=list)
    instructions: List[RecipeStepDraft] = Field(default_factory=list)
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _required_text(v, "Title")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _required_text(v, "Description")

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v: List[str]) -> List[str]:
        """Tags behave like a set; keep first occurrence order."""
        return list(dict.fromkeys(tag.strip() for tag in v if tag.strip()))


class RecipeUpdate(RecipeDraft):
    """Partial update for an existing recipe."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    prep_time: Optional[int] = Field(default=None, ge=0)
    cook_time: Optional[int] = Field(default=None, ge=0)
    servings: Optional[int] = Field(default=None, gt=0)
    difficulty: Optional[Difficulty] = None
    tags: Optional[List[str]] = None
    ingredients: Optional[List[IngredientDraft]] = None
    instructions: Optional[List[RecipeStepDraft]] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _required_text(v, "Title")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _required_text(v, "Description")

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        return list(dict.fromkeys(tag.strip() for tag in v if tag.strip()))


# =============================================================================
# Meal planning
# =============================================================================

class PlannedMealDraft(BaseModel):
    """A meal to add to the plan."""
    date: dt.date
    meal_type: MealType = "dinner"
    recipe_id: Optional[str] = None
    custom_meal_name: Optional[str] = None
    servings: int = Field(default=1, gt=0)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        """Accept datetimes and ISO strings by keeping only the calendar date."""
        if isinstance(v, (str, dt.datetime)):
            return as_date(v)
        return v


class PlannedMealUpdate(PlannedMealDraft):
    """Partial update for a planned meal."""
    model_config = ConfigDict(extra="ignore")

    date: Optional[dt.date] = None
    meal_type: Optional[MealType] = None
    servings: Optional[int] = Field(default=None, gt=0)
