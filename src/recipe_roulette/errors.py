"""
Exception types raised by the Recipe Roulette services.

- NotFoundError: a recipe, list, item or planned meal id is not stored
- EmptyResultError: a generation request has nothing to put on a list
- StorageError: a write to the key-value store failed
"""

from typing import Optional


class RecipeRouletteError(Exception):
    """Base class for all service-level failures."""


class NotFoundError(RecipeRouletteError):
    """Raised when a referenced id does not resolve to a stored object."""

    def __init__(self, kind: str, identifier: str, detail: Optional[str] = None):
        self.kind = kind
        self.identifier = identifier
        message = f"{kind} with ID {identifier} not found"
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class EmptyResultError(RecipeRouletteError):
    """Raised when list generation finds nothing to add."""


class StorageError(RecipeRouletteError):
    """Raised when a persisted write could not be completed."""

    def __init__(self, key: str, cause: Optional[BaseException] = None):
        self.key = key
        self.cause = cause
        super().__init__(f"Failed to persist '{key}': {cause}")
