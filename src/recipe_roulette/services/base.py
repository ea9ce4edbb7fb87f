"""
Shared persistence helper for store-backed services.
"""

import logging
from typing import Any

from ..data.store import KeyValueStore, WriteResult
from ..errors import StorageError

logger = logging.getLogger(__name__)


class StoreBackedService:
    """Base for services that read and write whole collections in the store."""

    def __init__(self, store: KeyValueStore, raise_on_write_failure: bool = True):
        """
        Args:
            store: Key-value store shared by all services
            raise_on_write_failure: Raise StorageError when a write fails;
                when False the failure is only logged
        """
        self.store = store
        self.raise_on_write_failure = raise_on_write_failure

    def _persist(self, key: str, value: Any) -> WriteResult:
        result = self.store.set(key, value)
        if not result.ok:
            if self.raise_on_write_failure:
                raise StorageError(key, result.error)
            logger.warning(f"Write to '{key}' failed and was not persisted: {result.error}")
        return result
