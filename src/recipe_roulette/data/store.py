"""
Key-value store for Recipe Roulette data.

Values are stored as JSON text. datetime and date values are written as
ISO-8601 strings, and ISO-8601 datetime strings are turned back into
datetime objects on read.

Two backends are available:
- MemoryBackend: a plain dict, used by tests
- SQLiteBackend: a single kv_store table in a SQLite database file

Every mutation is a whole-value read-modify-write of one key, so callers wrap
those cycles in `KeyValueStore.locked(key)`.
"""

import json
import logging
import re
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

STORAGE_VERSION = "1.0.0"

# Logical keys (prefixed with the store namespace when persisted)
RECIPES_KEY = "recipes"
SHOPPING_LISTS_KEY = "shopping_lists"
ACTIVE_LIST_KEY = "active_list_id"
MEAL_PLAN_KEY = "meal_plan"
VERSION_KEY = "storage_version"

ISO_DATETIME_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?(Z|[+-]\d{2}:\d{2})?$"
)


def _encode_value(value: Any) -> str:
    """JSON `default` hook for values json can't serialize natively."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def parse_datetime(value: str) -> datetime:
    """Parse an ISO-8601 datetime string, accepting a trailing 'Z'."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _revive(value: Any) -> Any:
    """Recursively turn ISO-8601 datetime strings back into datetimes."""
    if isinstance(value, str) and ISO_DATETIME_PATTERN.match(value):
        return parse_datetime(value)
    if isinstance(value, list):
        return [_revive(v) for v in value]
    if isinstance(value, dict):
        return {k: _revive(v) for k, v in value.items()}
    return value


def dumps(value: Any) -> str:
    """Serialize a value for storage."""
    return json.dumps(value, default=_encode_value)


def loads(raw: str) -> Any:
    """Deserialize a stored value, reviving datetimes."""
    return _revive(json.loads(raw))


@dataclass
class WriteResult:
    """Outcome of a store write."""

    key: str
    ok: bool = True
    error: Optional[BaseException] = None

    def __bool__(self) -> bool:
        return self.ok


class MemoryBackend:
    """In-memory backend holding serialized strings."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def get_raw(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_raw(self, key: str, raw: str) -> None:
        self.data[key] = raw

    def delete_raw(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self.data.keys())

    def close(self) -> None:
        pass


class SQLiteBackend:
    """SQLite backend storing one row per key."""

    def __init__(self, db_path: Path):
        """
        Initialize the SQLite backend.

        Args:
            db_path: Database file; its parent directory is created if needed
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _init_database(self):
        """Initialize the key-value table."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
            logger.info(f"Key-value database initialized at {self.db_path}")

    def get_raw(self, key: str) -> Optional[str]:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row[0] if row else None

    def set_raw(self, key: str, raw: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                (key, raw, datetime.now().isoformat()),
            )
            conn.commit()

    def delete_raw(self, key: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()

    def keys(self) -> List[str]:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT key FROM kv_store")
            return [row[0] for row in cursor.fetchall()]

    def close(self) -> None:
        pass


Migration = Callable[["KeyValueStore"], None]


class KeyValueStore:
    """Namespaced JSON key-value store over a backend."""

    def __init__(self, backend=None, namespace: str = "recipe_roulette_"):
        """
        Initialize the store.

        Args:
            backend: MemoryBackend or SQLiteBackend (defaults to memory)
            namespace: Prefix applied to every logical key
        """
        self.backend = backend if backend is not None else MemoryBackend()
        self.namespace = namespace
        self.migrations: Dict[str, Migration] = {}

        self._locks: Dict[str, threading.RLock] = {}
        self._lock_manager = threading.Lock()

    def _full_key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    # ==================== Schema Version ====================

    def initialize(self) -> str:
        """
        Record the schema version, running migrations if it changed.

        Returns:
            The storage version in effect after initialization
        """
        current = self.get(VERSION_KEY, None)

        if current is None:
            self.set(VERSION_KEY, STORAGE_VERSION)
            return STORAGE_VERSION

        if current != STORAGE_VERSION:
            self.migrate(current, STORAGE_VERSION)
            self.set(VERSION_KEY, STORAGE_VERSION)

        return STORAGE_VERSION

    def register_migration(self, from_version: str, migration: Migration) -> None:
        """Register a callable that upgrades data stored at `from_version`."""
        self.migrations[from_version] = migration

    def migrate(self, from_version: str, to_version: str) -> None:
        """Run the migration registered for `from_version`, if any."""
        logger.info(f"Migrating storage from version {from_version} to {to_version}")
        migration = self.migrations.get(from_version)
        if migration is not None:
            migration(self)

    # ==================== Read / Write ====================

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a value.

        Returns `default` when the key is missing or unreadable.
        """
        try:
            raw = self.backend.get_raw(self._full_key(key))
            if raw is None:
                return default
            return loads(raw)
        except (ValueError, TypeError, sqlite3.Error, OSError) as e:
            logger.error(f"Error retrieving {key} from storage: {e}")
            return default

    def set(self, key: str, value: Any) -> WriteResult:
        """Serialize and write a value."""
        try:
            self.backend.set_raw(self._full_key(key), dumps(value))
            return WriteResult(key=key)
        except (ValueError, TypeError, sqlite3.Error, OSError) as e:
            logger.error(f"Error storing {key} in storage: {e}")
            return WriteResult(key=key, ok=False, error=e)

    def remove(self, key: str) -> WriteResult:
        """Delete a value."""
        try:
            self.backend.delete_raw(self._full_key(key))
            return WriteResult(key=key)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Error removing {key} from storage: {e}")
            return WriteResult(key=key, ok=False, error=e)

    def clear(self) -> None:
        """Remove every namespaced key except the schema version."""
        version_key = self._full_key(VERSION_KEY)
        try:
            for full_key in self.backend.keys():
                if full_key.startswith(self.namespace) and full_key != version_key:
                    self.backend.delete_raw(full_key)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Error clearing storage: {e}")

    # ==================== Serialization Point ====================

    @contextmanager
    def locked(self, key: str) -> Iterator[None]:
        """
        Hold the re-entrant lock for `key` while a read-modify-write runs.

        Concurrent generation or append calls on the same collection run one
        after another instead of overwriting each other's writes.
        """
        with self._lock_manager:
            lock = self._locks.setdefault(key, threading.RLock())
        with lock:
            yield

    def close(self) -> None:
        self.backend.close()
