"""
Configuration and logging setup for Recipe Roulette.

Settings are read from environment variables (a local .env file is loaded
first when present).
"""

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

STORAGE_BACKENDS = ("sqlite", "memory")


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings for the store and services."""

    data_dir: Path = Path("data")
    storage_backend: str = "sqlite"
    namespace: str = "recipe_roulette_"
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # Raise StorageError when a write fails instead of only logging it
    raise_on_write_failure: bool = True

    # Scale recipe quantities by PlannedMeal.servings / Recipe.servings
    scale_to_servings: bool = False

    @property
    def db_path(self) -> Path:
        """Location of the SQLite key-value database."""
        return self.data_dir / "recipe_roulette.db"

    @classmethod
    def from_env(cls, dotenv_path: Optional[Path] = None) -> "Settings":
        """
        Load settings from environment variables.

        Args:
            dotenv_path: Optional explicit .env file; defaults to searching
                from the current directory upwards

        Returns:
            Settings instance
        """
        load_dotenv(dotenv_path=dotenv_path)

        log_file = os.environ.get("RECIPE_ROULETTE_LOG_FILE")

        return cls(
            data_dir=Path(os.environ.get("RECIPE_ROULETTE_DATA_DIR", "data")),
            storage_backend=os.environ.get("RECIPE_ROULETTE_STORAGE", "sqlite").lower(),
            namespace=os.environ.get("RECIPE_ROULETTE_NAMESPACE", "recipe_roulette_"),
            log_level=os.environ.get("RECIPE_ROULETTE_LOG_LEVEL", "INFO").upper(),
            log_file=Path(log_file) if log_file else None,
            raise_on_write_failure=_env_flag("RECIPE_ROULETTE_RAISE_ON_WRITE_FAILURE", True),
            scale_to_servings=_env_flag("RECIPE_ROULETTE_SCALE_TO_SERVINGS", False),
        )

    def validate(self) -> List[str]:
        """Validate settings and return a list of errors."""
        errors = []

        if self.storage_backend not in STORAGE_BACKENDS:
            errors.append(
                f"Unknown storage backend '{self.storage_backend}' "
                f"(expected one of: {', '.join(STORAGE_BACKENDS)})"
            )

        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown log level: {self.log_level}")

        if self.storage_backend == "sqlite" and self.data_dir.exists() and not self.data_dir.is_dir():
            errors.append(f"Data path is not a directory: {self.data_dir}")

        return errors


def configure_logging(settings: Settings) -> None:
    """Setup logging with console output and an optional rotating log file."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                settings.log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
            )
        )

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
