"""
Configuration management for the recipe planner.

This module handles:
- Database location (file path or full SQLAlchemy URL)
- Connection settings (timeout, SQL echo)
- Logging level
- Environment-specific defaults (production, development, test)

Every setting can be overridden through a ``RECIPE_PLANNER_*`` environment
variable. Invalid values fall back to the default and log a warning.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    DATABASE_VERSION,
    DEFAULT_DB_TIMEOUT,
    DEFAULT_LOG_LEVEL,
    ENV_DATABASE_URL,
    ENV_DB_PATH,
    ENV_DB_TIMEOUT,
    ENV_ENVIRONMENT,
    ENV_LOG_LEVEL,
    ENV_SQL_ECHO,
    LEGACY_ENV_DB_PATH,
    VALID_ENVIRONMENTS,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class Config:
    """
    Application configuration manager.

    Resolves the database location and runtime settings for one environment.
    """

    def __init__(self, environment: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            environment: 'production', 'development' or 'test'. If None, uses
                RECIPE_PLANNER_ENV or defaults to production.
        """
        if environment is None:
            environment = os.environ.get(ENV_ENVIRONMENT, "production")
        if environment not in VALID_ENVIRONMENTS:
            logger.warning(
                f"Invalid {ENV_ENVIRONMENT} '{environment}', using 'production'"
            )
            environment = "production"

        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION
        self._database_version = DATABASE_VERSION

        self._database_path = self._resolve_database_path()
        self._db_timeout = self._read_int(ENV_DB_TIMEOUT, DEFAULT_DB_TIMEOUT)
        self._sql_echo = self._read_bool(ENV_SQL_ECHO, False)
        self._log_level = self._read_log_level()

    def _resolve_database_path(self) -> Optional[Path]:
        """Determine the SQLite file location, or None for in-memory test databases."""
        explicit = os.environ.get(ENV_DB_PATH) or os.environ.get(LEGACY_ENV_DB_PATH)
        if explicit:
            return Path(explicit).expanduser()

        if self.environment == "test":
            return None
        if self.environment == "development":
            # Project data/ directory
            project_root = Path(__file__).parent.parent.parent
            return project_root / "data" / DATABASE_FILENAME
        return Path.home() / ".recipe_planner" / DATABASE_FILENAME

    @staticmethod
    def _read_int(name: str, default: int) -> int:
        raw = os.environ.get(name)
        if raw is None:
            return default
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"Invalid {name} '{raw}', using default {default}")
            return default
        if value <= 0:
            logger.warning(f"Invalid {name} '{raw}', using default {default}")
            return default
        return value

    @staticmethod
    def _read_bool(name: str, default: bool) -> bool:
        raw = os.environ.get(name)
        if raw is None:
            return default
        normalized = raw.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        logger.warning(f"Invalid {name} '{raw}', using default {default}")
        return default

    @staticmethod
    def _read_log_level() -> str:
        raw = os.environ.get(ENV_LOG_LEVEL)
        if raw is None:
            return DEFAULT_LOG_LEVEL
        level = raw.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            logger.warning(f"Invalid {ENV_LOG_LEVEL} '{raw}', using default {DEFAULT_LOG_LEVEL}")
            return DEFAULT_LOG_LEVEL
        return level

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def database_version(self) -> str:
        """Database schema version."""
        return self._database_version

    @property
    def database_path(self) -> Optional[Path]:
        """Full path to the SQLite database file (None when in-memory)."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        RECIPE_PLANNER_DATABASE_URL takes precedence over the file path.

        Returns:
            Database URL string for SQLAlchemy
        """
        url = os.environ.get(ENV_DATABASE_URL)
        if url:
            return url
        if self._database_path is None:
            return "sqlite:///:memory:"
        # Use forward slashes for SQLite URL
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def db_timeout(self) -> int:
        """Seconds a connection waits on a locked database."""
        return self._db_timeout

    @property
    def sql_echo(self) -> bool:
        """Whether SQL statements are logged."""
        return self._sql_echo

    @property
    def log_level(self) -> str:
        """Logging level name."""
        return self._log_level

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def ensure_directories(self) -> None:
        """Create the database directory if a file database is configured."""
        if self._database_path is not None:
            self._database_path.parent.mkdir(parents=True, exist_ok=True)

    def database_exists(self) -> bool:
        """
        Check if database file exists.

        Returns:
            True if database file exists, False otherwise
        """
        return self._database_path is not None and self._database_path.exists()

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(environment='{self.environment}', database_url='{self.database_url}')"


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument.

    Args:
        environment: Optional environment for initial creation. Ignored if
            the singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None
