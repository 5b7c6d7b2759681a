"""Process-level logging setup for the command line entry point."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once for the running process.

    Args:
        level: Logging level name. If None, uses the configured log level.
    """
    if level is None:
        from .config import get_config

        level = get_config().log_level

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    # SQLAlchemy echo output is controlled by Config.sql_echo, not the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
