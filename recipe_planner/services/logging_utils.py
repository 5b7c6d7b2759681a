"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across recipe, ingredient and report
operations.

Usage:
    from recipe_planner.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    # Log successful operation
    log_operation(
        logger,
        operation="create_recipe",
        outcome="success",
        recipe_id=12,
        user_id=1,
    )

    # Log an authorization failure
    log_operation(
        logger,
        operation="authorize",
        outcome="permission_denied",
        level=logging.WARNING,
        recipe_id=12,
        user_id=2,
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance with the 'recipe_planner.services' prefix.

    Example:
        >>> logger = get_service_logger(__name__)
        >>> logger.name
        'recipe_planner.services.recipe_service'
    """
    # Extract just the module name if full path is provided
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"recipe_planner.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter for structured logging.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "create_recipe", "resolve_ingredient")
        outcome: Outcome description (e.g., "success", "permission_denied", "rolled_back")
        level: Log level (default: INFO). Use DEBUG for verbose/frequent logs.
        **context: Additional context fields (entity IDs, error details, etc.)
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
