"""Service layer exception classes for the recipe planner.

This module defines all custom exceptions used by the service layer to provide
consistent error handling across the application. Callers map outcomes to
responses using ``http_status_code`` rather than inspecting store errors.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── NotFound
    │   ├── RecipeNotFound
    │   ├── IngredientNotFound
    │   └── UserNotFound
    ├── PermissionDenied
    ├── ConflictError
    │   ├── IngredientInUse
    │   └── UsernameTaken
    └── TransactionFailure
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions inherit from this class.
    """

    http_status_code = 500


class ValidationError(ServiceError):
    """Raised when caller-supplied data fails validation.

    Args:
        errors: List of human readable error messages

    Example:
        >>> raise ValidationError(["Title: This field is required"])
        ValidationError: Validation failed: Title: This field is required
    """

    http_status_code = 400

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class NotFound(ServiceError):
    """Raised when a referenced record does not exist."""

    http_status_code = 404


class RecipeNotFound(NotFound):
    """Raised when a recipe cannot be found by ID."""

    def __init__(self, recipe_id: int):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe with ID {recipe_id} not found")


class IngredientNotFound(NotFound):
    """Raised when an ingredient cannot be found by ID."""

    def __init__(self, ingredient_id: int):
        self.ingredient_id = ingredient_id
        super().__init__(f"Ingredient with ID {ingredient_id} not found")


class UserNotFound(NotFound):
    """Raised when a user cannot be found by ID."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class PermissionDenied(ServiceError):
    """Raised when the acting user does not own the recipe being mutated.

    Example:
        >>> raise PermissionDenied(recipe_id=7, user_id=2)
        PermissionDenied: User 2 may not modify recipe 7
    """

    http_status_code = 403

    def __init__(self, recipe_id: int, user_id: int):
        self.recipe_id = recipe_id
        self.user_id = user_id
        super().__init__(f"User {user_id} may not modify recipe {recipe_id}")


class ConflictError(ServiceError):
    """Raised when a write violates a uniqueness or reference constraint."""

    http_status_code = 409

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)


class IngredientInUse(ConflictError):
    """Raised when deleting an ingredient that recipes still reference.

    Args:
        ingredient_id: The ingredient being deleted
        recipe_count: Number of recipes referencing it
    """

    def __init__(self, ingredient_id: int, recipe_count: int):
        self.ingredient_id = ingredient_id
        self.recipe_count = recipe_count
        super().__init__(
            f"Cannot delete ingredient {ingredient_id}: used in {recipe_count} recipe(s)"
        )


class UsernameTaken(ConflictError):
    """Raised when a username is already registered."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username '{username}' is already taken")


class TransactionFailure(ServiceError):
    """Raised when a unit of work fails for a reason not otherwise classified.

    The unit of work has been rolled back when this is raised.
    """

    http_status_code = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Transaction failed: {message}")
