"""Ingredient Service - the shared, deduplicated ingredient dictionary.

This module resolves ingredient names to stable identifiers and manages the
dictionary entries themselves (list, rename, delete).

Name rules:
- Surrounding whitespace is always trimmed before storing or matching
- Matching is case-sensitive and exact on the trimmed name
- An empty trimmed name is a ValidationError

resolve() is idempotent and safe to repeat: it looks the name up, inserts it
inside a SAVEPOINT when absent, and if the store's unique constraint reports
that a concurrent resolve inserted the same name first, it rolls back the
savepoint and looks the name up again.

Example Usage:
  >>> dictionary = IngredientDictionary(session_factory)
  >>> tomato_id = dictionary.resolve("Tomato")
  >>> dictionary.resolve("  Tomato ") == tomato_id
  True
"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from recipe_planner.models import Ingredient, RecipeIngredient
from recipe_planner.services.database import session_scope
from recipe_planner.services.exceptions import (
    ConflictError,
    IngredientInUse,
    IngredientNotFound,
    ValidationError,
)
from recipe_planner.services.logging_utils import get_service_logger, log_operation
from recipe_planner.utils.constants import MAX_INGREDIENT_NAME_LENGTH
from recipe_planner.utils.validators import (
    sanitize_string,
    validate_required_string,
    validate_string_length,
    validate_text,
)

logger = get_service_logger(__name__)


def normalize_ingredient_name(name: Optional[str]) -> str:
    """
    Trim an ingredient name and validate it.

    Args:
        name: Raw name as supplied by the caller

    Returns:
        The trimmed name

    Raises:
        ValidationError: If the name is not a string, or the trimmed name is empty or too long
    """
    is_valid, error = validate_text(name, "Ingredient Name")
    if not is_valid:
        raise ValidationError([error])

    clean = sanitize_string(name)

    is_valid, error = validate_required_string(clean, "Ingredient Name")
    if not is_valid:
        raise ValidationError([error])

    is_valid, error = validate_string_length(clean, MAX_INGREDIENT_NAME_LENGTH, "Ingredient Name")
    if not is_valid:
        raise ValidationError([error])

    return clean


class IngredientDictionary:
    """
    Dictionary of ingredient names shared by all recipes.

    Every public method accepts an optional ``session``: when given, the call
    joins that unit of work; otherwise it runs in its own session_scope().
    """

    def __init__(self, session_factory: sessionmaker):
        """
        Args:
            session_factory: Store handle used to open units of work
        """
        self._session_factory = session_factory

    # =========================================================================
    # Resolve
    # =========================================================================

    def resolve(self, name: str, *, session: Optional[Session] = None) -> int:
        """
        Resolve a name to an ingredient id, creating the entry if absent.

        Args:
            name: Ingredient name (trimmed before use)
            session: Optional session to join

        Returns:
            The ingredient id

        Raises:
            ValidationError: If the trimmed name is empty
            ConflictError: If the name could neither be inserted nor found
        """
        if session is not None:
            return self._resolve_impl(name, session)
        with session_scope(self._session_factory) as session:
            return self._resolve_impl(name, session)

    def _resolve_impl(self, name: str, session: Session) -> int:
        clean = normalize_ingredient_name(name)

        ingredient_id = self._lookup_id(clean, session)
        if ingredient_id is not None:
            return ingredient_id

        try:
            with session.begin_nested():
                ingredient = Ingredient(name=clean)
                session.add(ingredient)
                session.flush()
                ingredient_id = ingredient.id
        except IntegrityError as e:
            # Another unit of work inserted the same name after our lookup
            log_operation(
                logger,
                operation="resolve_ingredient",
                outcome="insert_conflict",
                level=logging.WARNING,
                ingredient_name=clean,
            )
            ingredient_id = self._lookup_id(clean, session)
            if ingredient_id is None:
                raise ConflictError(f"Could not resolve ingredient '{clean}'", e) from e
            return ingredient_id

        log_operation(
            logger,
            operation="resolve_ingredient",
            outcome="created",
            ingredient_id=ingredient_id,
            ingredient_name=clean,
        )
        return ingredient_id

    @staticmethod
    def _lookup_id(clean_name: str, session: Session) -> Optional[int]:
        return session.query(Ingredient.id).filter(Ingredient.name == clean_name).scalar()

    def find_id(self, name: str, *, session: Optional[Session] = None) -> Optional[int]:
        """
        Look up an ingredient id by name without creating it.

        Returns:
            The id, or None if no entry matches the trimmed name
        """
        clean = sanitize_string(name)
        if clean is None:
            return None
        if session is not None:
            return self._lookup_id(clean, session)
        with session_scope(self._session_factory) as session:
            return self._lookup_id(clean, session)

    # =========================================================================
    # Dictionary maintenance
    # =========================================================================

    def get(self, ingredient_id: int, *, session: Optional[Session] = None) -> Ingredient:
        """
        Retrieve an ingredient by id.

        Raises:
            IngredientNotFound: If the ingredient doesn't exist
        """
        if session is not None:
            return self._get_impl(ingredient_id, session)
        with session_scope(self._session_factory) as session:
            return self._get_impl(ingredient_id, session)

    @staticmethod
    def _get_impl(ingredient_id: int, session: Session) -> Ingredient:
        ingredient = session.get(Ingredient, ingredient_id)
        if ingredient is None:
            raise IngredientNotFound(ingredient_id)
        return ingredient

    def list_all(self) -> List[Ingredient]:
        """Return every dictionary entry ordered by name."""
        with session_scope(self._session_factory) as session:
            return session.query(Ingredient).order_by(Ingredient.name).all()

    def rename(self, ingredient_id: int, new_name: str) -> Ingredient:
        """
        Rename a dictionary entry.

        The new name is visible to every recipe referencing the ingredient.

        Raises:
            ValidationError: If the trimmed name is empty
            IngredientNotFound: If the ingredient doesn't exist
            ConflictError: If another ingredient already has that name
        """
        clean = normalize_ingredient_name(new_name)

        with session_scope(self._session_factory) as session:
            ingredient = self._get_impl(ingredient_id, session)
            if ingredient.name == clean:
                return ingredient

            existing_id = self._lookup_id(clean, session)
            if existing_id is not None:
                raise ConflictError(f"Ingredient '{clean}' already exists")

            ingredient.name = clean
            session.flush()

            log_operation(
                logger,
                operation="rename_ingredient",
                outcome="success",
                ingredient_id=ingredient_id,
                ingredient_name=clean,
            )
            return ingredient

    def usage_count(self, ingredient_id: int, *, session: Optional[Session] = None) -> int:
        """Number of recipes that reference the ingredient."""
        if session is not None:
            return self._usage_count_impl(ingredient_id, session)
        with session_scope(self._session_factory) as session:
            return self._usage_count_impl(ingredient_id, session)

    @staticmethod
    def _usage_count_impl(ingredient_id: int, session: Session) -> int:
        return (
            session.query(func.count(RecipeIngredient.recipe_id))
            .filter(RecipeIngredient.ingredient_id == ingredient_id)
            .scalar()
        )

    def delete(self, ingredient_id: int) -> None:
        """
        Delete an ingredient that no recipe references.

        Raises:
            IngredientNotFound: If the ingredient doesn't exist
            IngredientInUse: If any recipe still references it
        """
        with session_scope(self._session_factory) as session:
            ingredient = self._get_impl(ingredient_id, session)

            recipe_count = self._usage_count_impl(ingredient_id, session)
            if recipe_count > 0:
                raise IngredientInUse(ingredient_id, recipe_count)

            session.delete(ingredient)

        log_operation(
            logger,
            operation="delete_ingredient",
            outcome="success",
            ingredient_id=ingredient_id,
        )
