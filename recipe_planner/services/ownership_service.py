"""Ownership Service - authorization checks for recipe mutations.

Only the owner of a recipe may change it. The acting user id comes from the
caller (already authenticated); this module only compares it with the
recipe's owner.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from recipe_planner.models import Recipe
from recipe_planner.services.database import session_scope
from recipe_planner.services.exceptions import PermissionDenied, RecipeNotFound
from recipe_planner.services.logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)


class OwnershipGuard:
    """Verifies that an acting user owns the recipe being mutated."""

    def __init__(self, session_factory: sessionmaker):
        """
        Args:
            session_factory: Store handle used when no session is supplied
        """
        self._session_factory = session_factory

    def authorize(
        self, recipe_id: int, acting_user_id: int, *, session: Optional[Session] = None
    ) -> Recipe:
        """
        Load a recipe and confirm the acting user owns it.

        Mutating callers pass their own session so the returned record can be
        modified in the same unit of work.

        Args:
            recipe_id: Recipe about to be mutated
            acting_user_id: Authenticated user performing the mutation
            session: Optional session to join

        Returns:
            The Recipe record

        Raises:
            RecipeNotFound: If the recipe doesn't exist
            PermissionDenied: If the recipe belongs to another user
        """
        if session is not None:
            return self._authorize_impl(recipe_id, acting_user_id, session)
        with session_scope(self._session_factory) as session:
            return self._authorize_impl(recipe_id, acting_user_id, session)

    @staticmethod
    def _authorize_impl(recipe_id: int, acting_user_id: int, session: Session) -> Recipe:
        recipe = session.get(Recipe, recipe_id)
        if recipe is None:
            log_operation(
                logger,
                operation="authorize",
                outcome="not_found",
                level=logging.DEBUG,
                recipe_id=recipe_id,
                user_id=acting_user_id,
            )
            raise RecipeNotFound(recipe_id)

        if recipe.user_id != acting_user_id:
            log_operation(
                logger,
                operation="authorize",
                outcome="permission_denied",
                level=logging.WARNING,
                recipe_id=recipe_id,
                user_id=acting_user_id,
                owner_id=recipe.user_id,
            )
            raise PermissionDenied(recipe_id, acting_user_id)

        return recipe
