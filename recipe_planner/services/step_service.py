"""Step Service - ordered preparation steps of a recipe.

Steps are numbered 1..n within their recipe. Adding appends; removing closes
the gap so numbering stays contiguous. Steps are deleted whenever their
recipe is deleted.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, sessionmaker

from recipe_planner.models import Step
from recipe_planner.services.database import session_scope
from recipe_planner.services.exceptions import NotFound, ValidationError
from recipe_planner.services.logging_utils import get_service_logger, log_operation
from recipe_planner.services.ownership_service import OwnershipGuard
from recipe_planner.utils.constants import MAX_INSTRUCTION_LENGTH
from recipe_planner.utils.validators import (
    sanitize_string,
    validate_required_string,
    validate_string_length,
)

logger = get_service_logger(__name__)


class StepService:
    """Add, list and remove recipe steps; mutations require ownership."""

    def __init__(self, session_factory: sessionmaker, guard: Optional[OwnershipGuard] = None):
        self._session_factory = session_factory
        self._guard = guard or OwnershipGuard(session_factory)

    def add_step(self, recipe_id: int, user_id: int, instruction: str) -> Step:
        """
        Append a step to a recipe.

        Raises:
            ValidationError: If the instruction is empty or too long
            RecipeNotFound: If the recipe doesn't exist
            PermissionDenied: If the user doesn't own the recipe
        """
        text = sanitize_string(instruction)
        errors = []
        is_valid, error = validate_required_string(text, "Instruction")
        if not is_valid:
            errors.append(error)
        is_valid, error = validate_string_length(text, MAX_INSTRUCTION_LENGTH, "Instruction")
        if not is_valid:
            errors.append(error)
        if errors:
            raise ValidationError(errors)

        with session_scope(self._session_factory) as session:
            self._guard.authorize(recipe_id, user_id, session=session)

            last_position = (
                session.query(func.coalesce(func.max(Step.position), 0))
                .filter(Step.recipe_id == recipe_id)
                .scalar()
            )
            step = Step(recipe_id=recipe_id, position=last_position + 1, instruction=text)
            session.add(step)
            session.flush()

            log_operation(
                logger,
                operation="add_step",
                outcome="success",
                recipe_id=recipe_id,
                step_id=step.id,
                position=step.position,
            )
            return step

    def list_steps(self, recipe_id: int, *, session: Optional[Session] = None) -> List[Step]:
        """Return a recipe's steps in order."""
        if session is not None:
            return self._list_impl(recipe_id, session)
        with session_scope(self._session_factory) as session:
            return self._list_impl(recipe_id, session)

    @staticmethod
    def _list_impl(recipe_id: int, session: Session) -> List[Step]:
        return (
            session.query(Step).filter(Step.recipe_id == recipe_id).order_by(Step.position).all()
        )

    def remove_step(self, recipe_id: int, user_id: int, step_id: int) -> None:
        """
        Remove one step and renumber the steps after it.

        Raises:
            NotFound: If the step doesn't belong to the recipe
            RecipeNotFound: If the recipe doesn't exist
            PermissionDenied: If the user doesn't own the recipe
        """
        with session_scope(self._session_factory) as session:
            self._guard.authorize(recipe_id, user_id, session=session)

            step = session.get(Step, step_id)
            if step is None or step.recipe_id != recipe_id:
                raise NotFound(f"Step {step_id} not found in recipe {recipe_id}")

            removed_position = step.position
            session.delete(step)
            session.flush()

            later_steps = (
                session.query(Step)
                .filter(Step.recipe_id == recipe_id, Step.position > removed_position)
                .order_by(Step.position)
                .all()
            )
            # One at a time so (recipe_id, position) stays unique after every statement
            for later in later_steps:
                later.position -= 1
                session.flush()

            log_operation(
                logger,
                operation="remove_step",
                outcome="success",
                recipe_id=recipe_id,
                step_id=step_id,
            )

    def remove_all(self, recipe_id: int, *, session: Optional[Session] = None) -> int:
        """
        Delete every step of a recipe without an ownership check.

        Only for callers that already authorized the mutation.

        Returns:
            Number of rows removed
        """
        if session is not None:
            return self._remove_all_impl(recipe_id, session)
        with session_scope(self._session_factory) as session:
            return self._remove_all_impl(recipe_id, session)

    @staticmethod
    def _remove_all_impl(recipe_id: int, session: Session) -> int:
        return (
            session.query(Step)
            .filter(Step.recipe_id == recipe_id)
            .delete(synchronize_session="fetch")
        )
