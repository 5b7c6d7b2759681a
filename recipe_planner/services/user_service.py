"""User Service - recipe owner accounts.

Credential hashing and verification belong to the authentication
collaborator; this service stores the hash it is given and never inspects it.

Deleting a user deletes every recipe the user owns, along with those
recipes' ingredient links and steps, in one unit of work.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from recipe_planner.models import Recipe, RecipeIngredient, Step, User
from recipe_planner.services.database import session_scope
from recipe_planner.services.exceptions import (
    UserNotFound,
    UsernameTaken,
    ValidationError,
)
from recipe_planner.services.logging_utils import get_service_logger, log_operation
from recipe_planner.utils.constants import MAX_USERNAME_LENGTH
from recipe_planner.utils.validators import (
    sanitize_string,
    validate_required_string,
    validate_string_length,
)

logger = get_service_logger(__name__)


def _clean_username(username: Optional[str]) -> str:
    clean = sanitize_string(username)
    is_valid, error = validate_required_string(clean, "Username")
    if not is_valid:
        raise ValidationError([error])
    is_valid, error = validate_string_length(clean, MAX_USERNAME_LENGTH, "Username")
    if not is_valid:
        raise ValidationError([error])
    return clean


class UserService:
    """Create, look up, rename and delete users."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def create_user(self, username: str, password_hash: str) -> User:
        """
        Register a user.

        Args:
            username: Login name (trimmed, must be unique)
            password_hash: Opaque hash produced by the auth collaborator

        Raises:
            ValidationError: If the username or hash is empty
            UsernameTaken: If the username is already registered
        """
        clean = _clean_username(username)
        if not password_hash:
            raise ValidationError(["Password Hash: This field is required"])

        with session_scope(self._session_factory) as session:
            if self._find_by_username(clean, session) is not None:
                raise UsernameTaken(clean)

            user = User(username=clean, password_hash=password_hash)
            session.add(user)
            try:
                session.flush()
            except IntegrityError as e:
                raise UsernameTaken(clean) from e

            log_operation(logger, operation="create_user", outcome="success", user_id=user.id)
            return user

    def get_user(self, user_id: int, *, session: Optional[Session] = None) -> User:
        """
        Retrieve a user by id.

        Raises:
            UserNotFound: If the user doesn't exist
        """
        if session is not None:
            return self._get_impl(user_id, session)
        with session_scope(self._session_factory) as session:
            return self._get_impl(user_id, session)

    @staticmethod
    def _get_impl(user_id: int, session: Session) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    def get_by_username(self, username: str) -> Optional[User]:
        """Look up a user by trimmed username, None if absent."""
        clean = sanitize_string(username)
        if clean is None:
            return None
        with session_scope(self._session_factory) as session:
            return self._find_by_username(clean, session)

    @staticmethod
    def _find_by_username(username: str, session: Session) -> Optional[User]:
        return session.query(User).filter(User.username == username).first()

    def rename_user(self, user_id: int, new_username: str) -> User:
        """
        Change a user's username.

        Raises:
            ValidationError: If the new username is empty
            UserNotFound: If the user doesn't exist
            UsernameTaken: If another user already has the name
        """
        clean = _clean_username(new_username)

        with session_scope(self._session_factory) as session:
            user = self._get_impl(user_id, session)
            if user.username == clean:
                return user

            if self._find_by_username(clean, session) is not None:
                raise UsernameTaken(clean)

            user.username = clean
            try:
                session.flush()
            except IntegrityError as e:
                raise UsernameTaken(clean) from e

            log_operation(logger, operation="rename_user", outcome="success", user_id=user_id)
            return user

    def delete_user(self, user_id: int) -> None:
        """
        Delete a user and everything the user owns.

        Ingredient dictionary entries are shared and are kept.

        Raises:
            UserNotFound: If the user doesn't exist
        """
        with session_scope(self._session_factory) as session:
            user = self._get_impl(user_id, session)

            owned_recipe_ids = select(Recipe.id).where(Recipe.user_id == user_id)

            links_deleted = (
                session.query(RecipeIngredient)
                .filter(RecipeIngredient.recipe_id.in_(owned_recipe_ids))
                .delete(synchronize_session=False)
            )
            steps_deleted = (
                session.query(Step)
                .filter(Step.recipe_id.in_(owned_recipe_ids))
                .delete(synchronize_session=False)
            )
            recipes_deleted = (
                session.query(Recipe)
                .filter(Recipe.user_id == user_id)
                .delete(synchronize_session=False)
            )
            session.expire(user, ["recipes"])
            session.delete(user)

            log_operation(
                logger,
                operation="delete_user",
                outcome="success",
                user_id=user_id,
                recipes_deleted=recipes_deleted,
                links_deleted=links_deleted,
                steps_deleted=steps_deleted,
            )
