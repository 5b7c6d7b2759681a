"""
User model for recipe owners.

Credentials are verified outside this package; the password hash is stored
as an opaque value.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel
from recipe_planner.utils.constants import MAX_USERNAME_LENGTH


class User(BaseModel):
    """
    User model.

    Attributes:
        username: Unique login name
        password_hash: Opaque credential blob owned by the auth collaborator
        recipes: Recipes owned by this user (deleted with the user)
    """

    __tablename__ = "users"

    username = Column(String(MAX_USERNAME_LENGTH), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    recipes = relationship(
        "Recipe",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> dict:
        """Column values without the credential hash."""
        result = super().to_dict()
        result.pop("password_hash", None)
        return result

    def __repr__(self) -> str:
        """String representation of user."""
        return f"User(id={self.id}, username='{self.username}')"
