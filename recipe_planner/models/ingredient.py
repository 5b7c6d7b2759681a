"""
Ingredient model for the shared ingredient dictionary.

An Ingredient is a named dictionary entry that any number of recipes may
reference. Names are stored trimmed and are unique.

Example: "Tomato" is one Ingredient row, linked to "Pasta" and "Salsa"
         through two RecipeIngredient rows.
"""

from sqlalchemy import Column, String, CheckConstraint

from .base import BaseModel
from recipe_planner.utils.constants import MAX_INGREDIENT_NAME_LENGTH


class Ingredient(BaseModel):
    """
    Ingredient model representing one deduplicated dictionary entry.

    Attributes:
        name: Trimmed, unique ingredient name (case-sensitive)
    """

    __tablename__ = "ingredients"

    name = Column(String(MAX_INGREDIENT_NAME_LENGTH), nullable=False, unique=True, index=True)

    __table_args__ = (
        CheckConstraint("name = trim(name) AND name <> ''", name="ck_ingredient_name_trimmed"),
    )

    def __repr__(self) -> str:
        """String representation of ingredient."""
        return f"Ingredient(id={self.id}, name='{self.name}')"
