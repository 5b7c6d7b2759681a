"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .user import User
from .ingredient import Ingredient
from .recipe import Recipe, RecipeIngredient, Step

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Ingredient",
    "Recipe",
    "RecipeIngredient",
    "Step",
]
