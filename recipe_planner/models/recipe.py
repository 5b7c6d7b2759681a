"""
Recipe models.

This module contains:
- Recipe: Main recipe model with metadata and timing
- RecipeIngredient: Association linking recipes to dictionary ingredients
- Step: Ordered preparation steps belonging to a recipe
"""

from sqlalchemy import (
    Column,
    String,
    Integer,
    Numeric,
    Text,
    ForeignKey,
    Index,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base, BaseModel, columns_to_dict
from recipe_planner.utils.constants import (
    MAX_CUISINE_LENGTH,
    MAX_PREPARATION_LENGTH,
    MAX_TITLE_LENGTH,
    MAX_UNIT_LENGTH,
)


class Recipe(BaseModel):
    """
    Recipe model owned by exactly one user.

    Attributes:
        user_id: Owning user
        title: Recipe title (required, non-empty)
        description: Free text description
        cuisine: Cuisine label used for exact-match filtering
        servings: Number of servings, None when unknown
        prep_minutes: Preparation time in minutes (>= 0)
        cook_minutes: Cooking time in minutes (>= 0)
    """

    __tablename__ = "recipes"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(MAX_TITLE_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    cuisine = Column(String(MAX_CUISINE_LENGTH), nullable=True)
    servings = Column(Integer, nullable=True)
    prep_minutes = Column(Integer, nullable=False, default=0)
    cook_minutes = Column(Integer, nullable=False, default=0)

    # Relationships
    owner = relationship("User", back_populates="recipes")

    recipe_ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    steps = relationship(
        "Step",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Step.position",
    )

    __table_args__ = (
        Index("idx_recipe_user", "user_id"),
        Index("idx_recipe_cuisine", "cuisine"),
        CheckConstraint("title <> ''", name="ck_recipe_title_not_empty"),
        CheckConstraint("prep_minutes >= 0", name="ck_recipe_prep_non_negative"),
        CheckConstraint("cook_minutes >= 0", name="ck_recipe_cook_non_negative"),
    )

    def __repr__(self) -> str:
        """String representation of recipe."""
        return f"Recipe(id={self.id}, title='{self.title}', user_id={self.user_id})"


class RecipeIngredient(Base):
    """
    Association between a recipe and a dictionary ingredient.

    The (recipe_id, ingredient_id) pair is the primary key, so a recipe can
    reference an ingredient at most once.

    Attributes:
        recipe_id: Foreign key to Recipe
        ingredient_id: Foreign key to Ingredient
        quantity: Optional amount
        unit: Optional unit of measurement
        price: Optional price; None means "not costed"
        preparation: Optional preparation note (e.g., "diced")
    """

    __tablename__ = "recipe_ingredients"

    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True
    )
    ingredient_id = Column(
        Integer, ForeignKey("ingredients.id", ondelete="RESTRICT"), primary_key=True
    )

    quantity = Column(Numeric(10, 3), nullable=True)
    unit = Column(String(MAX_UNIT_LENGTH), nullable=True)
    price = Column(Numeric(10, 2), nullable=True)
    preparation = Column(String(MAX_PREPARATION_LENGTH), nullable=True)

    # Relationships
    recipe = relationship("Recipe", back_populates="recipe_ingredients")
    ingredient = relationship("Ingredient", lazy="joined")

    __table_args__ = (Index("idx_recipe_ingredient_ingredient", "ingredient_id"),)

    def to_dict(self) -> dict:
        """Column values of the association."""
        return columns_to_dict(self)

    def __repr__(self) -> str:
        """String representation of recipe ingredient."""
        return (
            f"RecipeIngredient(recipe_id={self.recipe_id}, "
            f"ingredient_id={self.ingredient_id}, "
            f"quantity={self.quantity}, unit='{self.unit}', price={self.price})"
        )


class Step(BaseModel):
    """
    One preparation step of a recipe.

    Attributes:
        recipe_id: Foreign key to Recipe
        position: 1-based order within the recipe
        instruction: Step text
    """

    __tablename__ = "steps"

    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    instruction = Column(Text, nullable=False)

    recipe = relationship("Recipe", back_populates="steps")

    __table_args__ = (
        UniqueConstraint("recipe_id", "position", name="uq_step_recipe_position"),
        CheckConstraint("position >= 1", name="ck_step_position_positive"),
    )

    def __repr__(self) -> str:
        """String representation of step."""
        return f"Step(id={self.id}, recipe_id={self.recipe_id}, position={self.position})"
