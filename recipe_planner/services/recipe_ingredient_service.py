"""Recipe Ingredient Service - the recipe/ingredient association store.

Each association row links one recipe to one dictionary ingredient and
carries quantity, unit, price and preparation. The (recipe, ingredient) pair
is the primary key, so adding the same ingredient again replaces all of the
row's attributes (last write wins, no per-field merge).

Removing an association never removes the ingredient itself.
"""

from decimal import Decimal
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session, sessionmaker

from recipe_planner.models import Ingredient, Recipe, RecipeIngredient
from recipe_planner.services.database import session_scope
from recipe_planner.services.dto import IngredientAttributes, IngredientLine
from recipe_planner.services.exceptions import (
    IngredientNotFound,
    RecipeNotFound,
    ValidationError,
)
from recipe_planner.services.logging_utils import get_service_logger, log_operation
from recipe_planner.utils.constants import MAX_PREPARATION_LENGTH, MAX_UNIT_LENGTH
from recipe_planner.utils.validators import (
    parse_decimal,
    sanitize_string,
    validate_string_length,
)

logger = get_service_logger(__name__)

AttributesInput = Union[IngredientAttributes, Mapping[str, Any], None]

ZERO = Decimal("0")


def normalize_attributes(attrs: AttributesInput) -> IngredientAttributes:
    """
    Convert raw per-link input into an IngredientAttributes record.

    Blank strings become None, numeric strings become Decimal.

    Args:
        attrs: IngredientAttributes, a mapping with any of quantity/unit/
            price/preparation, or None for "no attributes"

    Returns:
        Normalized attributes

    Raises:
        ValidationError: If quantity or price is not a non-negative number,
            or a text field is too long
    """
    if attrs is None:
        return IngredientAttributes()
    if isinstance(attrs, IngredientAttributes):
        attrs = attrs.as_dict()

    errors = []

    is_valid, quantity, error = parse_decimal(attrs.get("quantity"), "Quantity")
    if not is_valid:
        errors.append(error)

    is_valid, price, error = parse_decimal(attrs.get("price"), "Price")
    if not is_valid:
        errors.append(error)

    unit = sanitize_string(attrs.get("unit"))
    is_valid, error = validate_string_length(unit, MAX_UNIT_LENGTH, "Unit")
    if not is_valid:
        errors.append(error)

    preparation = sanitize_string(attrs.get("preparation"))
    is_valid, error = validate_string_length(preparation, MAX_PREPARATION_LENGTH, "Preparation")
    if not is_valid:
        errors.append(error)

    if errors:
        raise ValidationError(errors)

    return IngredientAttributes(quantity=quantity, unit=unit, price=price, preparation=preparation)


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class AssociationStore:
    """
    Store of recipe/ingredient association rows.

    Every public method accepts an optional ``session``: when given, the call
    joins that unit of work; otherwise it runs in its own session_scope().
    """

    def __init__(self, session_factory: sessionmaker):
        """
        Args:
            session_factory: Store handle used to open units of work
        """
        self._session_factory = session_factory

    def upsert(
        self,
        recipe_id: int,
        ingredient_id: int,
        attrs: AttributesInput = None,
        *,
        session: Optional[Session] = None,
    ) -> RecipeIngredient:
        """
        Insert an association or replace the attributes of the existing one.

        Args:
            recipe_id: Recipe to link
            ingredient_id: Dictionary ingredient to link
            attrs: Quantity, unit, price and preparation for the link
            session: Optional session to join

        Returns:
            The association row

        Raises:
            ValidationError: If the attributes are invalid
            RecipeNotFound: If the recipe doesn't exist
            IngredientNotFound: If the ingredient doesn't exist
        """
        attributes = normalize_attributes(attrs)
        if session is not None:
            return self._upsert_impl(recipe_id, ingredient_id, attributes, session)
        with session_scope(self._session_factory) as session:
            return self._upsert_impl(recipe_id, ingredient_id, attributes, session)

    def _upsert_impl(
        self,
        recipe_id: int,
        ingredient_id: int,
        attributes: IngredientAttributes,
        session: Session,
    ) -> RecipeIngredient:
        if session.get(Recipe, recipe_id) is None:
            raise RecipeNotFound(recipe_id)
        if session.get(Ingredient, ingredient_id) is None:
            raise IngredientNotFound(ingredient_id)

        link = session.get(RecipeIngredient, (recipe_id, ingredient_id))
        created = link is None
        if created:
            link = RecipeIngredient(recipe_id=recipe_id, ingredient_id=ingredient_id)
            session.add(link)

        link.quantity = attributes.quantity
        link.unit = attributes.unit
        link.price = attributes.price
        link.preparation = attributes.preparation
        session.flush()

        log_operation(
            logger,
            operation="upsert_recipe_ingredient",
            outcome="created" if created else "replaced",
            recipe_id=recipe_id,
            ingredient_id=ingredient_id,
        )
        return link

    def remove(
        self, recipe_id: int, ingredient_id: int, *, session: Optional[Session] = None
    ) -> bool:
        """
        Delete one association if present.

        Returns:
            True if a row was removed, False if there was nothing to remove
        """
        if session is not None:
            return self._remove_impl(recipe_id, ingredient_id, session)
        with session_scope(self._session_factory) as session:
            return self._remove_impl(recipe_id, ingredient_id, session)

    @staticmethod
    def _remove_impl(recipe_id: int, ingredient_id: int, session: Session) -> bool:
        deleted = (
            session.query(RecipeIngredient)
            .filter_by(recipe_id=recipe_id, ingredient_id=ingredient_id)
            .delete(synchronize_session="fetch")
        )
        log_operation(
            logger,
            operation="remove_recipe_ingredient",
            outcome="removed" if deleted else "absent",
            recipe_id=recipe_id,
            ingredient_id=ingredient_id,
        )
        return deleted > 0

    def remove_all(self, recipe_id: int, *, session: Optional[Session] = None) -> int:
        """
        Delete every association of a recipe.

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
            session.query(RecipeIngredient)
            .filter(RecipeIngredient.recipe_id == recipe_id)
            .delete(synchronize_session="fetch")
        )

    def list_by_recipe(
        self, recipe_id: int, *, session: Optional[Session] = None
    ) -> List[IngredientLine]:
        """
        List a recipe's ingredients ordered by ingredient name ascending.

        Returns:
            IngredientLine records (empty for an unknown recipe)
        """
        if session is not None:
            return self._list_impl(recipe_id, session)
        with session_scope(self._session_factory) as session:
            return self._list_impl(recipe_id, session)

    @staticmethod
    def _list_impl(recipe_id: int, session: Session) -> List[IngredientLine]:
        rows = (
            session.query(RecipeIngredient, Ingredient.name)
            .join(Ingredient, Ingredient.id == RecipeIngredient.ingredient_id)
            .filter(RecipeIngredient.recipe_id == recipe_id)
            .order_by(Ingredient.name, Ingredient.id)
            .all()
        )
        return [
            IngredientLine(
                ingredient_id=link.ingredient_id,
                name=name,
                quantity=link.quantity,
                unit=link.unit,
                price=link.price,
                preparation=link.preparation,
            )
            for link, name in rows
        ]

    def total_cost(self, recipe_id: int, *, session: Optional[Session] = None) -> Decimal:
        """
        Sum the non-null prices of a recipe's associations.

        Returns:
            The total, Decimal("0") when there are no associations or none
            is priced
        """
        if session is not None:
            return self._total_cost_impl(recipe_id, session)
        with session_scope(self._session_factory) as session:
            return self._total_cost_impl(recipe_id, session)

    @staticmethod
    def _total_cost_impl(recipe_id: int, session: Session) -> Decimal:
        total = (
            session.query(func.coalesce(func.sum(RecipeIngredient.price), 0))
            .filter(RecipeIngredient.recipe_id == recipe_id)
            .scalar()
        )
        return to_decimal(total)
