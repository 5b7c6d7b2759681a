"""
Recipe Query Service - composable recipe filters.

One predicate builder serves both the search flow (free text, cuisine,
ingredient) and the reporting flow (date range, cuisine, ingredient):
- Each present filter contributes exactly one predicate
- Predicates are combined with AND; an absent filter adds nothing
- Every value is a bound parameter, never interpolated into SQL
- Results are ordered most recently created first
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Mapping, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from recipe_planner.models import Recipe, RecipeIngredient
from recipe_planner.services.database import session_scope
from recipe_planner.services.exceptions import ValidationError
from recipe_planner.utils.datetime_utils import start_of_day, start_of_next_day
from recipe_planner.utils.validators import parse_date, parse_identifier, sanitize_string

LIKE_ESCAPE = "\\"

# Accepted request parameter names for each filter field
PARAM_ALIASES = {
    "date_from": ("date_from", "from"),
    "date_to": ("date_to", "to"),
    "cuisine": ("cuisine",),
    "free_text": ("free_text", "q"),
    "ingredient_id": ("ingredient_id",),
    "user_id": ("user_id",),
}


def _escape_like(text: str) -> str:
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _first_param(params: Mapping[str, Any], names) -> Any:
    for name in names:
        value = params.get(name)
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class RecipeFilter:
    """
    Optional recipe filters; None means "no constraint".

    Attributes:
        date_from: Earliest creation date, inclusive
        date_to: Latest creation date, inclusive
        cuisine: Exact cuisine match
        free_text: Case-insensitive substring of title or description
        ingredient_id: Recipe must use this ingredient
        user_id: Recipe must belong to this user
    """

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    cuisine: Optional[str] = None
    free_text: Optional[str] = None
    ingredient_id: Optional[int] = None
    user_id: Optional[int] = None

    def __post_init__(self) -> None:
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValidationError(["Date Range: start date must not be after end date"])

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "RecipeFilter":
        """
        Build a filter from raw request parameters.

        Blank values are treated as absent. ``from``/``to`` and ``q`` are
        accepted as aliases for the date bounds and the free text.

        Raises:
            ValidationError: If a date or identifier is malformed
        """
        errors = []

        is_valid, date_from, error = parse_date(
            _first_param(params, PARAM_ALIASES["date_from"]), "From Date"
        )
        if not is_valid:
            errors.append(error)

        is_valid, date_to, error = parse_date(
            _first_param(params, PARAM_ALIASES["date_to"]), "To Date"
        )
        if not is_valid:
            errors.append(error)

        is_valid, ingredient_id, error = parse_identifier(
            _first_param(params, PARAM_ALIASES["ingredient_id"]), "Ingredient"
        )
        if not is_valid:
            errors.append(error)

        is_valid, user_id, error = parse_identifier(
            _first_param(params, PARAM_ALIASES["user_id"]), "User"
        )
        if not is_valid:
            errors.append(error)

        if errors:
            raise ValidationError(errors)

        return cls(
            date_from=date_from,
            date_to=date_to,
            cuisine=sanitize_string(_first_param(params, PARAM_ALIASES["cuisine"])),
            free_text=sanitize_string(_first_param(params, PARAM_ALIASES["free_text"])),
            ingredient_id=ingredient_id,
            user_id=user_id,
        )

    @property
    def is_empty(self) -> bool:
        """True when no filter is set."""
        return not QueryFilterEngine.predicates(self)


class QueryFilterEngine:
    """Builds and runs filtered recipe queries."""

    def __init__(self, session_factory: sessionmaker):
        """
        Args:
            session_factory: Store handle used when no session is supplied
        """
        self._session_factory = session_factory

    @staticmethod
    def predicates(recipe_filter: Optional[RecipeFilter]) -> List[ColumnElement]:
        """
        Translate a filter into one predicate per present field.

        Args:
            recipe_filter: Filter to translate, None for no filter

        Returns:
            List of SQL expressions over Recipe, possibly empty
        """
        if recipe_filter is None:
            return []

        terms: List[ColumnElement] = []

        if recipe_filter.date_from is not None:
            terms.append(Recipe.created_at >= start_of_day(recipe_filter.date_from))

        if recipe_filter.date_to is not None:
            terms.append(Recipe.created_at < start_of_next_day(recipe_filter.date_to))

        if recipe_filter.cuisine is not None:
            terms.append(Recipe.cuisine == recipe_filter.cuisine)

        if recipe_filter.free_text is not None:
            pattern = f"%{_escape_like(recipe_filter.free_text)}%"
            terms.append(
                or_(
                    Recipe.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Recipe.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        if recipe_filter.ingredient_id is not None:
            terms.append(
                Recipe.recipe_ingredients.any(
                    RecipeIngredient.ingredient_id == recipe_filter.ingredient_id
                )
            )

        if recipe_filter.user_id is not None:
            terms.append(Recipe.user_id == recipe_filter.user_id)

        return terms

    @classmethod
    def apply(cls, statement, recipe_filter: Optional[RecipeFilter]):
        """
        Restrict a select over Recipe by a filter.

        Args:
            statement: Select (or Query) whose FROM includes Recipe
            recipe_filter: Filter to apply

        Returns:
            The statement with the conjunction of all predicates applied
        """
        terms = cls.predicates(recipe_filter)
        if terms:
            statement = statement.where(and_(*terms))
        return statement

    @staticmethod
    def ordering():
        """Most recently created first; id breaks ties."""
        return (Recipe.created_at.desc(), Recipe.id.desc())

    def filter(
        self, recipe_filter: Optional[RecipeFilter] = None, *, session: Optional[Session] = None
    ) -> List[Recipe]:
        """
        Return the recipes matching every present filter, newest first.

        Args:
            recipe_filter: Filter to apply, None for all recipes
            session: Optional session to join
        """
        if session is not None:
            return self._filter_impl(recipe_filter, session)
        with session_scope(self._session_factory) as session:
            return self._filter_impl(recipe_filter, session)

    def _filter_impl(self, recipe_filter: Optional[RecipeFilter], session: Session) -> List[Recipe]:
        statement = self.apply(select(Recipe), recipe_filter).order_by(*self.ordering())
        return list(session.scalars(statement).all())

    def distinct_cuisines(self) -> List[str]:
        """Cuisines in use, sorted, for building filter choices."""
        with session_scope(self._session_factory) as session:
            statement = (
                select(Recipe.cuisine)
                .where(Recipe.cuisine.is_not(None))
                .distinct()
                .order_by(Recipe.cuisine)
            )
            return list(session.scalars(statement).all())
