"""
Report Service - per-recipe and cross-recipe aggregates.

Decorates a filtered recipe set (see recipe_query_service) with:
- ingredient_count: number of ingredient links of each recipe
- total_cost: sum of non-null link prices of each recipe (0 if none)
- averages of prep minutes, cook minutes, ingredient count and total cost

Every aggregate is computed in SQL over the same filtered statement the
search flow uses. Averages over an empty set are 0.

Session Management Pattern:
- All public methods accept session=None parameter
- If session provided, use it directly
- If session is None, create a new session via session_scope()
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import Float, cast, func, select
from sqlalchemy.orm import Session, sessionmaker

from recipe_planner.models import Recipe, RecipeIngredient
from recipe_planner.services.database import session_scope
from recipe_planner.services.recipe_query_service import QueryFilterEngine, RecipeFilter
from recipe_planner.services.recipe_ingredient_service import ZERO, to_decimal

CENT = Decimal("0.01")


@dataclass(frozen=True)
class RecipeReportRow:
    """One recipe of a report or search result."""

    recipe_id: int
    title: str
    cuisine: Optional[str]
    created_at: datetime
    prep_minutes: int
    cook_minutes: int
    ingredient_count: int
    total_cost: Decimal


@dataclass(frozen=True)
class ReportStatistics:
    """Averages over a filtered recipe set; all 0 for an empty set."""

    recipe_count: int = 0
    avg_prep_minutes: float = 0.0
    avg_cook_minutes: float = 0.0
    avg_ingredient_count: float = 0.0
    avg_total_cost: Decimal = ZERO


@dataclass
class RecipeReport:
    """Rows plus statistics for one filter."""

    recipe_filter: RecipeFilter
    rows: List[RecipeReportRow] = field(default_factory=list)
    statistics: ReportStatistics = field(default_factory=ReportStatistics)

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-ready representation (Decimals and dates as strings)."""
        return {
            "filter": _plain(vars(self.recipe_filter)),
            "rows": [_plain(vars(row)) for row in self.rows],
            "statistics": _plain(vars(self.statistics)),
        }


def _plain(values: Dict[str, Any]) -> Dict[str, Any]:
    result = {}
    for key, value in values.items():
        if isinstance(value, Decimal):
            value = str(value)
        elif hasattr(value, "isoformat"):
            value = value.isoformat()
        result[key] = value
    return result


def _ingredient_count_column():
    return (
        select(func.count())
        .select_from(RecipeIngredient)
        .where(RecipeIngredient.recipe_id == Recipe.id)
        .correlate(Recipe)
        .scalar_subquery()
        .label("ingredient_count")
    )


def _total_cost_column():
    return (
        select(func.coalesce(func.sum(RecipeIngredient.price), 0))
        .where(RecipeIngredient.recipe_id == Recipe.id)
        .correlate(Recipe)
        .scalar_subquery()
        .label("total_cost")
    )


def _average(value: Any) -> float:
    return float(value) if value is not None else 0.0


class AggregationEngine:
    """Computes report rows and statistics over filtered recipe sets."""

    def __init__(self, session_factory: sessionmaker, query_engine: Optional[QueryFilterEngine] = None):
        """
        Args:
            session_factory: Store handle used when no session is supplied
            query_engine: Predicate builder shared with the search flow
        """
        self._session_factory = session_factory
        self._query_engine = query_engine or QueryFilterEngine(session_factory)

    def summarize(
        self, recipe_filter: Optional[RecipeFilter] = None, *, session: Optional[Session] = None
    ) -> List[RecipeReportRow]:
        """
        Per-recipe ingredient count and total cost for every matching recipe.

        Args:
            recipe_filter: Filter to apply, None for all recipes
            session: Optional session to join

        Returns:
            Rows ordered most recently created first
        """
        if session is not None:
            return self._summarize_impl(recipe_filter, session)
        with session_scope(self._session_factory) as session:
            return self._summarize_impl(recipe_filter, session)

    def _summarize_impl(
        self, recipe_filter: Optional[RecipeFilter], session: Session
    ) -> List[RecipeReportRow]:
        statement = select(
            Recipe.id,
            Recipe.title,
            Recipe.cuisine,
            Recipe.created_at,
            Recipe.prep_minutes,
            Recipe.cook_minutes,
            _ingredient_count_column(),
            _total_cost_column(),
        )
        statement = self._query_engine.apply(statement, recipe_filter)
        statement = statement.order_by(*self._query_engine.ordering())

        return [
            RecipeReportRow(
                recipe_id=row.id,
                title=row.title,
                cuisine=row.cuisine,
                created_at=row.created_at,
                prep_minutes=row.prep_minutes or 0,
                cook_minutes=row.cook_minutes or 0,
                ingredient_count=row.ingredient_count or 0,
                total_cost=to_decimal(row.total_cost),
            )
            for row in session.execute(statement)
        ]

    def statistics(
        self, recipe_filter: Optional[RecipeFilter] = None, *, session: Optional[Session] = None
    ) -> ReportStatistics:
        """
        Averages of prep minutes, cook minutes, ingredient count and total
        cost over the matching recipes.

        Returns:
            ReportStatistics; every average is 0 when nothing matches
        """
        if session is not None:
            return self._statistics_impl(recipe_filter, session)
        with session_scope(self._session_factory) as session:
            return self._statistics_impl(recipe_filter, session)

    def _statistics_impl(
        self, recipe_filter: Optional[RecipeFilter], session: Session
    ) -> ReportStatistics:
        per_recipe = self._query_engine.apply(
            select(
                Recipe.prep_minutes,
                Recipe.cook_minutes,
                _ingredient_count_column(),
                _total_cost_column(),
            ),
            recipe_filter,
        ).subquery()

        row = session.execute(
            select(
                func.count(),
                func.avg(cast(per_recipe.c.prep_minutes, Float)),
                func.avg(cast(per_recipe.c.cook_minutes, Float)),
                func.avg(cast(per_recipe.c.ingredient_count, Float)),
                func.avg(cast(per_recipe.c.total_cost, Float)),
            ).select_from(per_recipe)
        ).one()

        recipe_count, avg_prep, avg_cook, avg_count, avg_cost = row
        return ReportStatistics(
            recipe_count=recipe_count or 0,
            avg_prep_minutes=_average(avg_prep),
            avg_cook_minutes=_average(avg_cook),
            avg_ingredient_count=_average(avg_count),
            avg_total_cost=Decimal(str(_average(avg_cost))).quantize(CENT),
        )

    def report(self, recipe_filter: Optional[RecipeFilter] = None) -> RecipeReport:
        """
        Rows and statistics for one filter, read in a single session.

        Args:
            recipe_filter: Filter to apply (date range, cuisine, ingredient...)
        """
        recipe_filter = recipe_filter or RecipeFilter()
        with session_scope(self._session_factory) as session:
            return RecipeReport(
                recipe_filter=recipe_filter,
                rows=self._summarize_impl(recipe_filter, session),
                statistics=self._statistics_impl(recipe_filter, session),
            )

    def search(self, recipe_filter: Optional[RecipeFilter] = None) -> List[RecipeReportRow]:
        """Search results: the matching rows without statistics."""
        return self.summarize(recipe_filter)
