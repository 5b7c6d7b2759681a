"""Data Transfer Objects for service layer.

This module provides type-safe data structures shared by several services:
pagination for list operations and the per-link ingredient attributes used
by the association store and the recipe lifecycle manager.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Generic, List, Mapping, Optional, TypeVar

T = TypeVar("T")


@dataclass
class PaginationParams:
    """Pagination parameters for list operations.

    Pass None instead of a PaginationParams to get every item.

    Attributes:
        page: Page number (1-indexed, default 1)
        per_page: Items per page (default 50, max 1000)

    Raises:
        ValueError: If page < 1, per_page < 1, or per_page > 1000
    """

    page: int = 1
    per_page: int = 50

    def __post_init__(self) -> None:
        """Validate pagination parameters."""
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.per_page < 1:
            raise ValueError("per_page must be >= 1")
        if self.per_page > 1000:
            raise ValueError("per_page must be <= 1000")

    def offset(self) -> int:
        """Calculate SQL OFFSET value.

        Examples:
            >>> PaginationParams(page=1, per_page=50).offset()
            0
            >>> PaginationParams(page=3, per_page=25).offset()
            50
        """
        return (self.page - 1) * self.per_page


@dataclass
class PaginatedResult(Generic[T]):
    """Generic paginated result container.

    Attributes:
        items: List of items for this page
        total: Total number of items across all pages
        page: Current page number (1-indexed)
        per_page: Items per page
    """

    items: List[T]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        """Total number of pages (minimum 1, even for empty results).

        Examples:
            >>> PaginatedResult(items=[], total=101, page=1, per_page=50).pages
            3
            >>> PaginatedResult(items=[], total=0, page=1, per_page=50).pages
            1
        """
        if self.total == 0:
            return 1
        return (self.total + self.per_page - 1) // self.per_page

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1


@dataclass(frozen=True)
class IngredientAttributes:
    """Per-link attributes of a recipe ingredient.

    Every field is optional; a price of None means the line is not costed.
    Build instances from raw caller input with
    ``recipe_ingredient_service.normalize_attributes``.
    """

    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    price: Optional[Decimal] = None
    preparation: Optional[str] = None

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "quantity": self.quantity,
            "unit": self.unit,
            "price": self.price,
            "preparation": self.preparation,
        }


@dataclass(frozen=True)
class IngredientLine:
    """One ingredient of a recipe as returned by read paths."""

    ingredient_id: int
    name: str
    quantity: Optional[Decimal]
    unit: Optional[str]
    price: Optional[Decimal]
    preparation: Optional[str]
