"""
Base model class for all database models.

Provides common functionality and fields for all models:
- Primary key (Integer, autoincrement)
- Creation timestamp
- Utility methods (to_dict)
- SQLAlchemy declarative base
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import declarative_base

from recipe_planner.utils.datetime_utils import utc_now

# Create the declarative base for all models
Base = declarative_base()


class BaseModel(Base):
    """
    Abstract base model with common fields and methods.

    All models with a surrogate key inherit from this class to get:
    - id: Primary key
    - created_at: Timestamp when record was created
    - to_dict(): Convert model to dictionary
    """

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model instance to dictionary of column values.

        Returns:
            Dictionary representation of the model
        """
        return columns_to_dict(self)

    def __repr__(self) -> str:
        """
        String representation of model instance.

        Returns:
            String like "ClassName(id=1, ...)"
        """
        class_name = self.__class__.__name__
        attrs = []

        if getattr(self, "id", None) is not None:
            attrs.append(f"id={self.id}")

        if getattr(self, "name", None) is not None:
            attrs.append(f"name='{self.name}'")

        attrs_str = ", ".join(attrs)
        return f"{class_name}({attrs_str})"


def columns_to_dict(instance) -> Dict[str, Any]:
    """Convert the column values of any mapped instance to plain Python values."""
    result = {}
    for column in instance.__table__.columns:
        value = getattr(instance, column.key)

        # Convert datetime to ISO format string
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = str(value)

        result[column.key] = value
    return result
