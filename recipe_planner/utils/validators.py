"""
Input validation functions for the recipe planner.

This module provides validation and normalization for caller-supplied values:
- String validation (length, required fields)
- Numeric parsing for quantities, prices, minutes and servings
- Date and identifier parsing for query filters
- Whole-record validation for recipes
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from .constants import (
    MAX_CUISINE_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    ERROR_REQUIRED_FIELD,
    ERROR_INVALID_NUMBER,
    ERROR_INVALID_NON_NEGATIVE,
    ERROR_INVALID_DATE,
    ERROR_INVALID_ID,
    ERROR_INVALID_TEXT,
)


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a string field is not empty.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    return True, ""


def validate_text(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that an optional field holds a string.

    Returns:
        Tuple of (is_valid, error_message); None is valid
    """
    if value is not None and not isinstance(value, str):
        return False, f"{field_name}: {ERROR_INVALID_TEXT}"
    return True, ""


def validate_string_length(
    value: Optional[str], max_length: int, field_name: str = "Field"
) -> Tuple[bool, str]:
    """
    Validate that a string doesn't exceed maximum length.

    Args:
        value: The string value to validate
        max_length: Maximum allowed length
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value and len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_recipe_data(data: dict) -> Tuple[bool, list]:
    """
    Validate the editable fields of a recipe.

    Only the title is required. Timing and servings are normalized rather
    than rejected (see parse_minutes / parse_servings).

    Args:
        data: Dictionary containing recipe fields

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    title = data.get("title")
    is_valid, error = validate_text(title, "Title")
    if is_valid:
        is_valid, error = validate_required_string(title, "Title")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_string_length(title.strip(), MAX_TITLE_LENGTH, "Title")
        if not is_valid:
            errors.append(error)

    for key, field_name, max_length in (
        ("cuisine", "Cuisine", MAX_CUISINE_LENGTH),
        ("description", "Description", MAX_DESCRIPTION_LENGTH),
    ):
        value = data.get(key)
        is_valid, error = validate_text(value, field_name)
        if is_valid and value:
            is_valid, error = validate_string_length(value.strip(), max_length, field_name)
        if not is_valid:
            errors.append(error)

    return len(errors) == 0, errors


def sanitize_string(value: Optional[Any]) -> Optional[str]:
    """
    Sanitize a string value by stripping whitespace and converting empty strings to None.

    Args:
        value: The value to sanitize

    Returns:
        Sanitized string or None
    """
    if value is None:
        return None
    stripped = str(value).strip()
    return stripped if stripped else None


def parse_int(value: Any, default: int = 0) -> int:
    """
    Safely parse a value to an integer.

    Args:
        value: The value to parse
        default: Default value if parsing fails

    Returns:
        Parsed integer value or default
    """
    if value is None:
        return default

    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def parse_minutes(value: Any) -> int:
    """Parse a prep/cook duration; missing, invalid or negative input becomes 0."""
    minutes = parse_int(value, 0)
    return minutes if minutes > 0 else 0


def parse_servings(value: Any) -> Optional[int]:
    """Parse a servings count; missing, invalid or non-positive input becomes None."""
    servings = parse_int(value, 0)
    return servings if servings > 0 else None


def parse_decimal(value: Any, field_name: str = "Field") -> Tuple[bool, Optional[Decimal], str]:
    """
    Parse an optional numeric value into a Decimal.

    Blank strings and None mean "absent" and parse successfully to None.

    Args:
        value: The value to parse
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, parsed_value, error_message)
    """
    if value is None:
        return True, None, ""
    if isinstance(value, bool):
        return False, None, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return True, None, ""

    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return False, None, f"{field_name}: {ERROR_INVALID_NUMBER}"

    if not parsed.is_finite():
        return False, None, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if parsed < 0:
        return False, None, f"{field_name}: {ERROR_INVALID_NON_NEGATIVE}"
    return True, parsed, ""


def parse_date(value: Any, field_name: str = "Date") -> Tuple[bool, Optional[date], str]:
    """
    Parse an optional ISO calendar date (YYYY-MM-DD).

    Returns:
        Tuple of (is_valid, parsed_value, error_message)
    """
    if value is None:
        return True, None, ""
    if isinstance(value, date):
        # datetime is a date subclass; keep only the calendar part
        return True, date(value.year, value.month, value.day), ""
    text = sanitize_string(value)
    if text is None:
        return True, None, ""
    try:
        return True, date.fromisoformat(text), ""
    except ValueError:
        return False, None, f"{field_name}: {ERROR_INVALID_DATE}"


def parse_identifier(value: Any, field_name: str = "Identifier") -> Tuple[bool, Optional[int], str]:
    """
    Parse an optional positive integer identifier.

    Returns:
        Tuple of (is_valid, parsed_value, error_message)
    """
    if value is None:
        return True, None, ""
    if isinstance(value, bool):
        return False, None, f"{field_name}: {ERROR_INVALID_ID}"
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return True, None, ""
    try:
        parsed = int(value)
    except (ValueError, TypeError):
        return False, None, f"{field_name}: {ERROR_INVALID_ID}"
    if parsed <= 0:
        return False, None, f"{field_name}: {ERROR_INVALID_ID}"
    return True, parsed, ""
