"""
Constants for the recipe planner.

This module defines system-wide constants including:
- Application metadata
- Environment variable names
- Field length limits
- Error messages
"""

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Recipe Planner"
APP_VERSION = "0.1.0"
DATABASE_VERSION = "1.0"
DATABASE_FILENAME = "recipe_planner.db"

# ============================================================================
# Environment
# ============================================================================

ENV_PREFIX = "RECIPE_PLANNER_"
ENV_ENVIRONMENT = ENV_PREFIX + "ENV"
ENV_DATABASE_URL = ENV_PREFIX + "DATABASE_URL"
ENV_DB_PATH = ENV_PREFIX + "DB_PATH"
ENV_DB_TIMEOUT = ENV_PREFIX + "DB_TIMEOUT"
ENV_SQL_ECHO = ENV_PREFIX + "SQL_ECHO"
ENV_LOG_LEVEL = ENV_PREFIX + "LOG_LEVEL"

# Accepted for databases created by earlier deployments
LEGACY_ENV_DB_PATH = "DB_PATH"

VALID_ENVIRONMENTS = ("production", "development", "test")

DEFAULT_DB_TIMEOUT = 30
DEFAULT_LOG_LEVEL = "INFO"

# ============================================================================
# Field Limits
# ============================================================================

MAX_TITLE_LENGTH = 200
MAX_CUISINE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 2000
MAX_INGREDIENT_NAME_LENGTH = 200
MAX_UNIT_LENGTH = 50
MAX_PREPARATION_LENGTH = 500
MAX_USERNAME_LENGTH = 100
MAX_INSTRUCTION_LENGTH = 2000

# ============================================================================
# Validation Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_NUMBER = "Please enter a valid number"
ERROR_INVALID_NON_NEGATIVE = "Value must be zero or greater"
ERROR_INVALID_DATE = "Please enter a date as YYYY-MM-DD"
ERROR_INVALID_ID = "Please enter a valid identifier"
ERROR_INVALID_TEXT = "Please enter text"
