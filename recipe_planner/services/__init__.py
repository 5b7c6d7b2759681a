"""Services package - Business logic layer for Recipe Planner.

This package contains the service classes that own every database
operation of the application.

Architecture:
- Services: Classes constructed with a session factory (the store handle)
- Transactions: Managed via session_scope(); methods accept session=None
  so a caller can run several services in one unit of work
- Exceptions: Consistent error handling via ServiceError hierarchy
- Validation: Input validation before database operations

Service Modules:
- ingredient_service: Deduplicating ingredient dictionary
- recipe_ingredient_service: Recipe/ingredient association store
- ownership_service: Recipe ownership checks for mutations
- recipe_service: Atomic recipe create/update/delete
- step_service: Ordered recipe steps
- user_service: Recipe owner accounts
- recipe_query_service: Composable recipe filters (search and reports)
- report_service: Ingredient counts, costs and averages

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- database: Engine, session factory and session_scope()
- logging_utils: Service logger helpers
- dto: Shared data transfer objects
"""

from . import (
    database,
    exceptions,
    ingredient_service,
    ownership_service,
    recipe_ingredient_service,
    recipe_query_service,
    recipe_service,
    report_service,
    step_service,
    user_service,
)

from .exceptions import (
    ConflictError,
    IngredientInUse,
    IngredientNotFound,
    NotFound,
    PermissionDenied,
    RecipeNotFound,
    ServiceError,
    TransactionFailure,
    UsernameTaken,
    UserNotFound,
    ValidationError,
)
from .ingredient_service import IngredientDictionary
from .ownership_service import OwnershipGuard
from .recipe_ingredient_service import AssociationStore
from .recipe_query_service import QueryFilterEngine, RecipeFilter
from .recipe_service import RecipeLifecycleManager
from .report_service import AggregationEngine, RecipeReport, RecipeReportRow, ReportStatistics
from .step_service import StepService
from .user_service import UserService

__all__ = [
    "database",
    "exceptions",
    "ingredient_service",
    "ownership_service",
    "recipe_ingredient_service",
    "recipe_query_service",
    "recipe_service",
    "report_service",
    "step_service",
    "user_service",
    "AggregationEngine",
    "AssociationStore",
    "ConflictError",
    "IngredientDictionary",
    "IngredientInUse",
    "IngredientNotFound",
    "NotFound",
    "OwnershipGuard",
    "PermissionDenied",
    "QueryFilterEngine",
    "RecipeFilter",
    "RecipeLifecycleManager",
    "RecipeNotFound",
    "RecipeReport",
    "RecipeReportRow",
    "ReportStatistics",
    "ServiceError",
    "StepService",
    "TransactionFailure",
    "UserNotFound",
    "UserService",
    "UsernameTaken",
    "ValidationError",
]
