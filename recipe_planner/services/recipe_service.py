"""
Recipe Service - atomic recipe lifecycle operations.

This service provides create/update/delete for recipes together with their
ingredient links and steps:
- Input validation before any store access
- Ownership checks before any write
- One unit of work per operation; any failure rolls back every write
- Read paths returning plain records for the presentation layer

Example Usage:
  >>> recipes = RecipeLifecycleManager(session_factory)
  >>> recipe_id = recipes.create(
  ...     user_id=1,
  ...     fields={"title": "Pasta", "cuisine": "Italian"},
  ...     new_ingredient_inputs={0: {"name": "Tomato", "quantity": 2, "price": 1.5}},
  ... )
  >>> recipes.get_recipe_detail(recipe_id)["total_cost"]
  Decimal('1.50')
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session, sessionmaker

from recipe_planner.models import Ingredient, Recipe, User
from recipe_planner.services.database import session_scope
from recipe_planner.services.dto import PaginatedResult, PaginationParams
from recipe_planner.services.exceptions import (
    IngredientNotFound,
    RecipeNotFound,
    UserNotFound,
    ValidationError,
)
from recipe_planner.services.ingredient_service import IngredientDictionary
from recipe_planner.services.logging_utils import get_service_logger, log_operation
from recipe_planner.services.ownership_service import OwnershipGuard
from recipe_planner.services.recipe_ingredient_service import AssociationStore
from recipe_planner.services.step_service import StepService
from recipe_planner.utils.validators import (
    parse_identifier,
    parse_minutes,
    parse_servings,
    sanitize_string,
    validate_recipe_data,
)

logger = get_service_logger(__name__)

IngredientEntries = Union[Mapping[Any, Mapping[str, Any]], Iterable[Mapping[str, Any]], None]


def normalize_recipe_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate and normalize the editable columns of a recipe.

    Minutes that are missing, invalid or negative become 0; servings that
    are missing or invalid become None.

    Raises:
        ValidationError: If the title is missing or any text field is too long
    """
    is_valid, errors = validate_recipe_data(fields)
    if not is_valid:
        raise ValidationError(errors)

    return {
        "title": sanitize_string(fields.get("title")),
        "description": sanitize_string(fields.get("description")),
        "cuisine": sanitize_string(fields.get("cuisine")),
        "servings": parse_servings(fields.get("servings")),
        "prep_minutes": parse_minutes(fields.get("prep_minutes")),
        "cook_minutes": parse_minutes(fields.get("cook_minutes")),
    }


def _entries(refs: IngredientEntries) -> List[Mapping[str, Any]]:
    """Accept form-style ``{index: entry}`` mappings as well as plain sequences."""
    if not refs:
        return []
    if isinstance(refs, Mapping):
        return list(refs.values())
    return list(refs)


class RecipeLifecycleManager:
    """
    Orchestrates recipe mutations over the dictionary, association store,
    step service and ownership guard.

    All collaborators share the session factory; each mutation opens one
    session_scope() and passes that session to every collaborator call.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        dictionary: Optional[IngredientDictionary] = None,
        associations: Optional[AssociationStore] = None,
        guard: Optional[OwnershipGuard] = None,
        steps: Optional[StepService] = None,
    ):
        self._session_factory = session_factory
        self._dictionary = dictionary or IngredientDictionary(session_factory)
        self._associations = associations or AssociationStore(session_factory)
        self._guard = guard or OwnershipGuard(session_factory)
        self._steps = steps or StepService(session_factory, self._guard)

    # =========================================================================
    # Mutations
    # =========================================================================

    def create(
        self,
        user_id: int,
        fields: Mapping[str, Any],
        existing_ingredient_refs: IngredientEntries = None,
        new_ingredient_inputs: IngredientEntries = None,
    ) -> int:
        """
        Create a recipe with its ingredient links in one unit of work.

        Args:
            user_id: Owner of the new recipe
            fields: Recipe columns; ``title`` is required
            existing_ingredient_refs: Entries with ``id`` (or ``ingredient_id``)
                of a dictionary ingredient plus quantity/unit/price. Entries
                without an id are skipped.
            new_ingredient_inputs: Entries with ``name`` plus quantity/unit/
                price/preparation; names are resolved through the dictionary.
                Entries without a name are skipped.

        Returns:
            The new recipe id

        Raises:
            ValidationError: If the title or any ingredient attribute is invalid
            UserNotFound: If the owner doesn't exist
            IngredientNotFound: If a referenced ingredient doesn't exist
            TransactionFailure: If any other step fails (nothing is kept)
        """
        recipe_values = normalize_recipe_fields(fields)
        existing_entries = _entries(existing_ingredient_refs)
        new_entries = _entries(new_ingredient_inputs)

        with session_scope(self._session_factory) as session:
            if session.get(User, user_id) is None:
                raise UserNotFound(user_id)

            recipe = Recipe(user_id=user_id, **recipe_values)
            session.add(recipe)
            session.flush()

            for entry in existing_entries:
                raw_id = entry.get("id", entry.get("ingredient_id"))
                is_valid, ingredient_id, error = parse_identifier(raw_id, "Ingredient")
                if not is_valid:
                    raise ValidationError([error])
                if ingredient_id is None:
                    continue
                if session.get(Ingredient, ingredient_id) is None:
                    raise IngredientNotFound(ingredient_id)

                self._associations.upsert(
                    recipe.id,
                    ingredient_id,
                    {
                        "quantity": entry.get("quantity"),
                        "unit": entry.get("unit"),
                        "price": entry.get("price"),
                    },
                    session=session,
                )

            for entry in new_entries:
                if sanitize_string(entry.get("name")) is None:
                    continue
                ingredient_id = self._dictionary.resolve(entry["name"], session=session)
                self._associations.upsert(recipe.id, ingredient_id, entry, session=session)

            recipe_id = recipe.id

        log_operation(
            logger,
            operation="create_recipe",
            outcome="success",
            recipe_id=recipe_id,
            user_id=user_id,
        )
        return recipe_id

    def update(self, recipe_id: int, user_id: int, fields: Mapping[str, Any]) -> None:
        """
        Replace a recipe's title, description, cuisine, servings and timings.

        Raises:
            RecipeNotFound: If the recipe doesn't exist
            PermissionDenied: If the user doesn't own the recipe
            ValidationError: If the title is missing
        """
        with session_scope(self._session_factory) as session:
            recipe = self._guard.authorize(recipe_id, user_id, session=session)

            for column, value in normalize_recipe_fields(fields).items():
                setattr(recipe, column, value)

        log_operation(
            logger, operation="update_recipe", outcome="success", recipe_id=recipe_id, user_id=user_id
        )

    def delete(self, recipe_id: int, user_id: int) -> None:
        """
        Delete a recipe with all of its ingredient links and steps.

        Links go first, then steps, then the recipe row, all in one unit
        of work. Dictionary ingredients are kept.

        Raises:
            RecipeNotFound: If the recipe doesn't exist
            PermissionDenied: If the user doesn't own the recipe
        """
        with session_scope(self._session_factory) as session:
            recipe = self._guard.authorize(recipe_id, user_id, session=session)

            links_deleted = self._associations.remove_all(recipe_id, session=session)
            steps_deleted = self._steps.remove_all(recipe_id, session=session)

            session.expire(recipe, ["recipe_ingredients", "steps"])
            session.delete(recipe)

        log_operation(
            logger,
            operation="delete_recipe",
            outcome="success",
            recipe_id=recipe_id,
            user_id=user_id,
            links_deleted=links_deleted,
            steps_deleted=steps_deleted,
        )

    def add_ingredient(
        self,
        recipe_id: int,
        user_id: int,
        name: str,
        quantity: Any = None,
        unit: Optional[str] = None,
        price: Any = None,
        preparation: Optional[str] = None,
    ) -> int:
        """
        Link an ingredient (by name) to a recipe, creating the dictionary
        entry if needed. Adding an ingredient the recipe already has replaces
        that link's attributes.

        Returns:
            The ingredient id

        Raises:
            RecipeNotFound: If the recipe doesn't exist
            PermissionDenied: If the user doesn't own the recipe
            ValidationError: If the name is empty or an attribute is invalid
        """
        with session_scope(self._session_factory) as session:
            self._guard.authorize(recipe_id, user_id, session=session)

            ingredient_id = self._dictionary.resolve(name, session=session)
            self._associations.upsert(
                recipe_id,
                ingredient_id,
                {"quantity": quantity, "unit": unit, "price": price, "preparation": preparation},
                session=session,
            )

        log_operation(
            logger,
            operation="add_ingredient",
            outcome="success",
            recipe_id=recipe_id,
            user_id=user_id,
            ingredient_id=ingredient_id,
        )
        return ingredient_id

    def remove_ingredient(self, recipe_id: int, user_id: int, ingredient_id: int) -> bool:
        """
        Unlink an ingredient from a recipe. Unlinking an ingredient the recipe
        doesn't have is not an error.

        Returns:
            True if a link was removed

        Raises:
            RecipeNotFound: If the recipe doesn't exist
            PermissionDenied: If the user doesn't own the recipe
        """
        with session_scope(self._session_factory) as session:
            self._guard.authorize(recipe_id, user_id, session=session)
            return self._associations.remove(recipe_id, ingredient_id, session=session)

    # =========================================================================
    # Read paths
    # =========================================================================

    def get_recipe(self, recipe_id: int, *, session: Optional[Session] = None) -> Recipe:
        """
        Retrieve a recipe by id.

        Raises:
            RecipeNotFound: If recipe doesn't exist
        """
        if session is not None:
            return self._get_impl(recipe_id, session)
        with session_scope(self._session_factory) as session:
            return self._get_impl(recipe_id, session)

    @staticmethod
    def _get_impl(recipe_id: int, session: Session) -> Recipe:
        recipe = session.get(Recipe, recipe_id)
        if recipe is None:
            raise RecipeNotFound(recipe_id)
        return recipe

    def get_recipe_detail(self, recipe_id: int) -> Dict[str, Any]:
        """
        Get a recipe with its ingredient lines, steps and total cost.

        Returns:
            Dictionary:
            {
                'recipe': Recipe,
                'ingredients': [IngredientLine, ...],  # by name
                'steps': [Step, ...],                  # by position
                'total_cost': Decimal,
            }

        Raises:
            RecipeNotFound: If recipe doesn't exist
        """
        with session_scope(self._session_factory) as session:
            recipe = self._get_impl(recipe_id, session)
            return {
                "recipe": recipe,
                "ingredients": self._associations.list_by_recipe(recipe_id, session=session),
                "steps": self._steps.list_steps(recipe_id, session=session),
                "total_cost": self._associations.total_cost(recipe_id, session=session),
            }

    def list_for_user(
        self, user_id: int, pagination: Optional[PaginationParams] = None
    ) -> PaginatedResult[Recipe]:
        """
        List a user's recipes, most recently created first.

        Args:
            user_id: Owner whose recipes to list
            pagination: Page to return, or None for every recipe

        Returns:
            PaginatedResult of Recipe records
        """
        with session_scope(self._session_factory) as session:
            query = session.query(Recipe).filter(Recipe.user_id == user_id)
            total = session.query(func.count(Recipe.id)).filter(Recipe.user_id == user_id).scalar()

            query = query.order_by(Recipe.created_at.desc(), Recipe.id.desc())
            if pagination is None:
                items = query.all()
                return PaginatedResult(items=items, total=total, page=1, per_page=len(items) or 1)

            items = query.offset(pagination.offset()).limit(pagination.per_page).all()
            return PaginatedResult(
                items=items, total=total, page=pagination.page, per_page=pagination.per_page
            )
