"""Pytest configuration and fixtures for the recipe planner tests."""

from datetime import datetime

import pytest

from recipe_planner.models import Recipe
from recipe_planner.services.database import (
    create_database_engine,
    create_session_factory,
    init_database,
    session_scope,
)
from recipe_planner.services.ingredient_service import IngredientDictionary
from recipe_planner.services.ownership_service import OwnershipGuard
from recipe_planner.services.recipe_ingredient_service import AssociationStore
from recipe_planner.services.recipe_query_service import QueryFilterEngine
from recipe_planner.services.recipe_service import RecipeLifecycleManager
from recipe_planner.services.report_service import AggregationEngine
from recipe_planner.services.step_service import StepService
from recipe_planner.services.user_service import UserService
from recipe_planner.utils.config import reset_config


@pytest.fixture(autouse=True)
def test_environment(monkeypatch):
    """Run every test against the 'test' environment with a fresh config."""
    for name in (
        "RECIPE_PLANNER_DATABASE_URL",
        "RECIPE_PLANNER_DB_PATH",
        "DB_PATH",
        "RECIPE_PLANNER_DB_TIMEOUT",
        "RECIPE_PLANNER_SQL_ECHO",
        "RECIPE_PLANNER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RECIPE_PLANNER_ENV", "test")
    reset_config()
    yield
    reset_config()


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean in-memory database for each test function.

    This fixture:
    1. Creates an in-memory SQLite engine (one shared connection)
    2. Creates all tables
    3. Provides the session factory to the test
    4. Disposes of the engine after the test completes
    """
    engine = create_database_engine("sqlite:///:memory:", echo=False)
    init_database(engine)

    yield create_session_factory(engine)

    engine.dispose()


@pytest.fixture
def file_db(tmp_path):
    """Provide a WAL file database whose sessions use separate connections."""
    engine = create_database_engine(f"sqlite:///{(tmp_path / 'planner.db').as_posix()}", echo=False)
    init_database(engine)

    yield create_session_factory(engine)

    engine.dispose()


@pytest.fixture
def session_factory(test_db):
    """Alias used by service fixtures."""
    return test_db


@pytest.fixture
def dictionary(session_factory):
    return IngredientDictionary(session_factory)


@pytest.fixture
def associations(session_factory):
    return AssociationStore(session_factory)


@pytest.fixture
def guard(session_factory):
    return OwnershipGuard(session_factory)


@pytest.fixture
def steps(session_factory, guard):
    return StepService(session_factory, guard)


@pytest.fixture
def recipes(session_factory, dictionary, associations, guard, steps):
    return RecipeLifecycleManager(
        session_factory,
        dictionary=dictionary,
        associations=associations,
        guard=guard,
        steps=steps,
    )


@pytest.fixture
def users(session_factory):
    return UserService(session_factory)


@pytest.fixture
def query_engine(session_factory):
    return QueryFilterEngine(session_factory)


@pytest.fixture
def aggregation(session_factory, query_engine):
    return AggregationEngine(session_factory, query_engine)


@pytest.fixture
def alice(users):
    """First recipe owner."""
    return users.create_user("alice", "hash-alice")


@pytest.fixture
def bob(users):
    """Second recipe owner."""
    return users.create_user("bob", "hash-bob")


@pytest.fixture
def set_created_at(session_factory):
    """Backdate a recipe's creation timestamp."""

    def _set(recipe_id: int, when: datetime) -> None:
        with session_scope(session_factory) as session:
            session.get(Recipe, recipe_id).created_at = when

    return _set


@pytest.fixture
def count_rows(session_factory):
    """Count the rows of a model, optionally filtered by column values."""

    def _count(model, **filters) -> int:
        with session_scope(session_factory) as session:
            return session.query(model).filter_by(**filters).count()

    return _count
