"""
Database connection and session management for the recipe planner.

This module provides:
- Database engine creation and configuration
- Session factory creation (the store handle passed to every service)
- Database initialization (create tables)
- SQLite transaction, foreign key and WAL configuration
- session_scope(), the unit-of-work boundary used by all services

There is no process-wide engine: callers build an engine and session factory
once and hand the factory to the service classes they construct.
"""

from contextlib import contextmanager
import logging
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from recipe_planner.models.base import Base
from recipe_planner.services.exceptions import (
    ConflictError,
    ServiceError,
    TransactionFailure,
)
from recipe_planner.utils.config import get_config

# Configure logging
logger = logging.getLogger(__name__)


def _is_memory_url(database_url: str) -> bool:
    return ":memory:" in database_url or "mode=memory" in database_url or database_url == "sqlite://"


def _configure_sqlite(engine: Engine, in_memory: bool) -> None:
    """
    Install connection hooks on a SQLite engine.

    pysqlite's own transaction handling defers BEGIN and breaks SAVEPOINT,
    so it is switched off and SQLAlchemy emits BEGIN itself.

    BEGIN IMMEDIATE takes the write lock when the unit of work starts. A
    second writer waits on the busy timeout and then reads everything the
    first one committed. A deferred BEGIN would let it keep a stale WAL
    snapshot and fail its first write with "database is locked".
    """

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

        cursor = dbapi_connection.cursor()

        # Enable foreign key constraints (critical for referential integrity)
        cursor.execute("PRAGMA foreign_keys=ON")

        if not in_memory:
            # Set WAL (Write-Ahead Logging) mode so readers don't block the writer
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")

        cursor.close()

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_database_engine(
    database_url: Optional[str] = None, echo: Optional[bool] = None
) -> Engine:
    """
    Create and configure the database engine.

    Args:
        database_url: Optional database URL. If None, uses config default.
        echo: If True, log all SQL statements. If None, uses config default.

    Returns:
        Configured SQLAlchemy Engine
    """
    config = get_config()
    if database_url is None:
        database_url = config.database_url
    if echo is None:
        echo = config.sql_echo

    logger.info(f"Creating database engine: {database_url}")

    if database_url.startswith("sqlite"):
        in_memory = _is_memory_url(database_url)
        if in_memory:
            # For in-memory databases (testing), every session shares one connection
            engine = create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False, "timeout": config.db_timeout},
            )
        _configure_sqlite(engine, in_memory)
    else:
        engine = create_engine(
            database_url,
            echo=echo,
            isolation_level="SERIALIZABLE",
            pool_pre_ping=True,
        )

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """
    Create the session factory handed to service classes.

    Args:
        engine: Engine the sessions bind to

    Returns:
        Session factory (sessionmaker)
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_database(engine: Engine) -> None:
    """
    Initialize the database by creating all tables.

    Safe to call multiple times - existing tables won't be recreated.

    Args:
        engine: Engine to create tables on
    """
    logger.info("Initializing database tables")

    # Import all models to ensure they're registered with Base
    from recipe_planner import models  # noqa: F401

    Base.metadata.create_all(engine)

    logger.info("Database tables initialized successfully")


def verify_database(engine: Engine) -> bool:
    """
    Verify that the database is accessible and has tables.

    Returns:
        True if database is valid, False otherwise
    """
    try:
        tables = inspect(engine).get_table_names()
    except SQLAlchemyError as e:
        logger.error(f"Database verification failed: {e}")
        return False

    expected_tables = {"users", "recipes", "ingredients", "recipe_ingredients", "steps"}
    return expected_tables.issubset(tables)


def reset_database(engine: Engine, confirm: bool = False) -> None:
    """
    Drop all tables and recreate the database.

    WARNING: This will delete all data!

    Args:
        engine: Engine to reset
        confirm: Must be True to actually reset. Safety check.

    Raises:
        ValueError: If confirm is not True
    """
    if not confirm:
        raise ValueError("Must pass confirm=True to reset database. This will delete all data!")

    logger.warning("RESETTING DATABASE - ALL DATA WILL BE LOST")

    from recipe_planner import models  # noqa: F401

    Base.metadata.drop_all(engine)
    logger.info("All tables dropped")

    Base.metadata.create_all(engine)
    logger.info("Tables recreated")


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Provide a transactional scope for database operations.

    This context manager is one unit of work:
    - Creates a new session from the given factory
    - Commits on success
    - Rolls back on any exception, then re-raises it as a typed
      service error (ServiceError subclasses pass through unchanged)
    - Always closes the session

    Yields:
        Database session

    Raises:
        ConflictError: If a constraint was violated
        TransactionFailure: If any other failure occurred

    Example:
        with session_scope(session_factory) as session:
            session.add(Ingredient(name="Flour"))
            # Commit happens automatically if no exception
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except ServiceError:
        session.rollback()
        raise
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Unit of work rolled back on constraint violation: {e.orig}")
        raise ConflictError(f"Constraint violated: {e.orig}", e) from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Unit of work rolled back on database error: {e}")
        raise TransactionFailure(str(e), e) from e
    except Exception as e:
        session.rollback()
        logger.error(f"Unit of work rolled back: {e!r}")
        raise TransactionFailure(repr(e), e) from e
    finally:
        session.close()


def initialize_app_database(database_url: Optional[str] = None) -> sessionmaker:
    """
    Initialize the application database from configuration.

    This is the main entry point for setting up the database when the
    process starts. It creates the database file and tables if they don't
    exist and returns the session factory to hand to services.

    Args:
        database_url: Optional URL overriding the configured one

    Returns:
        Session factory bound to the initialized database
    """
    config = get_config()
    config.ensure_directories()

    if database_url is None and config.database_path is not None:
        if config.database_exists():
            logger.info(f"Using existing database at: {config.database_path}")
        else:
            logger.info(f"Creating new database at: {config.database_path}")

    engine = create_database_engine(database_url)
    init_database(engine)

    if verify_database(engine):
        logger.info("Database initialized and verified successfully")
    else:
        logger.warning("Database verification failed - tables may not exist")

    return create_session_factory(engine)
