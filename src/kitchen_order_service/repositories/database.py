"""Database handle and unit of work.

The ``Database`` object owns the SQLAlchemy engine and session factory and is
injected into the services that need the store; nothing in the package keeps
a module-level engine.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kitchen_order_service.exceptions import StoreUnavailable
from kitchen_order_service.repositories.tables import Base

logger = logging.getLogger(__name__)


IMMEDIATE_OPTION = "kitchen_begin_immediate"


def _enable_immediate_transactions(engine: Engine) -> None:
    """Let SQLite units of work opt into taking the write lock up front.

    pysqlite defers BEGIN until the first write, so two submissions could both
    read the same stock before either writes. Connections carrying the
    ``IMMEDIATE_OPTION`` execution option start with BEGIN IMMEDIATE, which
    serializes writers; every other transaction starts with a plain BEGIN so
    readers never wait on an open writer.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(connection: Any) -> None:
        if connection.get_execution_options().get(IMMEDIATE_OPTION):
            connection.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            connection.exec_driver_sql("BEGIN")


def create_database_engine(database_url: str, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine for the given URL.

    Args:
        database_url: SQLAlchemy database URL
        echo: Whether to log every SQL statement

    Returns:
        Configured engine
    """
    kwargs: dict[str, Any] = {"echo": echo}

    if database_url.startswith("sqlite"):
        # Request threads share connections; in-memory databases need a single one
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **kwargs)

    if engine.dialect.name == "sqlite":
        _enable_immediate_transactions(engine)

    return engine


class Database:
    """Handle to the relational store.

    Provides transactional sessions through ``unit_of_work`` and schema
    management for startup and tests.
    """

    def __init__(self, engine: Engine) -> None:
        """Initialize the database handle.

        Args:
            engine: SQLAlchemy engine to use for all sessions
        """
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "Database":
        """Create a database handle from a SQLAlchemy URL."""
        return cls(create_database_engine(database_url, echo=echo))

    @property
    def sqlite_path(self) -> Path | None:
        """Filesystem path of a file-backed SQLite database, None otherwise."""
        url = self.engine.url
        if url.get_backend_name() != "sqlite":
            return None
        if not url.database or url.database == ":memory:":
            return None
        return Path(url.database)

    def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create database schema: {e}")
            raise StoreUnavailable("Database schema could not be created") from e

        logger.info(f"Database schema ready: {', '.join(Base.metadata.tables.keys())}")

    @contextmanager
    def unit_of_work(self, immediate: bool = False) -> Iterator[Session]:
        """Open a session wrapped in a single transaction.

        The transaction commits when the block exits normally and rolls back
        on any exception. Driver errors surface as ``StoreUnavailable``;
        domain errors raised inside the block propagate unchanged.

        Args:
            immediate: Take the SQLite write lock when the transaction starts.
                Use for read-then-write work that must not interleave with
                another writer; plain reads should leave it off.

        Yields:
            Session bound to the open transaction
        """
        try:
            with self.session_factory.begin() as session:
                if immediate:
                    session.connection(execution_options={IMMEDIATE_OPTION: True})
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Database operation failed: {e}")
            raise StoreUnavailable("Database operation failed") from e

    def ping(self) -> bool:
        """Check that the database answers a trivial query.

        Returns:
            bool: True if reachable, False otherwise
        """
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True

        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()
