"""
Database engine and connectivity helpers.

This module wraps a SQLAlchemy engine whose QueuePool is the shared, bounded
connection pool. The app lifespan opens it on startup and disposes of it on
shutdown (see ``main.py``); handlers reach it through the ``get_pool``
dependency.
"""
from __future__ import annotations

import logging
import os
import uuid
from contextlib import contextmanager
from typing import Generator
from urllib.parse import parse_qsl

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError
from sqlalchemy.pool import QueuePool

from .errors import PoolClosedError, PoolTimeoutError, StoreError
from .migrations import run_migrations
from .settings import Settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def database_path(url: str) -> str:
    """
    Translate a DATABASE_URL into the database sqlite should open.

    Accepted forms:
    - sqlite:db.sqlite / sqlite://db.sqlite (relative path)
    - sqlite:///var/lib/todos.db (absolute path)
    - sqlite::memory: (shared-cache in-memory database, private to one pool)
    Query strings such as '?mode=rwc' are ignored.
    """
    scheme, sep, rest = url.strip().partition(":")
    if not sep or scheme.lower() != "sqlite":
        raise ValueError(f"unsupported DATABASE_URL {url!r}; expected a sqlite: URL")
    rest = rest.split("?", 1)[0]
    if rest.startswith("//"):
        rest = rest[2:]
    if rest == ":memory:":
        return f"file:todo_api_{uuid.uuid4().hex}?mode=memory&cache=shared"
    if not rest:
        raise ValueError(f"DATABASE_URL {url!r} does not name a database")
    return rest


# PUBLIC_INTERFACE
def engine_url(database: str) -> URL:
    """Build the SQLAlchemy URL for a path returned by ``database_path``."""
    if database.startswith("file:"):
        name, _, query = database.partition("?")
        return URL.create("sqlite", database=name, query={"uri": "true", **dict(parse_qsl(query))})
    return URL.create("sqlite", database=database)


class ConnectionPool:
    """
    Bounded pool of sqlite connections shared by all request threads.

    Backed by a SQLAlchemy engine with a QueuePool of ``max_size`` connections
    and no overflow. Connections run in autocommit mode and go back to the
    pool, rolled back, on every exit path of ``acquire()``.
    """

    def __init__(
        self,
        database: str,
        max_size: int = 5,
        acquire_timeout: float = 30.0,
        busy_timeout: float = 5.0,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.database = database
        self.max_size = max_size
        self.acquire_timeout = acquire_timeout
        self.engine = create_engine(
            engine_url(database),
            poolclass=QueuePool,
            pool_size=max_size,
            max_overflow=0,
            pool_timeout=acquire_timeout,
            isolation_level="AUTOCOMMIT",
            connect_args={"check_same_thread": False, "timeout": busy_timeout},
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def checked_out(self) -> int:
        """Number of connections currently handed out."""
        return self.engine.pool.checkedout()

    # PUBLIC_INTERFACE
    @contextmanager
    def acquire(self) -> Generator[Connection, None, None]:
        """
        Check out a connection for the duration of the ``with`` block.

        Raises:
            PoolClosedError: the pool has been closed.
            PoolTimeoutError: no connection freed up within acquire_timeout.
            StoreError: the database failed to connect or to run a statement.
        """
        if self._closed:
            raise PoolClosedError("pool is closed")
        try:
            conn = self.engine.connect()
        except SQLAlchemyTimeoutError as exc:
            raise PoolTimeoutError(
                f"timed out after {self.acquire_timeout:g}s waiting for a connection"
            ) from exc
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        try:
            with conn:
                yield conn
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    # PUBLIC_INTERFACE
    def ping(self) -> None:
        """Round-trip a trivial query on a pooled connection."""
        with self.acquire() as conn:
            conn.execute(text("SELECT 1")).scalar_one()

    # PUBLIC_INTERFACE
    def close(self) -> None:
        """Refuse new checkouts and dispose of the engine's pooled connections."""
        self._closed = True
        self.engine.dispose()


# PUBLIC_INTERFACE
def open_pool(settings: Settings) -> ConnectionPool:
    """
    Build the connection pool described by ``settings`` and migrate the schema.

    Any failure here is fatal: the caller must not start serving requests.
    """
    database = database_path(settings.database_url)
    if not database.startswith("file:"):
        os.makedirs(os.path.dirname(os.path.abspath(database)), exist_ok=True)
    pool = ConnectionPool(
        database,
        max_size=settings.db_pool_size,
        acquire_timeout=settings.db_pool_timeout,
    )
    try:
        applied = run_migrations(pool)
    except BaseException:
        pool.close()
        raise
    logger.info(
        "Opened database %s (pool size %d), applied migrations: %s",
        database,
        pool.max_size,
        applied or "none",
    )
    return pool


# PUBLIC_INTERFACE
def get_pool(request: Request) -> ConnectionPool:
    """FastAPI dependency returning the pool opened by the app lifespan."""
    return request.app.state.pool
