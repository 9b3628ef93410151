"""
Versioned schema migrations, applied in order at startup.

Each migration runs in its own transaction together with the bookkeeping row in
``schema_migrations``, so a failed migration leaves no partial schema behind.
Pooled connections are in autocommit mode, so the transaction is opened
explicitly with BEGIN.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, List, NamedTuple, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from .errors import MigrationError, StoreError

if TYPE_CHECKING:
    from .db import ConnectionPool

logger = logging.getLogger(__name__)


class Migration(NamedTuple):
    version: int
    name: str
    statements: Tuple[str, ...]


MIGRATIONS: Tuple[Migration, ...] = (
    Migration(
        1,
        "create_todos",
        (
            """
            CREATE TABLE IF NOT EXISTS todos (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                body TEXT NOT NULL,
                completed BOOLEAN NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """,
        ),
    ),
)

_BOOKKEEPING = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    applied_at TEXT NOT NULL
)
"""


def _apply(conn: Connection, migration: Migration) -> None:
    conn.execute(text("BEGIN"))
    try:
        for statement in migration.statements:
            conn.execute(text(statement))
        conn.execute(
            text(
                "INSERT INTO schema_migrations (version, name, applied_at) "
                "VALUES (:version, :name, :applied_at)"
            ),
            {
                "version": migration.version,
                "name": migration.name,
                "applied_at": datetime.now().isoformat(),
            },
        )
    except SQLAlchemyError:
        conn.execute(text("ROLLBACK"))
        raise
    conn.execute(text("COMMIT"))


# PUBLIC_INTERFACE
def run_migrations(pool: "ConnectionPool", migrations: Tuple[Migration, ...] = MIGRATIONS) -> List[int]:
    """
    Apply every migration not yet recorded in ``schema_migrations``.

    Returns:
        The versions applied by this call, in order (empty when up to date).

    Raises:
        MigrationError: a migration failed and was rolled back.
    """
    applied: List[int] = []
    try:
        with pool.acquire() as conn:
            conn.execute(text(_BOOKKEEPING))
            done = set(conn.execute(text("SELECT version FROM schema_migrations")).scalars())
            for migration in sorted(migrations, key=lambda m: m.version):
                if migration.version in done:
                    continue
                logger.info("Applying migration %04d_%s", migration.version, migration.name)
                try:
                    _apply(conn, migration)
                except SQLAlchemyError as exc:
                    raise MigrationError(
                        f"migration {migration.version} ({migration.name}) failed: {exc}"
                    ) from exc
                applied.append(migration.version)
    except MigrationError:
        raise
    except StoreError as exc:
        raise MigrationError(f"could not prepare schema_migrations: {exc}") from exc
    return applied
