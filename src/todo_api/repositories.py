from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.engine import Connection, RowMapping

from .db import ConnectionPool, get_pool
from .errors import RowNotFound, StoreError
from .models import TodoEntity
from .schemas import TodoCreate, TodoUpdate


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    body: str = "body"
    completed: str = "completed"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()
_SELECT = (
    f"SELECT {_COLS.id}, {_COLS.body}, {_COLS.completed}, {_COLS.created_at}, {_COLS.updated_at} "
    f"FROM {_COLS.table}"
)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def create(self, data: TodoCreate) -> TodoEntity:
        """Create and return a new TodoEntity."""

    @abstractmethod
    def get(self, todo_id: int) -> TodoEntity:
        """Return a TodoEntity by id. Raise RowNotFound if there is none."""

    @abstractmethod
    def update(self, todo_id: int, data: TodoUpdate) -> TodoEntity:
        """Update provided fields and touch updated_at. Raise RowNotFound if there is no such id."""

    @abstractmethod
    def delete(self, todo_id: int) -> bool:
        """Delete a TodoEntity by id. Return True if a row was removed."""

    @abstractmethod
    def list(self) -> List[TodoEntity]:
        """Return every TodoEntity ordered by id."""


class SQLiteRepository(Repository):
    """
    Repository issuing single-statement SQL on a pooled connection.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def _now(self) -> datetime:
        return datetime.now()

    def _row_to_entity(self, row: RowMapping) -> TodoEntity:
        try:
            return {
                "id": int(row[_COLS.id]),
                "body": str(row[_COLS.body]),
                "completed": bool(row[_COLS.completed]),
                "created_at": datetime.fromisoformat(row[_COLS.created_at]),
                "updated_at": datetime.fromisoformat(row[_COLS.updated_at]),
            }
        except (TypeError, ValueError) as exc:
            raise StoreError(f"malformed todo row {dict(row)!r}: {exc}") from exc

    def _fetch(self, conn: Connection, todo_id: int) -> TodoEntity:
        row = conn.execute(
            text(f"{_SELECT} WHERE {_COLS.id} = :id"), {"id": todo_id}
        ).mappings().first()
        if row is None:
            raise RowNotFound(todo_id)
        return self._row_to_entity(row)

    def create(self, data: TodoCreate) -> TodoEntity:
        now = self._now().isoformat()
        with self._pool.acquire() as conn:
            result = conn.execute(
                text(
                    f"""
                    INSERT INTO {_COLS.table} ({_COLS.body}, {_COLS.completed},
                        {_COLS.created_at}, {_COLS.updated_at})
                    VALUES (:body, :completed, :now, :now)
                    """
                ),
                {"body": data.body, "completed": 1 if data.completed else 0, "now": now},
            )
            return self._fetch(conn, result.lastrowid)

    def get(self, todo_id: int) -> TodoEntity:
        with self._pool.acquire() as conn:
            return self._fetch(conn, todo_id)

    def update(self, todo_id: int, data: TodoUpdate) -> TodoEntity:
        completed = None if data.completed is None else int(data.completed)
        with self._pool.acquire() as conn:
            # NULL parameters keep the stored value
            result = conn.execute(
                text(
                    f"""
                    UPDATE {_COLS.table}
                    SET {_COLS.body} = COALESCE(:body, {_COLS.body}),
                        {_COLS.completed} = COALESCE(:completed, {_COLS.completed}),
                        {_COLS.updated_at} = :now
                    WHERE {_COLS.id} = :id
                    """
                ),
                {"body": data.body, "completed": completed, "now": self._now().isoformat(), "id": todo_id},
            )
            if result.rowcount == 0:
                raise RowNotFound(todo_id)
            return self._fetch(conn, todo_id)

    def delete(self, todo_id: int) -> bool:
        with self._pool.acquire() as conn:
            result = conn.execute(
                text(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = :id"), {"id": todo_id}
            )
            return result.rowcount > 0

    def list(self) -> List[TodoEntity]:
        with self._pool.acquire() as conn:
            rows = conn.execute(text(f"{_SELECT} ORDER BY {_COLS.id} ASC")).mappings().all()
            return [self._row_to_entity(r) for r in rows]


# PUBLIC_INTERFACE
def get_repository(pool: ConnectionPool = Depends(get_pool)) -> Repository:
    """
    FastAPI dependency building a repository over the request's shared pool.
    """
    return SQLiteRepository(pool)
