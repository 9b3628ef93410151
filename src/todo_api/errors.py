"""
Error taxonomy shared by the pool, the repository and the HTTP layer.

Every store failure is a StoreError. The HTTP layer maps RowNotFound to 404 and
everything else to 500, using ``public_message`` as the client-visible text so
raw driver diagnostics stay in the server log.
"""
from __future__ import annotations


class StoreError(Exception):
    """Any failure coming from the persistence layer."""

    public_message = "Database error"


class RowNotFound(StoreError):
    """The requested todo id has no matching row."""

    def __init__(self, todo_id: int) -> None:
        super().__init__(f"todo with ID: {todo_id} not found")
        self.todo_id = todo_id

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return str(self)


class PoolError(StoreError):
    """A connection could not be obtained from the pool."""

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return f"Pool acquire error: {self}"


class PoolTimeoutError(PoolError):
    pass


class PoolClosedError(PoolError):
    pass


class MigrationError(StoreError):
    """A schema migration failed; the process must not start serving."""
