from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A row of the ``todos`` table as handed around by the repository.

    Fields:
    - id: Unique integer identifier assigned by the store, never reused
    - body: Text of the todo item
    - completed: Boolean completion flag
    - created_at: Naive local creation timestamp, immutable
    - updated_at: Naive local timestamp of the last successful update
    """

    id: int
    body: str
    completed: bool
    created_at: datetime
    updated_at: datetime
