from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .models import TodoEntity
from .schemas import TodoData, TodoEnvelope, TodoListEnvelope, TodoOut


# PUBLIC_INTERFACE
def todo_envelope(entity: TodoEntity) -> TodoEnvelope:
    """Wrap a single entity as {"status": "success", "data": {"todo": ...}}."""
    return TodoEnvelope(data=TodoData(todo=TodoOut(**entity)))


# PUBLIC_INTERFACE
def list_envelope(entities: Iterable[TodoEntity]) -> TodoListEnvelope:
    """
    Build the list envelope; count always equals the number of notes.
    """
    notes: List[TodoOut] = [TodoOut(**e) for e in entities]
    return TodoListEnvelope(count=len(notes), notes=notes)


# PUBLIC_INTERFACE
def error_envelope(status: str, message: str, detail: Optional[List[Any]] = None) -> Dict[str, Any]:
    """
    Build the JSON body of an error response.

    Args:
        status: 'fail' for client errors, 'error' for store failures.
        message: Client-visible description.
        detail: Optional list of validation error details.
    """
    body: Dict[str, Any] = {"status": status, "message": message}
    if detail is not None:
        body["detail"] = detail
    return body
