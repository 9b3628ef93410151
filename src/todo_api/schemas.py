from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_body(value: str) -> str:
    s = value.strip()
    if not s:
        raise ValueError("body must not be empty")
    return s


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "body": "Buy milk",
                "completed": False,
            }
        }
    )

    body: str = Field(..., description="Text of the todo item", min_length=1)
    completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: str) -> str:
        """
        Strip whitespace and reject blank bodies.
        """
        return _clean_body(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; omitted (or null) fields keep their stored value.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "completed": True,
            }
        }
    )

    body: Optional[str] = Field(default=None, description="Text of the todo item", min_length=1)
    completed: Optional[bool] = Field(default=None, description="Completion status flag")

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _clean_body(v)


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "body": "Buy milk",
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456",
                "updated_at": "2025-01-26T09:00:00.000001",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    body: str = Field(..., description="Text of the todo item")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp (naive local time)")
    updated_at: datetime = Field(..., description="Last update timestamp (naive local time)")


class TodoData(BaseModel):
    todo: TodoOut


# PUBLIC_INTERFACE
class TodoEnvelope(BaseModel):
    """Success envelope wrapping a single Todo."""

    status: Literal["success"] = "success"
    data: TodoData


# PUBLIC_INTERFACE
class TodoListEnvelope(BaseModel):
    """Envelope for the list endpoint."""

    status: Literal["ok"] = "ok"
    count: int = Field(..., description="Number of todos in notes")
    notes: List[TodoOut] = Field(..., description="All stored todos, oldest first")


# PUBLIC_INTERFACE
class HealthOut(BaseModel):
    status: Literal["healthy"] = "healthy"


# PUBLIC_INTERFACE
class ErrorEnvelope(BaseModel):
    """
    Envelope for every error response.

    status is 'fail' for client errors (unknown id, invalid input) and
    'error' for store failures.
    """

    status: Literal["error", "fail"]
    message: str
    detail: Optional[List[Any]] = None
