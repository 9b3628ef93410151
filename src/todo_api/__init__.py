"""
Todo API package.

Exposes the FastAPI app instance and its factory so the service can be started
with ``uvicorn todo_api:app`` or ``python -m todo_api``.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
