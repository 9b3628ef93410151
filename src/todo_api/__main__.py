"""
Process entrypoint.

Usage:
    python -m todo_api
    todo-api
"""
from __future__ import annotations

import uvicorn

from .logging_config import configure_logging
from .main import create_app
from .settings import get_settings, parse_bind_addr


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    host, port = parse_bind_addr(settings.bind_addr)
    # log_config=None keeps uvicorn on the handlers installed above
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
