"""
Utility script to generate and write the OpenAPI schema for the FastAPI app.

The schema is built from the same app factory the server uses, so API clients
and documentation tools can consume a stable schema without running the server.
Building the schema does not open the database.

Usage:
    python -m todo_api.generate_openapi [output_path]

Output defaults to interfaces/openapi.json under the current directory.
"""
from __future__ import annotations

import json
import os
import sys
from typing import List, Optional

from .main import create_app

DEFAULT_OUTPUT = os.path.join("interfaces", "openapi.json")


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Write the OpenAPI schema as pretty JSON and return the written file path."""
    schema = create_app().openapi()

    path = os.path.abspath(out_path or DEFAULT_OUTPUT)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return path


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    path = generate_openapi(args[0] if args else None)
    print(f"Wrote OpenAPI schema to: {path}")


if __name__ == "__main__":
    main()
