import pytest
from fastapi.testclient import TestClient

from todo_api.db import ConnectionPool
from todo_api.main import create_app
from todo_api.migrations import run_migrations
from todo_api.settings import Settings


@pytest.fixture
def pool(tmp_path):
    # Fresh, migrated database file per test
    p = ConnectionPool(str(tmp_path / "todos.db"), max_size=2, acquire_timeout=0.2)
    run_migrations(p)
    yield p
    p.close()


@pytest.fixture
def client(pool):
    app = create_app(Settings(), pool=pool)
    with TestClient(app) as c:
        yield c
