import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from todo_api.db import ConnectionPool, database_path, engine_url, open_pool
from todo_api.errors import MigrationError, PoolClosedError, PoolTimeoutError, StoreError
from todo_api.migrations import MIGRATIONS, Migration, run_migrations
from todo_api.settings import Settings

INSERT_ROW = text(
    "INSERT INTO todos (body, completed, created_at, updated_at) VALUES (:body, 0, 'a', 'a')"
)


def table_names(conn):
    return set(conn.execute(text("SELECT name FROM sqlite_master WHERE type = 'table'")).scalars())


class TestDatabasePath:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("sqlite:db.sqlite", "db.sqlite"),
            ("sqlite://db.sqlite", "db.sqlite"),
            ("sqlite:///var/lib/todos.db", "/var/lib/todos.db"),
            ("sqlite:data/todos.db?mode=rwc", "data/todos.db"),
        ],
    )
    def test_file_urls(self, url, expected):
        assert database_path(url) == expected

    def test_memory_url_is_private_shared_cache(self):
        first = database_path("sqlite::memory:")
        second = database_path("sqlite://:memory:")
        assert first.startswith("file:todo_api_") and first.endswith("mode=memory&cache=shared")
        assert first != second

    @pytest.mark.parametrize("url", ["postgres://localhost/todos", "db.sqlite", "sqlite:"])
    def test_rejects_unusable_urls(self, url):
        with pytest.raises(ValueError):
            database_path(url)

    def test_engine_url(self):
        assert engine_url("/var/lib/todos.db").database == "/var/lib/todos.db"
        memory = engine_url("file:todo_api_x?mode=memory&cache=shared")
        assert memory.database == "file:todo_api_x"
        assert dict(memory.query) == {"uri": "true", "mode": "memory", "cache": "shared"}


class TestConnectionPool:
    def test_pool_is_bounded(self, tmp_path):
        pool = ConnectionPool(str(tmp_path / "p.db"), max_size=2, acquire_timeout=0.05)
        with pool.acquire(), pool.acquire():
            assert pool.checked_out == 2
            with pytest.raises(PoolTimeoutError):
                with pool.acquire():
                    pass
        assert pool.checked_out == 0
        pool.close()

    def test_connection_released_on_error(self, tmp_path):
        pool = ConnectionPool(str(tmp_path / "p.db"), max_size=1, acquire_timeout=0.05)
        with pytest.raises(RuntimeError):
            with pool.acquire():
                raise RuntimeError("boom")
        assert pool.checked_out == 0
        with pool.acquire() as conn:
            assert conn.execute(text("SELECT 1")).scalar_one() == 1
        pool.close()

    def test_database_errors_become_store_errors(self, pool):
        with pytest.raises(StoreError) as exc_info:
            with pool.acquire() as conn:
                conn.execute(text("SELECT * FROM no_such_table"))
        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert pool.checked_out == 0

    def test_unopenable_database_is_a_store_error(self, tmp_path):
        # A directory cannot be opened as a database file
        pool = ConnectionPool(str(tmp_path), max_size=1, acquire_timeout=0.05)
        with pytest.raises(StoreError):
            pool.ping()
        assert pool.checked_out == 0
        pool.close()

    def test_idle_connections_are_reused(self, pool):
        with pool.acquire() as first:
            first_dbapi = first.connection.dbapi_connection
        with pool.acquire() as second:
            assert second.connection.dbapi_connection is first_dbapi

    def test_open_transaction_rolled_back_on_release(self, pool):
        with pool.acquire() as conn:
            conn.execute(text("BEGIN"))
            conn.execute(INSERT_ROW, {"body": "x"})
        with pool.acquire() as conn:
            assert not conn.connection.dbapi_connection.in_transaction
            assert conn.execute(text("SELECT COUNT(*) FROM todos")).scalar_one() == 0

    def test_close_rejects_new_acquires(self, pool):
        with pool.acquire() as conn:
            pool.close()
            assert conn.execute(text("SELECT 1")).scalar_one() == 1
        assert pool.closed
        with pytest.raises(PoolClosedError):
            with pool.acquire():
                pass
        with pytest.raises(PoolClosedError):
            pool.ping()

    def test_memory_database_shared_across_connections(self):
        pool = ConnectionPool(database_path("sqlite::memory:"), max_size=2)
        run_migrations(pool)
        with pool.acquire() as writer, pool.acquire() as reader:
            writer.execute(INSERT_ROW, {"body": "m"})
            assert reader.execute(text("SELECT body FROM todos")).scalar_one() == "m"
        pool.close()

    def test_open_pool_creates_directories_and_schema(self, tmp_path):
        db_file = tmp_path / "a" / "b" / "todos.db"
        pool = open_pool(Settings(database_url=f"sqlite://{db_file}", db_pool_size=3))
        try:
            assert pool.max_size == 3
            with pool.acquire() as conn:
                assert {"todos", "schema_migrations"} <= table_names(conn)
        finally:
            pool.close()


class TestMigrations:
    def test_migrations_are_idempotent(self, tmp_path):
        pool = ConnectionPool(str(tmp_path / "m.db"))
        assert run_migrations(pool) == [m.version for m in MIGRATIONS]
        assert run_migrations(pool) == []
        pool.close()

    def test_failed_migration_rolls_back(self, pool):
        broken = Migration(2, "broken", ("CREATE TABLE half_done (id INTEGER)", "THIS IS NOT SQL"))
        with pytest.raises(MigrationError):
            run_migrations(pool, migrations=MIGRATIONS + (broken,))
        with pool.acquire() as conn:
            tables = table_names(conn)
            versions = list(conn.execute(text("SELECT version FROM schema_migrations")).scalars())
        assert "half_done" not in tables
        assert versions == [1]
