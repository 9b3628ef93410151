import logging

import pytest

from todo_api.logging_config import configure_logging, parse_log_filter
from todo_api.settings import DEFAULT_LOG_LEVEL, get_settings, parse_bind_addr

ENV_VARS = ["BIND_ADDR", "DATABASE_URL", "LOG_LEVEL", "DB_POOL_SIZE", "DB_POOL_TIMEOUT"]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env):
        s = get_settings()
        assert s.bind_addr == "0.0.0.0:3000"
        assert s.database_url == "sqlite:db.sqlite"
        assert s.log_level == DEFAULT_LOG_LEVEL
        assert s.db_pool_size == 5
        assert s.db_pool_timeout == 30.0

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("BIND_ADDR", "127.0.0.1:8080")
        clean_env.setenv("DATABASE_URL", "sqlite:///tmp/todos.db")
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("DB_POOL_SIZE", "10")
        clean_env.setenv("DB_POOL_TIMEOUT", "2.5")
        s = get_settings()
        assert s.bind_addr == "127.0.0.1:8080"
        assert s.database_url == "sqlite:///tmp/todos.db"
        assert s.log_level == "debug"
        assert s.db_pool_size == 10
        assert s.db_pool_timeout == 2.5

    def test_blank_and_invalid_values_fall_back(self, clean_env):
        clean_env.setenv("DATABASE_URL", "  ")
        clean_env.setenv("DB_POOL_SIZE", "lots")
        clean_env.setenv("DB_POOL_TIMEOUT", "-1")
        s = get_settings()
        assert s.database_url == "sqlite:db.sqlite"
        assert s.db_pool_size == 5
        assert s.db_pool_timeout == 30.0

    def test_pool_size_has_a_floor(self, clean_env):
        clean_env.setenv("DB_POOL_SIZE", "0")
        assert get_settings().db_pool_size == 1


class TestBindAddr:
    @pytest.mark.parametrize(
        "addr, expected",
        [
            ("0.0.0.0:3000", ("0.0.0.0", 3000)),
            ("localhost:8000", ("localhost", 8000)),
            ("[::]:8080", ("::", 8080)),
            (":3000", ("0.0.0.0", 3000)),
        ],
    )
    def test_valid(self, addr, expected):
        assert parse_bind_addr(addr) == expected

    @pytest.mark.parametrize("addr", ["localhost", "localhost:http", "host:"])
    def test_invalid(self, addr):
        with pytest.raises(ValueError):
            parse_bind_addr(addr)


class TestLogFilter:
    def test_default_filter(self):
        root, loggers = parse_log_filter(DEFAULT_LOG_LEVEL)
        assert root == logging.INFO
        assert loggers == {"sqlalchemy.engine": logging.WARNING, "uvicorn.access": logging.DEBUG}

    def test_unknown_levels_ignored(self):
        root, loggers = parse_log_filter("loud, todo_api=chatty, ,uvicorn=WARN")
        assert root is None
        assert loggers == {"uvicorn": logging.WARNING}

    def test_configure_logging_applies_directives(self):
        root_logger = logging.getLogger()
        named = logging.getLogger("todo_api.tests.configured")
        previous = root_logger.level
        try:
            configure_logging("warning,todo_api.tests.configured=debug")
            assert root_logger.level == logging.WARNING
            assert named.level == logging.DEBUG
        finally:
            root_logger.setLevel(previous)
            named.setLevel(logging.NOTSET)
