"""
Pytest configuration and fixtures for SchemaForge tests.
"""
import sqlite3

import pytest

from schemaforge.config.settings import ExplorerSettings
from schemaforge.database.adapters import MySQLAdapter, PostgresAdapter, SQLServerAdapter
from schemaforge.database.models import ColumnInfo, TableMetadata


class FakeCursor:
    """DB-API cursor that records statements on its connection."""

    def __init__(self, conn):
        self.conn = conn
        self.description = None
        self.rowcount = -1
        self._rows = []

    def execute(self, sql, params=None):
        self.conn.executed.append((sql, params))
        for marker in self.conn.fail_on:
            if marker in sql:
                raise RuntimeError(f"boom: {marker}")
        self.description = None
        self.rowcount = 1
        self._rows = []

    def fetchall(self):
        return self._rows

    def fetchone(self):
        return self._rows[0] if self._rows else None


class FakeConnection:
    """DB-API connection double with failure injection."""

    def __init__(self, fail_on=()):
        self.executed = []
        self.fail_on = list(fail_on)
        self.commits = 0
        self.rollbacks = 0
        self.autocommit = False
        self.autocommit_history = []
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True

    def __setattr__(self, name, value):
        if name == "autocommit" and "autocommit_history" in self.__dict__:
            self.autocommit_history.append(value)
        object.__setattr__(self, name, value)

    def statements(self):
        """Executed SQL without pool health checks."""
        return [sql for sql, _ in self.executed if sql != "SELECT 1"]


@pytest.fixture
def settings():
    """In-memory settings with defaults."""
    return ExplorerSettings()


@pytest.fixture
def fake_conn():
    return FakeConnection()


@pytest.fixture
def fake_connect(fake_conn):
    """connect(database) returning the same fake connection."""
    calls = []

    def connect(database=None):
        calls.append(database)
        return fake_conn

    connect.calls = calls
    return connect


@pytest.fixture
def users_metadata():
    return TableMetadata(columns=[
        ColumnInfo(name="id", type_name="integer", is_nullable=False,
                   is_primary_key=True, pk_constraint_name="users_pkey"),
        ColumnInfo(name="name", type_name="text"),
        ColumnInfo(name="email", type_name="text"),
    ])


@pytest.fixture
def sqlite_connect(tmp_path):
    """connect(database) opening one sqlite file per logical database."""
    def connect(database=None):
        path = tmp_path / f"{database or 'default'}.db"
        return sqlite3.connect(str(path), check_same_thread=False)
    return connect


@pytest.fixture
def sqlite_adapter(sqlite_connect, settings):
    """
    Postgres-dialect adapter over sqlite.

    sqlite accepts double-quoted identifiers and the "main" schema, so
    generated SELECT/INSERT/DELETE statements run unchanged.
    """
    conn = sqlite_connect(None)
    conn.executescript("""
        CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email TEXT);
        INSERT INTO users VALUES (1, 'Ann', 'ann@example.com');
        INSERT INTO users VALUES (2, 'O''Brien', 'ob@example.com');
        INSERT INTO users VALUES (3, 'Cid', NULL);
    """)
    conn.commit()
    conn.close()

    adapter = PostgresAdapter(sqlite_connect, settings=settings)
    yield adapter
    adapter.close()


@pytest.fixture
def postgres_adapter(fake_connect, settings):
    adapter = PostgresAdapter(fake_connect, settings=settings)
    yield adapter
    adapter.close()


@pytest.fixture
def mysql_adapter(fake_connect, settings):
    adapter = MySQLAdapter(fake_connect, settings=settings, default_database="shop")
    yield adapter
    adapter.close()


@pytest.fixture
def mssql_adapter(fake_connect, settings):
    adapter = SQLServerAdapter(fake_connect, settings=settings)
    yield adapter
    adapter.close()
