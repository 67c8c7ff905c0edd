"""
Tests for the DB-API connection pool, using sqlite3 connections.
"""
import queue
import sqlite3

import pytest

from schemaforge.database.connection_pool import ConnectionPool, PoolRegistry


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "pool.db"
    conn = sqlite3.connect(str(path))
    conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT)")
    conn.commit()
    conn.close()
    return path


@pytest.fixture
def pool(db_path):
    pool = ConnectionPool(lambda: sqlite3.connect(str(db_path), check_same_thread=False),
                          max_connections=2, wait_timeout=0.05, name="test")
    yield pool
    pool.close_all()


def _count(db_path):
    conn = sqlite3.connect(str(db_path))
    try:
        return conn.execute("SELECT COUNT(*) FROM items").fetchone()[0]
    finally:
        conn.close()


class TestConnectionPool:
    """Tests for ConnectionPool"""

    def test_connection_is_reused(self, pool):
        """A returned connection is handed out again"""
        with pool.get_connection() as first:
            pass
        with pool.get_connection() as second:
            pass
        assert first is second
        assert pool.created_count == 1

    def test_concurrent_checkouts_create_connections(self, pool):
        with pool.get_connection() as first:
            with pool.get_connection() as second:
                assert first is not second
        assert pool.created_count == 2

    def test_exhausted_pool_times_out(self, pool):
        """Waiting past wait_timeout raises queue.Empty"""
        with pool.get_connection():
            with pool.get_connection():
                with pytest.raises(queue.Empty):
                    with pool.get_connection():
                        pass

    def test_transaction_commits(self, pool, db_path):
        with pool.transaction() as conn:
            conn.cursor().execute("INSERT INTO items (label) VALUES ('a')")
        assert _count(db_path) == 1

    def test_transaction_rolls_back_on_error(self, pool, db_path):
        with pytest.raises(RuntimeError):
            with pool.transaction() as conn:
                conn.cursor().execute("INSERT INTO items (label) VALUES ('a')")
                raise RuntimeError("abort")
        assert _count(db_path) == 0

    def test_stale_connection_is_replaced(self, pool):
        """A pooled connection failing the health check is discarded"""
        with pool.get_connection() as first:
            pass
        first.close()
        with pool.get_connection() as second:
            second.execute("SELECT 1")
        assert second is not first
        assert pool.created_count == 1

    def test_connect_failure_releases_slot(self):
        def broken():
            raise sqlite3.OperationalError("cannot connect")

        pool = ConnectionPool(broken, max_connections=1)
        with pytest.raises(sqlite3.OperationalError):
            with pool.get_connection():
                pass
        assert pool.created_count == 0

    def test_close_all(self, pool):
        with pool.get_connection():
            pass
        pool.close_all()
        assert pool.created_count == 0


class TestPoolRegistry:
    """Tests for per-database pools"""

    def test_one_pool_per_database(self, sqlite_connect):
        registry = PoolRegistry(sqlite_connect)
        assert registry.get("a") is registry.get("a")
        assert registry.get("a") is not registry.get("b")
        assert registry.get(None).name == "default"
        registry.close_all()

    def test_pool_connects_to_its_database(self):
        opened = []

        def connect(database):
            opened.append(database)
            return sqlite3.connect(":memory:", check_same_thread=False)

        registry = PoolRegistry(connect)
        with registry.get("sales").get_connection():
            pass
        assert opened == ["sales"]
        registry.close_all()

    def test_discard(self, sqlite_connect):
        registry = PoolRegistry(sqlite_connect)
        pool = registry.get("a")
        with pool.get_connection():
            pass
        registry.discard("a")
        assert pool.created_count == 0
        assert registry.get("a") is not pool
        registry.discard("missing")
