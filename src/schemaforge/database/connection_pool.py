"""
Connection Pool Module - Manages DB-API connections with pooling and transactions.

Provides:
- ConnectionPool: Reusable connection pool over any DB-API 2.0 connect factory
- PoolRegistry: One pool per logical database of a server connection
- Transaction context manager for atomic operations
"""
import queue
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional
import logging

from ..constants import POOL_MAX_CONNECTIONS, POOL_WAIT_TIMEOUT_S

logger = logging.getLogger(__name__)

ConnectFactory = Callable[[], Any]


class ConnectionPool:
    """
    DB-API connection pool for efficient connection reuse.

    Features:
    - Connection reuse to avoid overhead of repeated connect/disconnect
    - Thread-safe connection management
    - Health check (SELECT 1) before handing out a pooled connection
    - Transaction support with context manager

    Usage:
        pool = ConnectionPool(lambda: psycopg2.connect(dsn), max_connections=5)

        # Simple usage
        with pool.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM users")

        # Transaction
        with pool.transaction() as conn:
            conn.cursor().execute("ALTER TABLE ...")
            conn.cursor().execute("ALTER TABLE ...")
            # Auto-commit on success, auto-rollback on exception
    """

    def __init__(self, connect: ConnectFactory, max_connections: int = POOL_MAX_CONNECTIONS,
                 wait_timeout: float = POOL_WAIT_TIMEOUT_S, name: str = "default"):
        """
        Initialize the connection pool.

        Args:
            connect: Zero-argument callable returning a new DB-API connection
            max_connections: Maximum number of connections to keep in pool
            wait_timeout: Seconds to wait for a free connection when exhausted
            name: Label used in log messages
        """
        self.connect = connect
        self.max_connections = max_connections
        self.wait_timeout = wait_timeout
        self.name = name
        self._pool: queue.Queue = queue.Queue(maxsize=max_connections)
        self._lock = threading.Lock()
        self._created_count = 0

    @property
    def created_count(self) -> int:
        return self._created_count

    def _validate_connection(self, conn: Any) -> bool:
        """Check if a connection is still valid."""
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.fetchall()
            # Leave no transaction open behind the health check
            conn.rollback()
            return True
        except Exception as e:
            logger.debug(f"Discarding stale connection from pool '{self.name}': {e}")
            return False

    def _close_quietly(self, conn: Any):
        try:
            conn.close()
        except Exception as e:
            logger.debug(f"Error closing connection in pool '{self.name}': {e}")

    @contextmanager
    def get_connection(self):
        """
        Get a connection from the pool.

        Yields a connection that will be returned to the pool when done.
        Use this for read operations or when you manage transactions manually.

        Raises:
            queue.Empty: no connection became free within wait_timeout
        """
        conn = None

        # Try to get from pool first
        try:
            conn = self._pool.get_nowait()
            if not self._validate_connection(conn):
                self._close_quietly(conn)
                with self._lock:
                    self._created_count -= 1
                conn = None
        except queue.Empty:
            pass

        # Create new connection if needed
        if conn is None:
            with self._lock:
                can_create = self._created_count < self.max_connections
                if can_create:
                    self._created_count += 1
            if can_create:
                try:
                    conn = self.connect()
                except Exception:
                    with self._lock:
                        self._created_count -= 1
                    raise
                logger.debug(
                    f"Created new connection for '{self.name}' "
                    f"({self._created_count}/{self.max_connections})"
                )
            else:
                # Wait for a connection from the pool
                conn = self._pool.get(timeout=self.wait_timeout)

        try:
            yield conn
        finally:
            # Return connection to pool
            try:
                self._pool.put_nowait(conn)
            except queue.Full:
                self._close_quietly(conn)
                with self._lock:
                    self._created_count -= 1

    @contextmanager
    def transaction(self):
        """
        Get a connection with automatic transaction management.

        Commits on successful exit, rolls back on exception.
        """
        with self.get_connection() as conn:
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def close_all(self):
        """Close all connections in the pool."""
        while True:
            try:
                conn = self._pool.get_nowait()
            except queue.Empty:
                break
            self._close_quietly(conn)

        with self._lock:
            self._created_count = 0

        logger.debug(f"Closed all pooled connections for '{self.name}'")


class PoolRegistry:
    """
    Pools keyed by logical database name.

    A server connection can browse several databases; each gets its own pool
    built from ``connect(database)``. ``None`` is the connection's default
    database.

    Usage:
        pools = PoolRegistry(lambda db: connect_postgres(url, db))
        with pools.get(None).get_connection() as conn:
            ...
    """

    def __init__(self, connect: Callable[[Optional[str]], Any],
                 max_connections: int = POOL_MAX_CONNECTIONS,
                 wait_timeout: float = POOL_WAIT_TIMEOUT_S):
        self.connect = connect
        self.max_connections = max_connections
        self.wait_timeout = wait_timeout
        self._pools: Dict[Optional[str], ConnectionPool] = {}
        self._lock = threading.Lock()

    def get(self, database: Optional[str] = None) -> ConnectionPool:
        """Return the pool for a database, creating it on first use."""
        with self._lock:
            pool = self._pools.get(database)
            if pool is None:
                pool = ConnectionPool(
                    lambda: self.connect(database),
                    max_connections=self.max_connections,
                    wait_timeout=self.wait_timeout,
                    name=database or "default",
                )
                self._pools[database] = pool
            return pool

    def discard(self, database: Optional[str]):
        """Close and forget the pool of a database (e.g. before dropping it)."""
        with self._lock:
            pool = self._pools.pop(database, None)
        if pool is not None:
            pool.close_all()

    def close_all(self):
        with self._lock:
            pools = list(self._pools.values())
            self._pools.clear()
        for pool in pools:
            pool.close_all()
