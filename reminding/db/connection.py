"""
db/connection.py
----------------
PostgreSQL connection handle.
Wraps psycopg2's SimpleConnectionPool; create one ``Database`` at startup and
pass it to the repositories that need it.
"""

import psycopg2
from psycopg2 import pool

from reminding.config import DATABASE_URL, DB_POOL_MAX, DB_POOL_MIN
from reminding.utils.logger import get_logger

logger = get_logger(__name__)


class Database:
    """
    Owns a connection pool.

    Usage:
        with Database() as db:
            repo = SubscriptionRepository(db)
    """

    def __init__(self, dsn: str = DATABASE_URL, min_conn: int = DB_POOL_MIN, max_conn: int = DB_POOL_MAX):
        self.dsn = dsn
        self.min_conn = min_conn
        self.max_conn = max_conn
        self._pool: pool.SimpleConnectionPool | None = None

    def open(self) -> "Database":
        """
        Initialize the connection pool. Calling it twice is a no-op.

        Raises:
            psycopg2.OperationalError: If the database is unreachable.
        """
        if self._pool is not None:
            return self
        try:
            self._pool = pool.SimpleConnectionPool(self.min_conn, self.max_conn, self.dsn)
            logger.info("Database connection pool initialized successfully.")
        except psycopg2.OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise
        return self

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def get_connection(self):
        """
        Get a connection from the pool.

        Raises:
            RuntimeError: If the pool has not been opened.
        """
        if self._pool is None:
            raise RuntimeError("Database pool not initialized. Call open() first.")
        return self._pool.getconn()

    def release_connection(self, conn) -> None:
        """Return a connection back to the pool."""
        if self._pool is not None:
            self._pool.putconn(conn)

    def close(self) -> None:
        """Close all connections in the pool."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.info("Database connection pool closed.")

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
