# ============================================================================
# DATABASE EXECUTOR & CONNECTION POOL
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - SQL collaborator contract and PostgreSQL adapter
# PURPOSE: Parameterized query + schema sync over psycopg3 async pool
# CREATED: 19 OCT 2026
# ============================================================================
"""
Database Executor & Connection Pool

The query engine never talks to a driver directly. It depends on the
SqlExecutor contract:

    async query(statement, params) -> List[Dict[str, Any]]
    async sync_schema(schema_text) -> None

`statement` is a psycopg.sql.Composable using %s placeholders and `params`
is the matching positional list. `sync_schema` idempotently applies a DDL
script (CREATE ... IF NOT EXISTS).

PostgresExecutor implements the contract on psycopg_pool.AsyncConnectionPool.
Pool lifecycle helpers keep one pool per process.

Usage:
    from repositories.database import DatabasePool, PostgresExecutor

    async with DatabasePool() as pool:
        executor = PostgresExecutor(pool)
        rows = await executor.query(sql.SQL("SELECT 1 AS one"), [])
"""

import os
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)

# Global pool instance
_pool: Optional[AsyncConnectionPool] = None


# ============================================================================
# COLLABORATOR CONTRACT
# ============================================================================

@runtime_checkable
class SqlExecutor(Protocol):
    """SQL execution handle injected into Collection and SchemaManager."""

    async def query(
        self,
        statement: sql.Composable,
        params: Sequence[Any] = (),
    ) -> List[Dict[str, Any]]:
        """Run one parameterized statement, return rows as dicts."""
        ...

    async def sync_schema(self, schema_text: str) -> None:
        """Apply a DDL script idempotently."""
        ...


# ============================================================================
# CONNECTION STRING
# ============================================================================

def get_connection_string() -> str:
    """
    Get database connection string from environment.

    Priority:
    1. DATABASE_URL environment variable
    2. Individual POSTGRES_* components

    Returns:
        PostgreSQL connection string
    """
    if url := os.environ.get("DATABASE_URL"):
        return url

    host = os.environ.get("POSTGRES_HOST", "localhost")
    port = os.environ.get("POSTGRES_PORT", "5432")
    name = os.environ.get("POSTGRES_DB", "postgres")
    user = os.environ.get("POSTGRES_USER", "postgres")
    password = os.environ.get("POSTGRES_PASSWORD", "")
    sslmode = os.environ.get("POSTGRES_SSLMODE", "prefer")

    return f"postgresql://{user}:{password}@{host}:{port}/{name}?sslmode={sslmode}"


def mask_connection_string(conninfo: str) -> str:
    """Strip credentials from a connection string for logging."""
    if "@" in conninfo:
        return conninfo.split("@")[-1]
    if "password=" in conninfo:
        head, _, tail = conninfo.partition("password=")
        rest = tail.split(" ", 1)
        return head + "password=***" + (" " + rest[1] if len(rest) > 1 else "")
    return conninfo


# ============================================================================
# POOL LIFECYCLE
# ============================================================================

async def init_pool(
    min_size: int = 2,
    max_size: int = 10,
    connection_string: Optional[str] = None,
) -> AsyncConnectionPool:
    """
    Initialize the global connection pool.

    Args:
        min_size: Minimum connections to maintain
        max_size: Maximum connections allowed
        connection_string: Override connection string (defaults to env)

    Returns:
        AsyncConnectionPool instance
    """
    global _pool

    if _pool is not None:
        logger.warning("Pool already initialized, returning existing pool")
        return _pool

    conninfo = connection_string or get_connection_string()
    logger.info(f"Initializing connection pool: {mask_connection_string(conninfo)}")

    _pool = AsyncConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        open=False,  # opened explicitly below
    )

    await _pool.open()
    logger.info(f"Connection pool opened (min={min_size}, max={max_size})")

    return _pool


async def close_pool() -> None:
    """Close the global connection pool."""
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Connection pool closed")


class DatabasePool:
    """
    Context manager for pool lifecycle.

    Usage:
        async with DatabasePool() as pool:
            async with pool.connection() as conn:
                ...
    """

    def __init__(
        self,
        min_size: int = 2,
        max_size: int = 10,
        connection_string: Optional[str] = None,
    ):
        self.min_size = min_size
        self.max_size = max_size
        self.connection_string = connection_string
        self._pool: Optional[AsyncConnectionPool] = None

    async def __aenter__(self) -> AsyncConnectionPool:
        self._pool = await init_pool(
            min_size=self.min_size,
            max_size=self.max_size,
            connection_string=self.connection_string,
        )
        return self._pool

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await close_pool()


# ============================================================================
# POSTGRESQL EXECUTOR
# ============================================================================

class PostgresExecutor:
    """
    SqlExecutor backed by an async psycopg connection pool.

    Statement timeouts and cancellation belong to the pool/connection
    configuration, not to this adapter.
    """

    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool

    async def query(
        self,
        statement: sql.Composable,
        params: Sequence[Any] = (),
    ) -> List[Dict[str, Any]]:
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            cursor = await conn.execute(statement, list(params))
            if cursor.description is None:
                return []
            return await cursor.fetchall()

    async def sync_schema(self, schema_text: str) -> None:
        """
        Apply a DDL script in one transaction.

        No parameters are passed, so the script may hold several statements.
        """
        async with self.pool.connection() as conn:
            await conn.execute(schema_text)
        logger.info(f"Applied schema script ({schema_text.count(';')} statements)")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SqlExecutor",
    "PostgresExecutor",
    "get_connection_string",
    "mask_connection_string",
    "init_pool",
    "close_pool",
    "DatabasePool",
]
