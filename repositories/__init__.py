# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - Query engine and database access layer
# PURPOSE: Collections over registered classes, SQL collaborator contract
# CREATED: 19 OCT 2026
# ============================================================================
"""
Repositories Module

Provides the collection query engine and the SQL execution contract.
Uses psycopg3 async with connection pooling for the PostgreSQL adapter.

Usage:
    from repositories import CollectionManager, DatabasePool, PostgresExecutor

    async with DatabasePool() as pool:
        collections = CollectionManager(registry, PostgresExecutor(pool))
        articles = await collections.get("Article").list(include=["category"])
"""

from .database import (
    SqlExecutor,
    PostgresExecutor,
    close_pool,
    DatabasePool,
)
from .where import build_where, build_order_by
from .collection import Collection, CollectionManager

__all__ = [
    "SqlExecutor",
    "PostgresExecutor",
    "close_pool",
    "DatabasePool",
    "build_where",
    "build_order_by",
    "Collection",
    "CollectionManager",
]
