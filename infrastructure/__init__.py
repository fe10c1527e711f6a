# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Infrastructure - Shared building blocks
# PURPOSE: Single-flight coordination and base repository patterns
# CREATED: 19 OCT 2026
# ============================================================================
"""
Infrastructure module for objectforge.

Provides:
- SingleFlight: coalesce concurrent identical async work per key
- BaseRepository: error wrapping, field validation, operation logging

Usage:
    from infrastructure import SingleFlight

    setup = SingleFlight("schema-setup")
    await setup.run("articles", create_articles_table)
"""

from infrastructure.locking import SingleFlight
from infrastructure.base_repository import BaseRepository

__all__ = [
    'SingleFlight',
    'BaseRepository',
]
