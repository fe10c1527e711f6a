# ============================================================================
# SCHEMA MODULE
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - Schema generation from object definitions
# PURPOSE: Derive SchemaDefinitions, render DDL, apply it once per table
# CREATED: 19 OCT 2026
# ============================================================================

from core.schema.ddl_utils import (
    IndexBuilder,
    TriggerBuilder,
    CommentBuilder,
    SchemaUtils,
    FIELD_TYPE_MAP,
    get_sql_type,
)
from core.schema.generator import SchemaGenerator, compute_version
from core.schema.sql_generator import SchemaToSQL
from core.schema.manager import SchemaManager, SchemaInitializationResult

__all__ = [
    # Generator
    "SchemaGenerator",
    "compute_version",
    "SchemaToSQL",
    # Setup
    "SchemaManager",
    "SchemaInitializationResult",
    # Utilities
    "IndexBuilder",
    "TriggerBuilder",
    "CommentBuilder",
    "SchemaUtils",
    "FIELD_TYPE_MAP",
    "get_sql_type",
]
