# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for schema rendering, queries, manifests
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for schema rendering, collection queries and
manifest generation. These can be overridden via environment variables or
constructor arguments.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access

Environment Variables:
    OBJECTFORGE_SQL_DIALECT      sqlite | postgres (default: sqlite)
    OBJECTFORGE_DB_SCHEMA        Schema qualifier for postgres DDL
    OBJECTFORGE_DDL_COMMENTS     Emit column comments in postgres DDL (default: false)
    OBJECTFORGE_DEFAULT_LIMIT    Default list() page size (default: none)
    OBJECTFORGE_MAX_LIMIT        Upper bound for list() limit (default: 1000)
    OBJECTFORGE_AUTO_SETUP       Create tables on first query (default: true)
    OBJECTFORGE_MANIFEST         Path to the object-definition manifest
    OBJECTFORGE_API_BASE_PATH    Prefix for generated REST paths (default: "")
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from core.contracts import BASE_CLASS_NAMES


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass(frozen=True)
class SchemaDefaults:
    """
    Defaults for schema generation and DDL rendering.
    """
    dialect: str = "sqlite"
    schema_name: Optional[str] = None
    include_comments: bool = False
    base_class_names: FrozenSet[str] = BASE_CLASS_NAMES

    @classmethod
    def from_env(cls) -> "SchemaDefaults":
        """Create from environment variables."""
        return cls(
            dialect=os.getenv("OBJECTFORGE_SQL_DIALECT", "sqlite").lower(),
            schema_name=os.getenv("OBJECTFORGE_DB_SCHEMA") or None,
            include_comments=_env_bool("OBJECTFORGE_DDL_COMMENTS", False),
        )


@dataclass(frozen=True)
class QueryDefaults:
    """
    Defaults for collection queries.
    """
    default_limit: Optional[int] = None
    max_limit: int = 1000
    auto_setup: bool = True

    @classmethod
    def from_env(cls) -> "QueryDefaults":
        """Create from environment variables."""
        return cls(
            default_limit=_env_int("OBJECTFORGE_DEFAULT_LIMIT"),
            max_limit=_env_int("OBJECTFORGE_MAX_LIMIT") or 1000,
            auto_setup=_env_bool("OBJECTFORGE_AUTO_SETUP", True),
        )


@dataclass(frozen=True)
class ManifestDefaults:
    """
    Defaults for manifest loading and surface generation.
    """
    manifest_path: Optional[str] = None
    api_base_path: str = ""

    @classmethod
    def from_env(cls) -> "ManifestDefaults":
        """Create from environment variables."""
        return cls(
            manifest_path=os.getenv("OBJECTFORGE_MANIFEST") or None,
            api_base_path=os.getenv("OBJECTFORGE_API_BASE_PATH", "").rstrip("/"),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    schema: SchemaDefaults = field(default_factory=SchemaDefaults)
    query: QueryDefaults = field(default_factory=QueryDefaults)
    manifest: ManifestDefaults = field(default_factory=ManifestDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            schema=SchemaDefaults.from_env(),
            query=QueryDefaults.from_env(),
            manifest=ManifestDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SchemaDefaults",
    "QueryDefaults",
    "ManifestDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
