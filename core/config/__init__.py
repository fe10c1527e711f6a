# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for objectforge.
"""

from core.config.defaults import (
    SchemaDefaults,
    QueryDefaults,
    ManifestDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "SchemaDefaults",
    "QueryDefaults",
    "ManifestDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
