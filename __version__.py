# ============================================================================
# VERSION - OBJECTFORGE
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# ============================================================================
"""
Version information for objectforge.

This is the single source of truth for the library version.
Updated manually for each release.
"""
# Version format: major.minor.patch
__version__ = "0.1.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-19"

# Manifest format accepted by ObjectRegistry.load_manifest
MANIFEST_FORMAT_VERSION = "1"
EPOCH = 1
CODENAME = "Object Forge"
