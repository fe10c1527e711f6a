# ============================================================================
# REGISTRY MODULE
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Registry - Object metadata service
# PURPOSE: Register object definitions, answer metadata questions
# CREATED: 19 OCT 2026
# ============================================================================
"""
Registry module for objectforge.

Provides:
- ObjectRegistry: class name -> fields, methods, schema, model, relationships
- Relationship: one relationship edge as seen from its declaring class
- extract_fields: runtime introspection for classes outside the manifest

Usage:
    from registry import ObjectRegistry

    registry = ObjectRegistry.from_file("objects.yaml", seal=True)
    registry.get_initialization_order()
"""

from registry.introspection import extract_fields, field_type_for_annotation
from registry.object_registry import ObjectRegistry, Relationship

__all__ = [
    'ObjectRegistry',
    'Relationship',
    'extract_fields',
    'field_type_for_annotation',
]
