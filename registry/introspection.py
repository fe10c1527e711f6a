# ============================================================================
# RUNTIME FIELD INTROSPECTION
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Registry - Fallback field extraction for ad hoc classes
# PURPOSE: Build FieldDefinitions from Python classes not in the manifest
# CREATED: 19 OCT 2026
# EXPORTS: extract_fields, field_type_for_annotation
# DEPENDENCIES: pydantic, annotated_types
# ============================================================================
"""
Runtime Field Introspection

The manifest is the primary source of object metadata. For ad hoc and test
classes that never went through the scanning step, extract_fields() reads
the class itself, trying three shapes in order:

1. Class attributes declared with core.fields helpers (FieldDefinition)
2. Pydantic model fields: annotation -> field type, annotated_types
   constraints (MaxLen, MinLen, Ge, Gt, Le, Lt) -> limits
3. Public class-level primitive values: the value's type picks the field
   type and the value becomes the default

Usage:
    class Note:
        title = fields.text(required=True)
        pinned = fields.boolean(default=False)

    extract_fields(Note)   # {"title": FieldDefinition(...), "pinned": ...}
"""

import datetime as dt
import decimal
import inspect
import logging
from typing import Any, Dict, Optional, Union, get_args, get_origin

from annotated_types import Ge, Gt, Le, Lt, MaxLen, MinLen
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from core.contracts import FieldType
from core.models.definitions import FieldDefinition

logger = logging.getLogger(__name__)

_PRIMITIVE_TYPES = (
    (bool, FieldType.BOOLEAN),
    (int, FieldType.INTEGER),
    (float, FieldType.DECIMAL),
    (decimal.Decimal, FieldType.DECIMAL),
    (dt.datetime, FieldType.DATETIME),
    (dt.date, FieldType.DATETIME),
    (str, FieldType.TEXT),
    (dict, FieldType.JSON),
    (list, FieldType.JSON),
    (tuple, FieldType.JSON),
)


def _unwrap_optional(annotation: Any) -> Any:
    """Strip Optional[...] / X | None."""
    origin = get_origin(annotation)
    if origin is Union or (origin is not None and type(None) in get_args(annotation)):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def field_type_for_annotation(annotation: Any) -> FieldType:
    """Map a Python annotation to the closest field type (TEXT if unsure)."""
    annotation = _unwrap_optional(annotation)
    origin = get_origin(annotation)
    if origin in (dict, list, tuple, set):
        return FieldType.JSON
    if inspect.isclass(annotation):
        if issubclass(annotation, BaseModel):
            return FieldType.JSON
        for python_type, field_type in _PRIMITIVE_TYPES:
            if issubclass(annotation, python_type):
                return field_type
    return FieldType.TEXT


def _field_type_for_value(value: Any) -> Optional[FieldType]:
    for python_type, field_type in _PRIMITIVE_TYPES:
        if isinstance(value, python_type):
            return field_type
    return None


# ============================================================================
# EXTRACTION STRATEGIES
# ============================================================================

def _declared_fields(cls: type) -> Dict[str, FieldDefinition]:
    """FieldDefinition class attributes, base classes first."""
    result: Dict[str, FieldDefinition] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, FieldDefinition):
                result[name] = value.model_copy(update={"name": name})
    return result


def _pydantic_field(name: str, info: FieldInfo) -> FieldDefinition:
    extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
    field_type = extra.get("field_type") or field_type_for_annotation(info.annotation).value

    definition = FieldDefinition(
        name=name,
        type=field_type,
        required=info.is_required(),
        description=info.description,
        related=extra.get("related"),
        unique=bool(extra.get("unique", False)),
    )
    if not info.is_required() and info.default_factory is None and info.default is not None:
        definition.default = info.default

    for constraint in info.metadata:
        if isinstance(constraint, MaxLen):
            definition.max_length = constraint.max_length
        elif isinstance(constraint, MinLen):
            definition.min_length = constraint.min_length
        elif isinstance(constraint, Ge):
            definition.minimum = constraint.ge
        elif isinstance(constraint, Gt):
            definition.minimum = constraint.gt
        elif isinstance(constraint, Le):
            definition.maximum = constraint.le
        elif isinstance(constraint, Lt):
            definition.maximum = constraint.lt

    return definition


def _pydantic_fields(cls: type) -> Dict[str, FieldDefinition]:
    return {name: _pydantic_field(name, info) for name, info in cls.model_fields.items()}


def _primitive_fields(cls: type) -> Dict[str, FieldDefinition]:
    """Public class-level primitive values, base classes first."""
    result: Dict[str, FieldDefinition] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name.startswith("_") or callable(value) or isinstance(value, (staticmethod, classmethod, property)):
                continue
            field_type = _field_type_for_value(value)
            if field_type is None:
                continue
            default = value
            if field_type == FieldType.DATETIME or (field_type == FieldType.JSON and not value):
                default = None
            result[name] = FieldDefinition(name=name, type=field_type.value, default=default)
    return result


def extract_fields(cls: type) -> Dict[str, FieldDefinition]:
    """
    Extract an ordered field map from a Python class.

    Returns:
        Ordered dict of field name -> FieldDefinition (may be empty)
    """
    declared = _declared_fields(cls)
    if declared:
        return declared

    if inspect.isclass(cls) and issubclass(cls, BaseModel):
        return _pydantic_fields(cls)

    fields = _primitive_fields(cls)
    if not fields:
        logger.debug(f"No fields found on {cls.__name__}")
    return fields


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["extract_fields", "field_type_for_annotation"]
