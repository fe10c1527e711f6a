# ============================================================================
# BASE REPOSITORY - ERROR HANDLING AND VALIDATION PATTERNS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Infrastructure - Base repository patterns
# PURPOSE: Common field validation, error wrapping and logging for collections
# CREATED: 19 OCT 2026
# ============================================================================
"""
Base Repository Patterns

Abstract base class that provides common infrastructure for collections:
- Consistent error handling: collaborator failures become RepositoryError,
  objectforge errors pass through untouched
- Field validation against declared FieldDefinitions before writes
- Standardized operation logging

Collection (repositories.collection) extends this with query building and
relationship loading.
"""

import logging
from abc import ABC
from contextlib import contextmanager
from typing import Any, Dict, Mapping, Optional

from core.contracts import FieldType
from core.errors import ObjectForgeError, RepositoryError, ValidationError
from core.models.definitions import FieldDefinition

logger = logging.getLogger(__name__)


class BaseRepository(ABC):
    """
    Abstract base repository with common patterns.

    Provides:
    - Error context manager for consistent error handling
    - Declared-field validation
    - Standardized logging
    """

    def __init__(self):
        """Initialize base repository."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.debug(f"{self.__class__.__name__} initialized")

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[str] = None):
        """
        Context manager for consistent error handling.

        objectforge errors already carry context and are re-raised as-is.
        Anything else (driver errors, collaborator bugs) is logged and
        wrapped in RepositoryError.

        Example:
            with self._error_context("create", object_id):
                await self.executor.query(statement, params)
        """
        try:
            yield
        except ObjectForgeError:
            raise
        except Exception as e:
            error_msg = f"{operation} failed"
            if entity_id:
                error_msg += f" for {entity_id}"
            error_msg += f": {e}"
            self.logger.error(error_msg)
            raise RepositoryError(error_msg, operation=operation, entity_id=entity_id) from e

    def _validate_fields(
        self,
        data: Mapping[str, Any],
        fields: Dict[str, FieldDefinition],
        partial: bool = False,
    ) -> None:
        """
        Validate values against declared fields.

        Args:
            data: Values keyed by field name
            fields: Declared field map
            partial: Update semantics, missing required fields are allowed

        Raises:
            ValidationError: Missing required value or limit violation
        """
        for name, field in fields.items():
            if field.is_virtual:
                continue
            value = data.get(name)
            if value is None:
                if field.required and not partial and field.default is None:
                    raise ValidationError(
                        f"Field '{name}' is required",
                        field=name,
                        value=value,
                    )
                continue
            self._validate_limits(name, field, value)

    def _validate_limits(self, name: str, field: FieldDefinition, value: Any) -> None:
        kind = field.field_type
        if kind in (FieldType.INTEGER, FieldType.DECIMAL) and isinstance(value, (int, float)):
            if field.minimum is not None and value < field.minimum:
                raise ValidationError(
                    f"Field '{name}' must be >= {field.minimum}", field=name, value=value
                )
            if field.maximum is not None and value > field.maximum:
                raise ValidationError(
                    f"Field '{name}' must be <= {field.maximum}", field=name, value=value
                )
        elif kind == FieldType.TEXT and isinstance(value, str):
            if field.min_length is not None and len(value) < field.min_length:
                raise ValidationError(
                    f"Field '{name}' must be at least {field.min_length} characters",
                    field=name,
                    value=value,
                )
            if field.max_length is not None and len(value) > field.max_length:
                raise ValidationError(
                    f"Field '{name}' must be at most {field.max_length} characters",
                    field=name,
                    value=value,
                )

    def _log_operation(
        self,
        success: bool,
        operation: str,
        entity_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log operation result with consistent formatting.

        Format:
            Success: "operation: entity_id | details"
            Failure: "operation failed: entity_id | details"
        """
        # Truncate long IDs for readability
        short_id = entity_id[:16] + "..." if len(entity_id) > 16 else entity_id

        if success:
            msg = f"{operation}: {short_id}"
        else:
            msg = f"{operation} failed: {short_id}"

        if details:
            msg += f" | {details}"

        if success:
            self.logger.info(msg)
        else:
            self.logger.warning(msg)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["BaseRepository"]
