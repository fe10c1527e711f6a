# ============================================================================
# WHERE-CLAUSE COMPILER
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - Declarative filter -> parameterized SQL
# PURPOSE: Compile where/order_by specs into psycopg.sql compositions
# CREATED: 19 OCT 2026
# EXPORTS: build_where, build_order_by, parse_condition_key, OPERATORS
# DEPENDENCIES: psycopg
# ============================================================================
"""
Where-Clause Compiler

Grammar: each key is a bare field name (implicit '=') or "field <op>":

    {"status": "active"}                 "status" = %s
    {"price >": 100}                     "price" > %s
    {"category in": ["A", "B"]}          "category" IN (%s, %s)
    {"title like": "%news%"}             "title" LIKE %s
    {"deleted_at": None}                 "deleted_at" IS NULL
    {"deleted_at !=": None}              "deleted_at" IS NOT NULL

Keys are ANDed. Values only ever travel as bound parameters; identifiers
go through sql.Identifier after snake_case conversion and validation.
Anything outside the grammar raises QueryError.

Usage:
    condition, params = build_where({"price >": 100, "category in": ["A"]})
    statement = sql.SQL("SELECT * FROM {} WHERE {}").format(table, condition)
"""

from typing import Any, Collection, List, Mapping, Optional, Sequence, Tuple, Union

from psycopg import sql

from core.errors import QueryError
from core.naming import is_identifier, to_snake_case

# Operator token -> SQL operator
OPERATORS = {
    "=": "=",
    "!=": "!=",
    ">": ">",
    ">=": ">=",
    "<": "<",
    "<=": "<=",
    "like": "LIKE",
    "in": "IN",
}

_DIRECTIONS = ("ASC", "DESC")

TRUE_CONDITION = sql.SQL("1 = 1")
FALSE_CONDITION = sql.SQL("1 = 0")


def _column(field: str, columns: Optional[Collection[str]]) -> str:
    column = to_snake_case(field)
    if not is_identifier(column):
        raise QueryError(f"Invalid field name in query: {field!r}")
    if columns is not None and column not in columns:
        raise QueryError(f"Unknown field in query: {field!r}", details={"field": field})
    return column


def parse_condition_key(key: str) -> Tuple[str, str]:
    """
    Split a where key into (field, operator token).

    Raises:
        QueryError: Empty key, unknown operator or extra tokens
    """
    parts = key.split()
    if len(parts) == 1:
        return parts[0], "="
    if len(parts) == 2:
        op = parts[1].lower()
        if op not in OPERATORS:
            raise QueryError(
                f"Unsupported operator {parts[1]!r} in where key {key!r}",
                details={"key": key, "operator": parts[1]},
            )
        return parts[0], op
    raise QueryError(f"Malformed where key: {key!r}", details={"key": key})


def _condition(column: str, op: str, value: Any, params: List[Any]) -> sql.Composable:
    ident = sql.Identifier(column)

    if value is None:
        if op == "=":
            return sql.SQL("{} IS NULL").format(ident)
        if op == "!=":
            return sql.SQL("{} IS NOT NULL").format(ident)
        raise QueryError(f"None is only valid with '=' or '!=' (got {op!r} on {column})")

    if op == "in":
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
            raise QueryError(f"'in' on {column} expects a list, got {type(value).__name__}")
        values = list(value)
        if not values:
            return FALSE_CONDITION
        params.extend(values)
        return sql.SQL("{} IN ({})").format(
            ident,
            sql.SQL(", ").join(sql.Placeholder() for _ in values),
        )

    params.append(value)
    return sql.SQL("{} {} {}").format(ident, sql.SQL(OPERATORS[op]), sql.Placeholder())


def build_where(
    where: Optional[Mapping[str, Any]],
    columns: Optional[Collection[str]] = None,
) -> Tuple[sql.Composable, List[Any]]:
    """
    Compile a where mapping into a condition and its parameters.

    Args:
        where: Filter mapping (None or empty matches everything)
        columns: Known column names; unknown fields raise when given

    Returns:
        (condition, params). The condition never includes the WHERE keyword.

    Raises:
        QueryError: Anything outside the grammar
    """
    if not where:
        return TRUE_CONDITION, []

    params: List[Any] = []
    conditions = []
    for key, value in where.items():
        field, op = parse_condition_key(key)
        conditions.append(_condition(_column(field, columns), op, value, params))

    return sql.SQL(" AND ").join(conditions), params


def build_order_by(
    order_by: Union[str, Sequence[str], None],
    columns: Optional[Collection[str]] = None,
) -> Optional[sql.Composable]:
    """
    Compile "field [ASC|DESC]" entries into an ORDER BY list.

    Returns:
        Composed list (without the ORDER BY keyword), or None

    Raises:
        QueryError: Bad direction token or field name
    """
    if not order_by:
        return None
    entries = [order_by] if isinstance(order_by, str) else list(order_by)

    parts = []
    for entry in entries:
        tokens = entry.split()
        if not tokens or len(tokens) > 2:
            raise QueryError(f"Malformed order_by entry: {entry!r}")
        direction = tokens[1].upper() if len(tokens) == 2 else "ASC"
        if direction not in _DIRECTIONS:
            raise QueryError(f"Invalid sort direction {tokens[1]!r} in {entry!r}")
        parts.append(sql.SQL("{} {}").format(
            sql.Identifier(_column(tokens[0], columns)),
            sql.SQL(direction),
        ))

    return sql.SQL(", ").join(parts)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "OPERATORS",
    "TRUE_CONDITION",
    "FALSE_CONDITION",
    "parse_condition_key",
    "build_where",
    "build_order_by",
]
