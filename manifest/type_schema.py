# ============================================================================
# TYPE STRING -> JSON SCHEMA
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Manifest - Parameter type compiler
# PURPOSE: Convert declared parameter type strings into JSON Schema fragments
# CREATED: 19 OCT 2026
# EXPORTS: convert_type_to_json_schema, split_top_level
# DEPENDENCIES: none
# ============================================================================
"""
Type String -> JSON Schema

A small recursive parser over the type strings recorded in method
signatures. It is not a type checker: anything it does not recognize
becomes a string parameter carrying the raw type in its description, so a
tool is always generated.

    "string"            {"type": "string"}
    "number[]"          {"type": "array", "items": {"type": "number"}}
    "Array<boolean>"    {"type": "array", "items": {"type": "boolean"}}
    "'a' | 'b'"         {"type": "string", "enum": ["a", "b"]}
    "Foo | Bar"         {"oneOf": [...]}
    "Record<string, X>" {"type": "object"}
    "Widget"            {"type": "string", "description": "type: Widget"}
"""

from typing import Any, Dict, List

_PRIMITIVES = {
    "string": {"type": "string"},
    "number": {"type": "number"},
    "integer": {"type": "integer"},
    "boolean": {"type": "boolean"},
    "null": {"type": "null"},
}

_UNCONSTRAINED = ("any", "unknown", "")

_OBJECT_NAMES = ("object", "Object")
_OBJECT_GENERICS = ("Record<", "Map<")

_OPENERS = "<([{"
_CLOSERS = ">)]}"
_QUOTES = "'\""


def split_top_level(type_string: str, separator: str = "|") -> List[str]:
    """
    Split on `separator` outside brackets and quotes.

    "A | Array<B | C>" -> ["A", "Array<B | C>"]
    """
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    quote = None

    for ch in type_string:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in _QUOTES:
            quote = ch
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(depth - 1, 0)
        elif ch == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)

    parts.append("".join(current).strip())
    return [p for p in parts if p]


def _is_quoted_literal(token: str) -> bool:
    return len(token) >= 2 and token[0] in _QUOTES and token[-1] == token[0]


def _is_wrapped(token: str, opener: str, closer: str) -> bool:
    """True when the first opener closes exactly at the last character."""
    if not (token.startswith(opener) and token.endswith(closer)):
        return False
    depth = 0
    for i, ch in enumerate(token):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth == 0 and i != len(token) - 1:
                return False
    return True


def convert_type_to_json_schema(type_string: str) -> Dict[str, Any]:
    """
    Convert one declared type string to a JSON Schema fragment.

    Never raises: unrecognized input degrades to a described string.
    """
    clean = (type_string or "").strip()

    if clean in _UNCONSTRAINED:
        return {}

    options = split_top_level(clean)
    if len(options) > 1:
        if all(_is_quoted_literal(opt) for opt in options):
            return {"type": "string", "enum": [opt[1:-1] for opt in options]}
        return {"oneOf": [convert_type_to_json_schema(opt) for opt in options]}

    if _is_quoted_literal(clean):
        return {"type": "string", "enum": [clean[1:-1]]}

    if clean.endswith("[]"):
        return {"type": "array", "items": convert_type_to_json_schema(clean[:-2])}

    if clean.startswith("Array<") and _is_wrapped(clean[5:], "<", ">"):
        return {"type": "array", "items": convert_type_to_json_schema(clean[6:-1])}

    if _is_wrapped(clean, "(", ")"):
        return convert_type_to_json_schema(clean[1:-1])

    if clean in _PRIMITIVES:
        return dict(_PRIMITIVES[clean])

    if _is_wrapped(clean, "{", "}") or clean in _OBJECT_NAMES or clean.startswith(_OBJECT_GENERICS):
        return {"type": "object"}

    if clean == "Date":
        return {"type": "string", "format": "date-time"}

    return {"type": "string", "description": f"type: {clean}"}


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["convert_type_to_json_schema", "split_top_level"]
