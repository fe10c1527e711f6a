# ============================================================================
# NAMING CONVENTIONS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Foundation - Name derivation helpers
# PURPOSE: snake/camel conversion and class name to table/collection names
# CREATED: 19 OCT 2026
# EXPORTS: to_snake_case, to_camel_case, pluralize, class_name_to_table_name
# DEPENDENCIES: re
# ============================================================================
"""
Naming Conventions

Every generated surface derives its names from the class name:

    BlogPost  -> table "blog_posts", singular "blog_post"
    Category  -> table "categories"
    Address   -> table "address"  (already ends in s)

Usage:
    from core.naming import class_name_to_table_name, to_snake_case

    class_name_to_table_name("BlogPost")   # "blog_posts"
    to_snake_case("createdAt")             # "created_at"
"""

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SNAKE_SEGMENT = re.compile(r"_([a-z0-9])")
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def to_snake_case(name: str) -> str:
    """
    Convert camelCase or PascalCase to snake_case.

    Already snake_case input is returned unchanged.
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_camel_case(name: str) -> str:
    """Convert snake_case to camelCase."""
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), name)


def pluralize(word: str) -> str:
    """Simple English pluralization for collection names."""
    if word.endswith("s"):
        return word
    if len(word) > 1 and word.endswith("y") and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


def singular_name(class_name: str) -> str:
    """Snake-case singular name used for per-item tool and command names."""
    return to_snake_case(class_name)


def class_name_to_table_name(class_name: str) -> str:
    """Derive the snake_case plural table (collection) name for a class."""
    return pluralize(to_snake_case(class_name))


def is_identifier(name: str) -> bool:
    """Check that a name is safe to use as a bare SQL identifier."""
    return bool(IDENTIFIER_PATTERN.match(name))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "IDENTIFIER_PATTERN",
    "to_snake_case",
    "to_camel_case",
    "pluralize",
    "singular_name",
    "class_name_to_table_name",
    "is_identifier",
]
