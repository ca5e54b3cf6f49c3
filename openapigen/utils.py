"""
Utility functions for the OpenAPI client generator.
"""

from __future__ import annotations

import re
from typing import Any

# Identifier-shaped property keys that get a nominal brand
_ID_PATTERN = re.compile(r"^id$|^uuid$|[a-z0-9]Id$|_id$|[a-z0-9]Uuid$|_uuid$")

_KEBAB_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_KEBAB_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
_KEBAB_SEPARATORS = re.compile(r"[^a-z0-9]+")


def camelize(text: str) -> str:
    """Convert arbitrary text to camelCase, dropping symbols and leading digits.

    Examples:
        "list_pets" -> "listPets"
        "get-user-by-id" -> "getUserById"
        "123abc" -> "abc"
        "v2beta" -> "v2Beta"

    Args:
        text: The text to convert

    Returns:
        camelCase string (may be empty)
    """
    result = []
    had_symbol = False
    for char in text:
        if ("a" <= char <= "z") or ("A" <= char <= "Z"):
            result.append(char.upper() if had_symbol else char)
            had_symbol = False
        elif "0" <= char <= "9":
            if result:
                result.append(char)
                had_symbol = True
        elif result:
            had_symbol = True
    return "".join(result)


def capitalize(text: str) -> str:
    """Uppercase the first character only."""
    return text[:1].upper() + text[1:]


def identifier(text: str) -> str:
    """Convert text to a PascalCase identifier.

    Examples:
        "listPets" -> "ListPets"
        "user_id" -> "UserId"
        "/pets/{petId}" -> "PetsPetId"
    """
    return capitalize(camelize(text))


def to_kebab_case(text: str) -> str:
    """Convert text to kebab-case (used for module file names)."""
    if not text:
        return ""
    result = _KEBAB_LOWER_UPPER.sub(r"\1-\2", text)
    result = _KEBAB_ACRONYM.sub(r"\1-\2", result)
    result = _KEBAB_SEPARATORS.sub("-", result.lower())
    return result.strip("-")


def is_id_field(key: str) -> bool:
    """Check if a property key looks like an identifier (userId, user_id, id, uuid)."""
    return _ID_PATTERN.search(key) is not None


def brand_name_for_id(key: str, parent_name: str) -> str:
    """Derive the brand name for an identifier-shaped property.

    Bare "id"/"uuid" keys are qualified by the parent declaration name so
    that Pet.id and User.id get distinct brands.
    """
    if key in ("id", "uuid"):
        return f"{parent_name}{capitalize(key)}"
    return identifier(key)


def non_empty_string(value: Any) -> str | None:
    """Return the stripped string, or None for non-strings and blank strings."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def to_comment(description: str | None) -> str:
    """Render a description as a JSDoc block (empty string when absent)."""
    if description is None:
        return ""
    body = description.replace("*/", " * /").split("\n")
    return "/**\n* " + "\n* ".join(body) + "\n*/\n"
