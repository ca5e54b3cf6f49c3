"""
AST (Abstract Syntax Tree) node definitions for JSON Schema fragments.

These nodes are the closed set of shapes the normalizer produces from
raw OpenAPI/JSON-Schema fragments. References are not resolved yet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SchemaNode:
    """Base class for all AST nodes."""

    # Original location of the fragment (for log messages)
    source_path: str = ""

    nullable: bool = False

    # Default value (has_default distinguishes "default: null" from no default)
    default_value: Any = None
    has_default: bool = False

    title: str | None = None
    description: str | None = None


@dataclass
class PrimitiveNode(SchemaNode):
    """Represents a primitive type (string, integer, number, boolean, null)."""

    type_name: str = ""
    format: str | None = None

    # String constraints
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None

    # Numeric constraints
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: float | None = None
    exclusive_maximum: float | None = None
    multiple_of: float | None = None


@dataclass
class EnumNode(SchemaNode):
    """Represents an enum (values kept verbatim, in order)."""

    values: list[Any] = field(default_factory=list)


@dataclass
class ConstNode(SchemaNode):
    """Represents a const value."""

    value: Any = None


@dataclass
class RefNode(SchemaNode):
    """Represents a $ref (unresolved reference)."""

    ref_path: str = ""


@dataclass
class AllOfNode(SchemaNode):
    """Represents an allOf composition, merged later by the analyzer."""

    members: list[SchemaNode] = field(default_factory=list)


@dataclass
class AnyOfNode(SchemaNode):
    """Represents an anyOf/oneOf union with null members already filtered out."""

    members: list[SchemaNode] = field(default_factory=list)


@dataclass
class ObjectNode(SchemaNode):
    """Represents an object type.

    Without explicit properties the object is an open string-keyed record;
    additional_properties then holds the record value type (None means any).
    """

    properties: dict[str, SchemaNode] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    has_explicit_properties: bool = False
    additional_properties: SchemaNode | None = None


@dataclass
class ArrayNode(SchemaNode):
    """Represents a homogeneous array. items=True accepts anything, items=False nothing."""

    items: SchemaNode | bool = True
    min_items: int | None = None
    max_items: int | None = None


@dataclass
class TupleNode(SchemaNode):
    """Represents a tuple (prefixItems) with an optional homogeneous rest."""

    prefix_items: list[SchemaNode] = field(default_factory=list)
    rest: SchemaNode | bool = True


@dataclass
class BooleanSchemaNode(SchemaNode):
    """Represents a boolean schema: True accepts any JSON value, False accepts nothing."""

    value: bool = True


def is_null(node: SchemaNode) -> bool:
    """Check if a node is the null primitive."""
    return isinstance(node, PrimitiveNode) and node.type_name == "null"


def is_struct(node: SchemaNode) -> bool:
    """Check if a node is an object with explicit properties."""
    return isinstance(node, ObjectNode) and node.has_explicit_properties
