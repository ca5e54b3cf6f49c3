"""
IR (Intermediate Representation) node definitions.

These nodes represent the analyzed and resolved schemas, ready for
rendering. They carry structure only: backends own all target syntax.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TypeKind(Enum):
    """Kind of type expression in the IR."""

    PRIMITIVE = "primitive"  # string, number, integer, boolean, null
    BINARY = "binary"  # opaque binary blob (format: binary)
    JSON = "json"  # any JSON value
    NEVER = "never"  # no value
    LITERAL = "literal"  # single const value
    LITERALS = "literals"  # enum value set
    ARRAY = "array"  # Array<T> / NonEmptyArray<T>
    TUPLE = "tuple"  # [A, B] with optional rest
    RECORD = "record"  # string-keyed dictionary
    STRUCT = "struct"  # inline object literal
    UNION = "union"  # A | B | ...
    REF = "ref"  # Reference to a named declaration


class CheckKind(Enum):
    """Refinement checks chained onto a base type."""

    UUID = "uuid"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    PATTERN = "pattern"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL_TO = "greater_than_or_equal_to"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL_TO = "less_than_or_equal_to"
    MULTIPLE_OF = "multiple_of"


class FieldWrapper(Enum):
    """Presence/default wrapper applied around a property type."""

    NONE = "none"
    DECODING_DEFAULT = "decoding_default"  # missing value decodes to the default
    CONSTRUCTOR_DEFAULT = "constructor_default"  # default applied on construction
    OPTIONAL = "optional"  # key may be absent


class DeclarationKind(Enum):
    """Kind of named declaration."""

    SCHEMA = "schema"  # named alias of an arbitrary expression
    STRUCT = "struct"  # plain struct declaration
    CLASS = "class"  # class-style struct declaration
    BRAND = "brand"  # nominal wrapper around a primitive
    TAGGED_ERROR = "tagged_error"  # error variant wrapping a body struct


@dataclass
class Check:
    """A single refinement check."""

    kind: CheckKind = CheckKind.MIN_LENGTH
    value: Any = None


@dataclass
class TypeRef:
    """A resolved type expression."""

    kind: TypeKind = TypeKind.PRIMITIVE
    name: str = ""  # Primitive name or referenced declaration name

    # For containers (array item, record value, tuple elements, union members)
    type_args: list[TypeRef] = field(default_factory=list)

    # Tuple rest element
    rest: TypeRef | None = None

    # Inline struct fields
    fields: list[FieldDef] = field(default_factory=list)

    # For literal/literals types
    literal_values: list[Any] = field(default_factory=list)

    # Refinements in application order
    checks: list[Check] = field(default_factory=list)

    # NonEmptyArray instead of Array
    non_empty: bool = False

    is_nullable: bool = False


@dataclass
class FieldDef:
    """A property of a struct."""

    name: str = ""
    type_ref: TypeRef | None = None
    wrapper: FieldWrapper = FieldWrapper.NONE
    default_value: Any = None
    description: str | None = None


@dataclass
class Declaration:
    """A named, emittable unit."""

    name: str = ""
    kind: DeclarationKind = DeclarationKind.SCHEMA

    # SCHEMA/BRAND: the expression; STRUCT/CLASS: a STRUCT TypeRef holding the fields
    type_ref: TypeRef | None = None

    description: str | None = None

    # Registration order (tie-break for emission)
    order: int = 0

    # Names this declaration references
    depends_on: set[str] = field(default_factory=set)

    is_shared: bool = False
    is_error_variant: bool = False

    # For TAGGED_ERROR: the struct holding the error's fields
    body_struct_name: str | None = None

    @property
    def is_struct(self) -> bool:
        """Whether the declaration is an object with explicit properties."""
        return self.kind in (DeclarationKind.STRUCT, DeclarationKind.CLASS, DeclarationKind.TAGGED_ERROR)


def collect_refs(type_ref: TypeRef | None) -> set[str]:
    """Collect the names of every declaration a type expression references."""
    names: set[str] = set()
    if type_ref is None:
        return names

    stack = [type_ref]
    while stack:
        current = stack.pop()
        if current.kind == TypeKind.REF:
            names.add(current.name)
        stack.extend(current.type_args)
        if current.rest is not None:
            stack.append(current.rest)
        stack.extend(f.type_ref for f in current.fields if f.type_ref is not None)
    return names
