"""
Merge and union algebra over normalized schema nodes.

allOf members are folded left to right into a single node; anyOf/oneOf
members have their null branches lifted into the nullable flag.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import MISSING, fields, replace
from typing import Any

from ..schema_ast.nodes import (
    AllOfNode,
    AnyOfNode,
    BooleanSchemaNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaNode,
    is_null,
)

# Fields shared by every node kind (annotations rather than shape)
_BASE_FIELDS = {f.name for f in fields(SchemaNode)}

RefLookup = Callable[[RefNode], SchemaNode | None]


def filter_nullable(members: list[SchemaNode]) -> SchemaNode:
    """Remove null members from a union and fold them into the nullable flag.

    Args:
        members: Normalized anyOf/oneOf members

    Returns:
        The single remaining member, a union over the remaining members,
        or the null primitive when every member was null
    """
    remaining = [m for m in members if not is_null(m)]
    had_null = len(remaining) < len(members)

    if not remaining:
        return PrimitiveNode(type_name="null")

    if len(remaining) == 1:
        member = remaining[0]
        return replace(member, nullable=member.nullable or had_null)

    nullable = had_null or any(m.nullable for m in remaining)
    return AnyOfNode(
        members=[replace(m, nullable=False) for m in remaining],
        nullable=nullable,
    )


def single_ref(node: AllOfNode) -> RefNode | None:
    """Return the reference when an allOf only wraps a single $ref."""
    if len(node.members) == 1 and isinstance(node.members[0], RefNode):
        return node.members[0]
    return None


def merge_all_of(members: list[SchemaNode], lookup: RefLookup) -> SchemaNode:
    """Merge allOf members into one node.

    Each member is resolved first (following $ref and nested allOf). Required
    lists are concatenated, properties are shallow-merged with later members
    winning, and any other field defined by a later member overwrites the
    accumulated one. Members of a different kind are overlaid best-effort.

    Args:
        members: Normalized allOf members
        lookup: Resolves a RefNode to its normalized target (None if unresolvable)

    Returns:
        The merged node
    """
    return _merge(members, lookup, set())


def flatten_all_of(node: AllOfNode, lookup: RefLookup) -> SchemaNode:
    """Merge an allOf node, keeping its own nullable flag, default and annotations."""
    merged = merge_all_of(node.members, lookup)
    return replace(merged, **_defined_fields(node, base_only=True))


def _merge(members: list[SchemaNode], lookup: RefLookup, seen: set[str]) -> SchemaNode:
    merged: SchemaNode | None = None
    for member in members:
        resolved = _flatten(member, lookup, seen)
        if resolved is None:
            continue
        merged = resolved if merged is None else _overlay(merged, resolved)

    if merged is None:
        return BooleanSchemaNode(value=True)
    return merged


def _flatten(node: SchemaNode, lookup: RefLookup, seen: set[str]) -> SchemaNode | None:
    """Follow references and nested allOf until a concrete node is reached."""
    if isinstance(node, RefNode):
        if node.ref_path in seen:
            return None
        target = lookup(node)
        if target is None:
            return None
        return _flatten(target, lookup, seen | {node.ref_path})

    if isinstance(node, AllOfNode):
        inner = _merge(node.members, lookup, seen)
        return replace(inner, **_defined_fields(node, base_only=True))

    return node


def _overlay(acc: SchemaNode, member: SchemaNode) -> SchemaNode:
    """Overlay a later allOf member onto the accumulated node."""
    if isinstance(acc, ObjectNode) and isinstance(member, ObjectNode):
        return replace(
            acc,
            properties={**acc.properties, **member.properties},
            required=list(dict.fromkeys(acc.required + member.required)),
            has_explicit_properties=acc.has_explicit_properties or member.has_explicit_properties,
            additional_properties=member.additional_properties or acc.additional_properties,
            **_defined_fields(member, base_only=True),
        )

    # An unconstrained member contributes nothing but annotations
    if isinstance(member, BooleanSchemaNode) and member.value:
        return replace(acc, **_defined_fields(member, base_only=True))
    if isinstance(acc, BooleanSchemaNode) and acc.value:
        return _beneath(member, acc)

    if type(acc) is type(member):
        return replace(acc, **_defined_fields(member))

    if isinstance(acc, ObjectNode):
        return replace(acc, **_defined_fields(member, base_only=True))

    return _beneath(member, acc)


def _beneath(winner: SchemaNode, loser: SchemaNode) -> SchemaNode:
    """Keep winner's shape, filling annotations it does not define from loser."""
    own = _defined_fields(winner, base_only=True)
    inherited = {k: v for k, v in _defined_fields(loser, base_only=True).items() if k not in own}
    return replace(winner, **inherited)


def _defined_fields(node: SchemaNode, base_only: bool = False) -> dict[str, Any]:
    """Collect the fields a node sets to something other than their default."""
    defined: dict[str, Any] = {}
    for f in fields(node):
        if f.name in ("source_path", "has_default", "default_value"):
            continue
        if base_only and f.name not in _BASE_FIELDS:
            continue
        value = getattr(node, f.name)
        default = f.default_factory() if f.default_factory is not MISSING else f.default
        if value is None or value == default:
            continue
        defined[f.name] = value

    if node.has_default:
        defined["has_default"] = True
        defined["default_value"] = node.default_value
    return defined
