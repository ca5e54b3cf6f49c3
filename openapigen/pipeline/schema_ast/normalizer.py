"""
JSON Schema normalizer that builds AST nodes.

Phase 1 of the pipeline: turn a raw OpenAPI/JSON-Schema fragment into one
of the closed SchemaNode kinds without resolving references. Type lists and
the legacy nullable flags all collapse into SchemaNode.nullable here.
"""

from __future__ import annotations

from typing import Any

from ..analyzer.merge import filter_nullable
from .nodes import (
    AllOfNode,
    ArrayNode,
    BooleanSchemaNode,
    ConstNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaNode,
    TupleNode,
)

# Keys stripped when a multi-type fragment is split into one fragment per type
_ANNOTATION_KEYS = ("type", "nullable", "x-nullable", "default", "title", "description")

_STRING_KEYWORDS = ("minLength", "maxLength", "pattern")
_NUMERIC_KEYWORDS = ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum", "multipleOf")


class SchemaNormalizer:
    """Normalizes raw schema fragments into SchemaNode trees."""

    # Primitive type names
    PRIMITIVE_TYPES = {"string", "integer", "number", "boolean", "null"}

    def normalize(self, fragment: Any, path: str = "#") -> SchemaNode:
        """
        Normalize a schema fragment.

        Args:
            fragment: A JSON-Schema fragment (dict or boolean schema)
            path: Location of the fragment (for log messages)

        Returns:
            Appropriate SchemaNode subclass
        """
        # Boolean schemas (OpenAPI 3.1)
        if isinstance(fragment, bool):
            return BooleanSchemaNode(value=fragment, source_path=path)

        if not isinstance(fragment, dict):
            return BooleanSchemaNode(value=True, source_path=path)

        type_value = fragment.get("type")
        nullable = fragment.get("nullable") is True or fragment.get("x-nullable") is True

        # Fold ["T", "null"] into nullable T
        if isinstance(type_value, list):
            non_null = [t for t in type_value if t != "null"]
            if len(non_null) < len(type_value):
                nullable = True
            if not non_null:
                type_value = "null"
            elif len(non_null) == 1:
                type_value = non_null[0]
            else:
                type_value = non_null

        node = self._classify(fragment, type_value, path)
        return self._annotate(node, fragment, nullable, path)

    def _classify(self, fragment: dict[str, Any], type_value: Any, path: str) -> SchemaNode:
        """Pick the node kind; the first matching rule wins."""
        if "$ref" in fragment:
            return RefNode(ref_path=fragment["$ref"])

        if "const" in fragment:
            return ConstNode(value=fragment["const"])

        if "enum" in fragment and isinstance(fragment["enum"], list):
            return EnumNode(values=list(fragment["enum"]))

        if "allOf" in fragment and isinstance(fragment["allOf"], list):
            members = [self.normalize(m, f"{path}/allOf/{i}") for i, m in enumerate(fragment["allOf"])]
            return AllOfNode(members=members)

        for union_key in ("anyOf", "oneOf"):
            if union_key in fragment and isinstance(fragment[union_key], list):
                members = [self.normalize(m, f"{path}/{union_key}/{i}") for i, m in enumerate(fragment[union_key])]
                return filter_nullable(members)

        if isinstance(type_value, list):
            return self._parse_type_union(fragment, type_value, path)

        if type_value is None:
            type_value = self._infer_type(fragment)

        if type_value == "array":
            return self._parse_array_node(fragment, path)

        if type_value == "object":
            return self._parse_object_node(fragment, path)

        if type_value in self.PRIMITIVE_TYPES:
            return self._parse_primitive_node(fragment, type_value)

        # No recognizable classification: any JSON value
        return BooleanSchemaNode(value=True)

    def _annotate(self, node: SchemaNode, fragment: dict[str, Any], nullable: bool, path: str) -> SchemaNode:
        """Carry the fragment's nullable flag, default and annotations onto the node."""
        node.source_path = path
        if nullable and not (isinstance(node, PrimitiveNode) and node.type_name == "null"):
            node.nullable = True
        if "default" in fragment:
            node.has_default = True
            node.default_value = fragment["default"]
        if isinstance(fragment.get("title"), str):
            node.title = fragment["title"]
        if isinstance(fragment.get("description"), str):
            node.description = fragment["description"]
        return node

    def _infer_type(self, fragment: dict[str, Any]) -> str | None:
        """Infer a type for fragments that omit "type"."""
        if "properties" in fragment or "additionalProperties" in fragment or isinstance(fragment.get("required"), list):
            return "object"
        if "items" in fragment or "prefixItems" in fragment:
            return "array"
        if any(k in fragment for k in _STRING_KEYWORDS):
            return "string"
        if any(k in fragment for k in _NUMERIC_KEYWORDS):
            return "number"
        return None

    def _parse_type_union(self, fragment: dict[str, Any], types: list[str], path: str) -> SchemaNode:
        """Parse a list of several non-null types (e.g., ["string", "integer"])."""
        base = {k: v for k, v in fragment.items() if k not in _ANNOTATION_KEYS}
        members = [self.normalize({**base, "type": t}, f"{path}/type/{t}") for t in types]
        return filter_nullable(members)

    def _parse_array_node(self, fragment: dict[str, Any], path: str) -> SchemaNode:
        """Parse an array, a tuple (prefixItems) or a legacy tuple (items list)."""
        prefix_items = fragment.get("prefixItems")
        items = fragment.get("items", True)

        if isinstance(prefix_items, list):
            return TupleNode(
                prefix_items=[self.normalize(item, f"{path}/prefixItems/{i}") for i, item in enumerate(prefix_items)],
                rest=self._parse_items(items, f"{path}/items"),
            )

        if isinstance(items, list):
            return TupleNode(
                prefix_items=[self.normalize(item, f"{path}/items/{i}") for i, item in enumerate(items)],
                rest=self._parse_items(fragment.get("additionalItems", True), f"{path}/additionalItems"),
            )

        return ArrayNode(
            items=self._parse_items(items, f"{path}/items"),
            min_items=fragment.get("minItems"),
            max_items=fragment.get("maxItems"),
        )

    def _parse_items(self, items: Any, path: str) -> SchemaNode | bool:
        if isinstance(items, bool):
            return items
        return self.normalize(items, path)

    def _parse_object_node(self, fragment: dict[str, Any], path: str) -> ObjectNode:
        """Parse an object type node."""
        properties = fragment.get("properties")
        required = fragment.get("required")
        if not isinstance(required, list):
            required = []

        if isinstance(properties, dict) and properties:
            return ObjectNode(
                properties={name: self.normalize(prop, f"{path}/properties/{name}") for name, prop in properties.items()},
                required=[r for r in required if isinstance(r, str)],
                has_explicit_properties=True,
            )

        # Open record: string keys, values typed by additionalProperties when it is a schema
        additional = fragment.get("additionalProperties")
        value_node = None
        if isinstance(additional, dict) and additional:
            value_node = self.normalize(additional, f"{path}/additionalProperties")
        return ObjectNode(
            required=[r for r in required if isinstance(r, str)],
            additional_properties=value_node,
        )

    def _parse_primitive_node(self, fragment: dict[str, Any], type_name: str) -> PrimitiveNode:
        """Parse a primitive type node."""
        node = PrimitiveNode(type_name=type_name, format=fragment.get("format"))

        # Extract validation constraints
        if type_name == "string":
            node.min_length = fragment.get("minLength")
            node.max_length = fragment.get("maxLength")
            node.pattern = fragment.get("pattern")

        if type_name in ("integer", "number"):
            node.minimum = fragment.get("minimum")
            node.maximum = fragment.get("maximum")
            node.multiple_of = fragment.get("multipleOf")
            node.minimum, node.exclusive_minimum = self._exclusive_bound(node.minimum, fragment.get("exclusiveMinimum"))
            node.maximum, node.exclusive_maximum = self._exclusive_bound(node.maximum, fragment.get("exclusiveMaximum"))

        return node

    def _exclusive_bound(self, inclusive: Any, exclusive: Any) -> tuple[Any, Any]:
        """Fold OpenAPI 3.0 boolean exclusive flags into a numeric exclusive bound.

        Returns:
            (inclusive bound, exclusive bound)
        """
        if isinstance(exclusive, bool):
            if exclusive and inclusive is not None:
                return None, inclusive
            return inclusive, None
        return inclusive, exclusive
