"""
Schema AST (Abstract Syntax Tree) module.

Contains the AST node definitions. The normalizer lives in
schema_ast.normalizer.
"""

from __future__ import annotations

from .nodes import (
    AllOfNode,
    AnyOfNode,
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

__all__ = [
    "SchemaNode",
    "PrimitiveNode",
    "EnumNode",
    "ConstNode",
    "RefNode",
    "AllOfNode",
    "AnyOfNode",
    "ObjectNode",
    "ArrayNode",
    "TupleNode",
    "BooleanSchemaNode",
]
