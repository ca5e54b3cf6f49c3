"""
OpenAPI layer.

Spec walking, Swagger 2.0 conversion, client rendering and module
partitioning on top of the schema compiler.
"""

from __future__ import annotations

from .generator import GenerateResult, OpenApiGenerator
from .operations import OperationWalker, ParsedOperation, ResponseClass
from .partitioner import ModulePartitioner, TagModule
from .swagger import convert_swagger2
from .transformer import ClientTransformer

__all__ = [
    "OpenApiGenerator",
    "GenerateResult",
    "OperationWalker",
    "ParsedOperation",
    "ResponseClass",
    "ModulePartitioner",
    "TagModule",
    "convert_swagger2",
    "ClientTransformer",
]
