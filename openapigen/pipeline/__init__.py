"""
Pipeline - OpenAPI/JSON Schema to Effect client generator.

This module provides a multi-phase architecture for compiling schemas
into dependency-ordered declarations:

1. Phase 1 (Normalizer): Raw fragment into a closed set of Schema AST nodes
2. Phase 2 (Analyzer): Resolve references, merge allOf, brand ids, build IR declarations
3. Phase 3 (Dependency graph): Dependency-closed, topologically ordered selection
4. Phase 4 (Backend): Render declarations (Effect Schema or plain types)
5. Phase 5 (OpenAPI): Walk operations, render the client, partition per-tag modules
6. Phase 6 (Writer): Validate and write modules atomically
"""

from __future__ import annotations

from .config import GeneratorConfig, OutputConfig, OutputKind
from .generator import SchemaGenerator
from .openapi import GenerateResult, OpenApiGenerator, TagModule
from .writer import AtomicWriter

__all__ = [
    "SchemaGenerator",
    "OpenApiGenerator",
    "GenerateResult",
    "TagModule",
    "GeneratorConfig",
    "OutputConfig",
    "OutputKind",
    "AtomicWriter",
]
