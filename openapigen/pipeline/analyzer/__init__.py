"""
Analyzer module.

Contains reference resolution, merge algebra, branding, IR nodes and the
dependency graph. The declaration builder lives in
analyzer.declaration_builder.
"""

from __future__ import annotations

from .brand_registry import BrandRegistry
from .dependency_graph import NameGraph
from .ir_nodes import (
    Check,
    CheckKind,
    Declaration,
    DeclarationKind,
    FieldDef,
    FieldWrapper,
    TypeKind,
    TypeRef,
)
from .merge import filter_nullable, merge_all_of
from .reference_resolver import ReferenceResolver, ResolvedRef

__all__ = [
    "BrandRegistry",
    "NameGraph",
    "Check",
    "CheckKind",
    "Declaration",
    "DeclarationKind",
    "FieldDef",
    "FieldWrapper",
    "TypeKind",
    "TypeRef",
    "filter_nullable",
    "merge_all_of",
    "ReferenceResolver",
    "ResolvedRef",
]
