"""
Declaration rendering backends.

Contains the target-syntax renderers selected by OutputKind.
"""

from __future__ import annotations

from .base import CodeBackend
from .effect_backend import EffectSchemaBackend
from .types_backend import TypesBackend

__all__ = [
    "CodeBackend",
    "EffectSchemaBackend",
    "TypesBackend",
]
