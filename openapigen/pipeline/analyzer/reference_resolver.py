"""
Reference resolver for $ref resolution.

Resolves same-document JSON pointers against the component context the
caller supplies. External references are unresolvable by construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote

from ...utils import identifier


@dataclass
class ResolvedRef:
    """A resolved $ref."""

    pointer: str = ""
    fragment: Any = None  # Raw schema fragment the pointer designates
    target_name: str = ""  # Declaration name derived from the last pointer segment


class ReferenceResolver:
    """Resolves local $ref pointers to raw schema fragments."""

    def resolve(self, pointer: str, context: dict[str, Any] | None) -> ResolvedRef | None:
        """
        Resolve a $ref pointer.

        Args:
            pointer: The $ref value (e.g., "#/components/schemas/Pet")
            context: Object the pointer's segments are walked through

        Returns:
            ResolvedRef, or None when the pointer is external or dangling
        """
        if not self.is_local(pointer) or context is None:
            return None

        segments = self.segments(pointer)
        current: Any = context
        for segment in segments:
            if isinstance(current, dict) and segment in current:
                current = current[segment]
            elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                return None

        if not isinstance(current, (dict, bool)):
            return None

        return ResolvedRef(
            pointer=pointer,
            fragment=current,
            target_name=self.target_name(pointer),
        )

    def is_local(self, pointer: str) -> bool:
        """Check if a pointer designates a fragment of the same document."""
        return isinstance(pointer, str) and pointer.startswith("#/")

    def segments(self, pointer: str) -> list[str]:
        """Split a local pointer into unescaped segments."""
        parts = pointer[2:].split("/")
        return [unquote(p).replace("~1", "/").replace("~0", "~") for p in parts]

    def target_name(self, pointer: str) -> str:
        """Derive the declaration name for a pointer from its last segment."""
        segments = self.segments(pointer)
        return identifier(segments[-1]) if segments else ""
