"""
Plain TypeScript types backend.

Renders declarations as type aliases and interfaces without any runtime
validation code.
"""

from __future__ import annotations

import json

from ..analyzer.ir_nodes import FieldDef, FieldWrapper, TypeKind, TypeRef
from .base import CodeBackend


class TypesBackend(CodeBackend):
    """Backend for plain TypeScript types."""

    TEMPLATE_LANG = "types"

    PRIMITIVE_MAP = {
        "string": "string",
        "number": "number",
        "integer": "number",
        "boolean": "boolean",
        "null": "null",
    }

    def translate_type(self, type_ref: TypeRef) -> str:
        """Translate IR type to a TypeScript type (checks have no static counterpart)."""
        expr = self._translate_base(type_ref)
        if type_ref.is_nullable:
            expr = f"{expr} | null"
        return expr

    def _translate_member(self, type_ref: TypeRef) -> str:
        """Translate a type used inside an array, union or intersection (parenthesized if needed)."""
        expr = self.translate_type(type_ref)
        if " | " in expr or " & " in expr:
            return f"({expr})"
        return expr

    def _translate_base(self, type_ref: TypeRef) -> str:
        kind = type_ref.kind

        if kind == TypeKind.PRIMITIVE:
            return self.PRIMITIVE_MAP.get(type_ref.name, "unknown")

        if kind == TypeKind.BINARY:
            return "Blob"

        if kind == TypeKind.JSON:
            return "unknown"

        if kind == TypeKind.NEVER:
            return "never"

        if kind in (TypeKind.LITERAL, TypeKind.LITERALS):
            return " | ".join(self.format_literal(v) for v in type_ref.literal_values) or "never"

        if kind == TypeKind.ARRAY:
            item = self.translate_type(type_ref.type_args[0])
            if type_ref.non_empty:
                return f"readonly [{item}, ...Array<{item}>]"
            return f"ReadonlyArray<{item}>"

        if kind == TypeKind.TUPLE:
            elements = [self.translate_type(t) for t in type_ref.type_args]
            if type_ref.rest is not None:
                elements.append(f"...Array<{self.translate_type(type_ref.rest)}>")
            return f"readonly [{', '.join(elements)}]"

        if kind == TypeKind.RECORD:
            return f"Record<string, {self.translate_type(type_ref.type_args[0])}>"

        if kind == TypeKind.STRUCT:
            if not type_ref.fields:
                return "{}"
            members = "; ".join(self._member(f) for f in type_ref.fields)
            return f"{{ {members} }}"

        if kind == TypeKind.UNION:
            return " | ".join(self._translate_member(t) for t in type_ref.type_args)

        if kind == TypeKind.REF:
            return self.reference(type_ref.name)

        # Fallback
        return "unknown"

    def translate_field(self, field: FieldDef) -> str:
        return self.translate_type(field.type_ref)

    def _member(self, field: FieldDef) -> str:
        """Render `readonly "key"?: Type` for an interface or inline object member."""
        optional = "?" if field.wrapper == FieldWrapper.OPTIONAL else ""
        return f"readonly {json.dumps(field.name, ensure_ascii=False)}{optional}: {self.translate_field(field)}"

    def _prepare_field_context(self, field: FieldDef) -> dict:
        context = super()._prepare_field_context(field)
        context["member"] = self._member(field)
        return context
