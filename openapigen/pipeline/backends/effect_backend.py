"""
Effect Schema backend.

Renders declarations as Effect `Schema` values (runtime validators with
derived static types).
"""

from __future__ import annotations

import json

from ..analyzer.ir_nodes import Check, CheckKind, FieldDef, FieldWrapper, TypeKind, TypeRef
from .base import CodeBackend


class EffectSchemaBackend(CodeBackend):
    """Backend for Effect Schema declarations."""

    TEMPLATE_LANG = "effect"

    PRIMITIVE_MAP = {
        "string": "Schema.String",
        "number": "Schema.Number",
        "integer": "Schema.Int",
        "boolean": "Schema.Boolean",
        "null": "Schema.Null",
    }

    CHECK_MAP = {
        CheckKind.MIN_LENGTH: "Schema.isMinLength",
        CheckKind.MAX_LENGTH: "Schema.isMaxLength",
        CheckKind.GREATER_THAN: "Schema.isGreaterThan",
        CheckKind.GREATER_THAN_OR_EQUAL_TO: "Schema.isGreaterThanOrEqualTo",
        CheckKind.LESS_THAN: "Schema.isLessThan",
        CheckKind.LESS_THAN_OR_EQUAL_TO: "Schema.isLessThanOrEqualTo",
        CheckKind.MULTIPLE_OF: "Schema.isMultipleOf",
    }

    def translate_type(self, type_ref: TypeRef) -> str:
        """Translate IR type to an Effect Schema expression."""
        expr = self._translate_base(type_ref)
        if type_ref.checks:
            expr = f"{expr}.pipe({', '.join(self._translate_check(c) for c in type_ref.checks)})"
        if type_ref.is_nullable:
            expr = f"Schema.NullOr({expr})"
        return expr

    def _translate_base(self, type_ref: TypeRef) -> str:
        kind = type_ref.kind

        if kind == TypeKind.PRIMITIVE:
            return self.PRIMITIVE_MAP.get(type_ref.name, "Schema.Json")

        if kind == TypeKind.BINARY:
            return "Schema.instanceOf(globalThis.Blob)"

        if kind == TypeKind.JSON:
            return "Schema.Json"

        if kind == TypeKind.NEVER:
            return "Schema.Never"

        if kind == TypeKind.LITERAL:
            return f"Schema.Literal({self.format_literal(type_ref.literal_values[0])})"

        if kind == TypeKind.LITERALS:
            values = ", ".join(self.format_literal(v) for v in type_ref.literal_values)
            return f"Schema.Literals([{values}])"

        if kind == TypeKind.ARRAY:
            wrapper = "Schema.NonEmptyArray" if type_ref.non_empty else "Schema.Array"
            return f"{wrapper}({self.translate_type(type_ref.type_args[0])})"

        if kind == TypeKind.TUPLE:
            elements = f"Schema.Tuple([{', '.join(self.translate_type(t) for t in type_ref.type_args)}])"
            if type_ref.rest is None:
                return elements
            return f"Schema.TupleWithRest({elements}, [{self.translate_type(type_ref.rest)}])"

        if kind == TypeKind.RECORD:
            return f"Schema.Record(Schema.String, {self.translate_type(type_ref.type_args[0])})"

        if kind == TypeKind.STRUCT:
            fields = ", ".join(f"{json.dumps(f.name, ensure_ascii=False)}: {self.translate_field(f)}" for f in type_ref.fields)
            return f"Schema.Struct({{ {fields} }})" if fields else "Schema.Struct({})"

        if kind == TypeKind.UNION:
            return f"Schema.Union([{', '.join(self.translate_type(t) for t in type_ref.type_args)}])"

        if kind == TypeKind.REF:
            name = self.reference(type_ref.name)
            if name in self.deferred:
                return f"Schema.suspend(() => {name})"
            return name

        # Fallback
        return "Schema.Json"

    def _translate_check(self, check: Check) -> str:
        if check.kind == CheckKind.UUID:
            return "Schema.check(Schema.isUUID(undefined))"
        if check.kind == CheckKind.PATTERN:
            return f"Schema.check(Schema.isPattern(new RegExp({json.dumps(check.value, ensure_ascii=False)})))"
        return f"Schema.check({self.CHECK_MAP[check.kind]}({self.format_literal(check.value)}))"

    def translate_field(self, field: FieldDef) -> str:
        """Wrap a field type: nullability is already part of the type, presence/default goes outside."""
        expr = self.translate_type(field.type_ref)

        if field.wrapper == FieldWrapper.DECODING_DEFAULT:
            return f"{expr}.pipe(Schema.withDecodingDefault(() => {self.format_literal(field.default_value)}))"

        if field.wrapper == FieldWrapper.CONSTRUCTOR_DEFAULT:
            return f"{expr}.pipe(Schema.withConstructorDefault(() => Option.some({self.format_literal(field.default_value)})))"

        if field.wrapper == FieldWrapper.OPTIONAL:
            return f"Schema.optionalKey({expr})"

        return expr
