"""
Declaration builder that turns normalized schema nodes into IR declarations.

Phase 2 of the pipeline: resolve references (registering their targets
first), merge allOf, brand identifier-shaped properties and build the
structured type expressions the backends render.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ...log import get_logger
from ...utils import identifier, non_empty_string
from ..schema_ast.nodes import (
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
    is_struct,
)
from ..schema_ast.normalizer import SchemaNormalizer
from .brand_registry import BrandRegistry
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
from .merge import flatten_all_of, single_ref
from .reference_resolver import ReferenceResolver

logger = get_logger(__name__.rsplit(".", 1)[-1])

# Primitive kinds eligible for branding
_BRANDABLE = ("string", "integer")


@dataclass
class GenerationContext:
    """Mutable state of one generator instance."""

    declarations: dict[str, Declaration] = field(default_factory=dict)
    brands: BrandRegistry = field(default_factory=BrandRegistry)

    # $ref pointer -> declaration name
    ref_names: dict[str, str] = field(default_factory=dict)

    _counter: int = 0

    def unique_name(self, name: str) -> str:
        """Return name, or name with the smallest numeric suffix that is still free."""
        base = name or "Schema"
        candidate = base
        suffix = 2
        while candidate in self.declarations:
            candidate = f"{base}{suffix}"
            suffix += 1
        return candidate

    def register(self, declaration: Declaration) -> Declaration:
        """Register a declaration, stamping its registration order."""
        declaration.order = self._counter
        self._counter += 1
        self.declarations[declaration.name] = declaration
        return declaration

    def reserve(self, name: str) -> Declaration:
        """Register a placeholder so references to name resolve before its body is built."""
        return self.register(Declaration(name=name, type_ref=TypeRef(kind=TypeKind.JSON)))


def field_wrapper(required: bool, nullable: bool, has_default: bool, default: Any) -> tuple[FieldWrapper, Any]:
    """
    Pick the presence/default wrapper of a property.

    Args:
        required: Whether the key is listed in "required"
        nullable: Whether the property type admits null
        has_default: Whether the property declares a default
        default: The declared default

    Returns:
        (wrapper, default value the wrapper applies)
    """
    if not required:
        return FieldWrapper.OPTIONAL, None

    if nullable:
        if has_default and default is None:
            return FieldWrapper.DECODING_DEFAULT, None
        if not has_default:
            return FieldWrapper.NONE, None
        # Nullable with a non-null default: the default still applies on construction
        return FieldWrapper.CONSTRUCTOR_DEFAULT, default

    if has_default and default is not None:
        return FieldWrapper.CONSTRUCTOR_DEFAULT, default
    return FieldWrapper.NONE, None


class DeclarationBuilder:
    """Builds declarations from schema fragments."""

    def __init__(self, context: GenerationContext, brand_ids: bool = True):
        """
        Initialize the builder.

        Args:
            context: Declarations, brands and reference memo of the run
            brand_ids: Whether identifier-shaped properties get brands
        """
        self.context = context
        self.brand_ids = brand_ids
        self.normalizer = SchemaNormalizer()
        self.resolver = ReferenceResolver()

        # Component context of the current add_schema call
        self._components: dict[str, Any] | None = None

    def add_schema(
        self,
        name: str,
        fragment: Any,
        components: dict[str, Any] | None = None,
        prefer_struct: bool = False,
    ) -> str:
        """
        Register a schema under a name.

        A non-nullable root $ref registers (or reuses) the referenced
        declaration and returns its name instead of creating an alias.

        Args:
            name: Requested declaration name
            fragment: Raw schema fragment
            components: Object $ref pointers are resolved against
            prefer_struct: Declare named objects as plain structs instead of classes

        Returns:
            The name to use when referring to the schema
        """
        self._components = components
        node = self.normalizer.normalize(fragment, f"#/{name}")

        ref = self._as_ref(node)
        if ref is not None and not node.nullable:
            target = self._ref_name(ref.ref_path)
            if target is not None:
                return target
            logger.warning("Unresolvable reference %s for %s, declaring it as any JSON value", ref.ref_path, name)
            declaration = self.context.reserve(self.context.unique_name(name))
            return declaration.name

        declaration = self.context.reserve(self.context.unique_name(name))
        self._fill(declaration, node, prefer_struct)
        return declaration.name

    def _as_ref(self, node: SchemaNode) -> RefNode | None:
        if isinstance(node, RefNode):
            return node
        if isinstance(node, AllOfNode):
            return single_ref(node)
        return None

    def _fill(self, declaration: Declaration, node: SchemaNode, prefer_struct: bool) -> None:
        """Build the body of a reserved declaration."""
        if isinstance(node, AllOfNode) and single_ref(node) is None:
            node = flatten_all_of(node, self._lookup)

        declaration.description = non_empty_string(node.description)

        if is_struct(node) and not node.nullable:
            declaration.kind = DeclarationKind.STRUCT if prefer_struct else DeclarationKind.CLASS
            declaration.type_ref = TypeRef(kind=TypeKind.STRUCT, fields=self._fields(node, declaration.name))
            return

        declaration.kind = DeclarationKind.SCHEMA
        type_ref = self._expr(node, declaration.name)
        if type_ref is None:
            logger.warning("Unresolvable schema for %s, declaring it as any JSON value", declaration.name)
            type_ref = TypeRef(kind=TypeKind.JSON)
        declaration.type_ref = type_ref

    def _lookup(self, ref: RefNode) -> SchemaNode | None:
        """Resolve a reference to its normalized target (used while merging allOf)."""
        resolved = self.resolver.resolve(ref.ref_path, self._components)
        if resolved is None:
            return None
        return self.normalizer.normalize(resolved.fragment, ref.ref_path)

    def _ref_name(self, pointer: str) -> str | None:
        """
        Return the declaration name a pointer resolves to.

        The target is registered (name first, body second) the first time a
        pointer is seen, so cyclic references resolve to the reserved name.
        """
        if pointer in self.context.ref_names:
            return self.context.ref_names[pointer]

        resolved = self.resolver.resolve(pointer, self._components)
        if resolved is None:
            return None

        declaration = self.context.reserve(self.context.unique_name(resolved.target_name))
        self.context.ref_names[pointer] = declaration.name
        logger.debug("Registering %s for %s", declaration.name, pointer)

        node = self.normalizer.normalize(resolved.fragment, pointer)
        self._fill(declaration, node, prefer_struct=False)
        return declaration.name

    def _expr(self, node: SchemaNode, scope: str) -> TypeRef | None:
        """
        Build the type expression of a node.

        Args:
            node: The normalized node
            scope: Name used to qualify brands of nested inline objects

        Returns:
            TypeRef, or None when the node cannot be represented (unresolvable reference)
        """
        type_ref = self._expr_kind(node, scope)
        if type_ref is not None and node.nullable:
            type_ref.is_nullable = True
        return type_ref

    def _expr_kind(self, node: SchemaNode, scope: str) -> TypeRef | None:
        if isinstance(node, BooleanSchemaNode):
            return TypeRef(kind=TypeKind.JSON if node.value else TypeKind.NEVER)

        if isinstance(node, RefNode):
            name = self._ref_name(node.ref_path)
            if name is None:
                return None
            return TypeRef(kind=TypeKind.REF, name=name)

        if isinstance(node, PrimitiveNode):
            return self._primitive_expr(node)

        if isinstance(node, EnumNode):
            return TypeRef(kind=TypeKind.LITERALS, literal_values=list(node.values))

        if isinstance(node, ConstNode):
            return TypeRef(kind=TypeKind.LITERAL, literal_values=[node.value])

        if isinstance(node, AllOfNode):
            ref = single_ref(node)
            if ref is not None:
                return self._expr(ref, scope)
            return self._expr(flatten_all_of(node, self._lookup), scope)

        if isinstance(node, AnyOfNode):
            return self._union_expr(node, scope)

        if isinstance(node, ObjectNode):
            if node.has_explicit_properties:
                return TypeRef(kind=TypeKind.STRUCT, fields=self._fields(node, scope))
            value = None
            if node.additional_properties is not None:
                value = self._expr(node.additional_properties, scope)
            return TypeRef(kind=TypeKind.RECORD, type_args=[value or TypeRef(kind=TypeKind.JSON)])

        if isinstance(node, ArrayNode):
            return self._array_expr(node, scope)

        if isinstance(node, TupleNode):
            return self._tuple_expr(node, scope)

        # Fallback
        return TypeRef(kind=TypeKind.JSON)

    def _primitive_expr(self, node: PrimitiveNode) -> TypeRef:
        """Build a primitive with its checks in their fixed order."""
        if node.type_name == "string" and node.format == "binary":
            return TypeRef(kind=TypeKind.BINARY)

        checks: list[Check] = []
        if node.type_name == "string":
            if node.format == "uuid":
                checks.append(Check(CheckKind.UUID))
            if node.min_length is not None:
                checks.append(Check(CheckKind.MIN_LENGTH, node.min_length))
            if node.max_length is not None:
                checks.append(Check(CheckKind.MAX_LENGTH, node.max_length))
            if node.pattern is not None:
                checks.append(Check(CheckKind.PATTERN, node.pattern))

        elif node.type_name in ("integer", "number"):
            if node.exclusive_minimum is not None:
                checks.append(Check(CheckKind.GREATER_THAN, node.exclusive_minimum))
            if node.minimum is not None:
                checks.append(Check(CheckKind.GREATER_THAN_OR_EQUAL_TO, node.minimum))
            if node.exclusive_maximum is not None:
                checks.append(Check(CheckKind.LESS_THAN, node.exclusive_maximum))
            if node.maximum is not None:
                checks.append(Check(CheckKind.LESS_THAN_OR_EQUAL_TO, node.maximum))
            if node.multiple_of is not None:
                checks.append(Check(CheckKind.MULTIPLE_OF, node.multiple_of))

        return TypeRef(kind=TypeKind.PRIMITIVE, name=node.type_name, checks=checks)

    def _union_expr(self, node: AnyOfNode, scope: str) -> TypeRef | None:
        members = [m for m in (self._expr(member, scope) for member in node.members) if m is not None]
        if not members:
            return None
        if len(members) == 1:
            return members[0]
        return TypeRef(kind=TypeKind.UNION, type_args=members)

    def _items_expr(self, items: SchemaNode | bool, scope: str) -> TypeRef | None:
        if items is True:
            return TypeRef(kind=TypeKind.JSON)
        if items is False:
            return TypeRef(kind=TypeKind.NEVER)
        return self._expr(items, scope)

    def _array_expr(self, node: ArrayNode, scope: str) -> TypeRef | None:
        item = self._items_expr(node.items, scope)
        if item is None:
            return None

        type_ref = TypeRef(kind=TypeKind.ARRAY, type_args=[item])
        if node.min_items is not None and node.min_items >= 1:
            type_ref.non_empty = True
        if node.max_items is not None:
            type_ref.checks.append(Check(CheckKind.MAX_LENGTH, node.max_items))
        return type_ref

    def _tuple_expr(self, node: TupleNode, scope: str) -> TypeRef:
        # Unresolvable elements keep their position as any JSON value
        elements = [self._expr(item, scope) or TypeRef(kind=TypeKind.JSON) for item in node.prefix_items]
        rest = None
        if node.rest is not False:
            rest = self._items_expr(node.rest, scope) or TypeRef(kind=TypeKind.JSON)
        return TypeRef(kind=TypeKind.TUPLE, type_args=elements, rest=rest)

    def _fields(self, node: ObjectNode, parent_name: str) -> list[FieldDef]:
        """Build the fields of an object with explicit properties."""
        fields: list[FieldDef] = []
        required = set(node.required)

        for key, prop in node.properties.items():
            type_ref = self._expr(prop, f"{parent_name}{identifier(key)}")
            if type_ref is None:
                logger.warning("Dropping property %r of %s: unresolvable reference", key, parent_name)
                continue

            type_ref = self._brand(key, prop, type_ref, parent_name)
            wrapper, default = field_wrapper(key in required, type_ref.is_nullable, prop.has_default, prop.default_value)
            fields.append(
                FieldDef(
                    name=key,
                    type_ref=type_ref,
                    wrapper=wrapper,
                    default_value=default,
                    description=non_empty_string(prop.description),
                )
            )
        return fields

    def _brand(self, key: str, node: SchemaNode, type_ref: TypeRef, parent_name: str) -> TypeRef:
        """Replace an identifier-shaped primitive by a reference to its brand declaration."""
        if not self.brand_ids or not isinstance(node, PrimitiveNode):
            return type_ref
        if node.type_name not in _BRANDABLE or type_ref.kind != TypeKind.PRIMITIVE:
            return type_ref

        brand_name = self.context.brands.brand_for(key, parent_name)
        if brand_name is None:
            return type_ref

        existing = self.context.declarations.get(brand_name)
        if existing is not None and existing.kind != DeclarationKind.BRAND:
            logger.debug("Not branding %s.%s: %s is already declared", parent_name, key, brand_name)
            return type_ref

        if self.context.brands.claim(brand_name):
            checks = [Check(CheckKind.UUID)] if node.format == "uuid" else []
            base = TypeRef(kind=TypeKind.PRIMITIVE, name=node.type_name, checks=checks)
            self.context.register(Declaration(name=brand_name, kind=DeclarationKind.BRAND, type_ref=base))

        return TypeRef(kind=TypeKind.REF, name=brand_name, is_nullable=type_ref.is_nullable)
