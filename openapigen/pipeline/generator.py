"""
Schema generator: the registration API of the compiler.

Wires the phases together:

1. Phase 1 (Normalizer): raw fragment -> SchemaNode
2. Phase 2 (Declaration builder): SchemaNode -> named declarations
3. Phase 3 (Dependency graph): closure + topological order
4. Phase 4 (Backend): declarations -> source text
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..log import get_logger
from .analyzer.declaration_builder import DeclarationBuilder, GenerationContext
from .analyzer.dependency_graph import NameGraph
from .analyzer.ir_nodes import Declaration, DeclarationKind, collect_refs
from .backends import CodeBackend, EffectSchemaBackend, TypesBackend
from .config import GeneratorConfig, OutputKind

logger = get_logger("generator")


class SchemaGenerator:
    """
    Registers schemas and emits their declarations.

    Each instance owns its own GenerationContext (declarations, brands,
    reference memo), so independent runs never share state.
    """

    BACKENDS: dict[OutputKind, type[CodeBackend]] = {
        OutputKind.SCHEMA: EffectSchemaBackend,
        OutputKind.TYPE: TypesBackend,
    }

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()
        self.context = GenerationContext()
        self.builder = DeclarationBuilder(self.context, brand_ids=self.config.brand_ids)

    @property
    def declarations(self) -> dict[str, Declaration]:
        return self.context.declarations

    def add_schema(
        self,
        name: str,
        fragment: Any,
        context: dict[str, Any] | None = None,
        prefer_struct: bool = False,
    ) -> str:
        """
        Register a schema under a name.

        Args:
            name: Requested declaration name
            fragment: Raw schema fragment
            context: Object $ref pointers are resolved against (usually the document root)
            prefer_struct: Declare a named object as a plain struct instead of a class

        Returns:
            The name to use as a type reference (the referenced name for a root $ref)
        """
        return self.builder.add_schema(name, fragment, context, prefer_struct)

    def mark_as_error(self, name: str) -> None:
        """
        Flag a registered declaration as an error variant.

        Struct-like declarations become tagged errors: their fields move to a
        `{name}Body` struct and the declaration wraps it with `name` as tag.
        """
        declaration = self.declarations.get(name)
        if declaration is None:
            logger.warning("Cannot mark unknown declaration %s as error", name)
            return

        declaration.is_error_variant = True
        if declaration.kind not in (DeclarationKind.STRUCT, DeclarationKind.CLASS):
            return

        body = Declaration(
            name=self.context.unique_name(f"{name}Body"),
            kind=DeclarationKind.STRUCT,
            type_ref=declaration.type_ref,
            description=declaration.description,
        )
        self.context.register(body)

        declaration.kind = DeclarationKind.TAGGED_ERROR
        declaration.body_struct_name = body.name
        declaration.type_ref = None

    def is_struct(self, name: str) -> bool:
        """Check whether a registered declaration is an object with explicit properties."""
        declaration = self.declarations.get(name)
        return declaration is not None and declaration.is_struct

    def body_struct_name(self, name: str) -> str | None:
        declaration = self.declarations.get(name)
        return declaration.body_struct_name if declaration else None

    def build_graph(self) -> NameGraph:
        """Compute every declaration's dependencies and build the name graph."""
        aliases = self._aliases()
        graph = NameGraph()
        for declaration in sorted(self.declarations.values(), key=lambda d: d.order):
            depends_on = {aliases.get(n, n) for n in collect_refs(declaration.type_ref)}
            if declaration.body_struct_name:
                depends_on.add(declaration.body_struct_name)
            declaration.depends_on = depends_on
            graph.add(declaration.name, depends_on, declaration.order)
        return graph

    def closure(self, names: Iterable[str], exclude: Iterable[str] = ()) -> set[str]:
        """Names transitively required by names (excluded names are neither included nor followed)."""
        return self.build_graph().closure(names, exclude)

    def generate(
        self,
        output_kind: OutputKind | str = OutputKind.SCHEMA,
        name_filter: Iterable[str] | None = None,
        exclude: Iterable[str] | None = None,
    ) -> str:
        """
        Emit declarations.

        Args:
            output_kind: Which backend renders the declarations
            name_filter: Roots to emit (all registered declarations when None)
            exclude: Names emitted elsewhere (imported), neither emitted nor followed

        Returns:
            Source text of the dependency-closed, topologically ordered declarations
        """
        graph = self.build_graph()
        roots = self.declarations.keys() if name_filter is None else name_filter
        selected = graph.closure(roots, exclude or ())
        ordered = graph.topological_order(selected)
        logger.debug("Emitting %d of %d declarations", len(ordered), len(self.declarations))

        backend = self.BACKENDS[OutputKind.parse(output_kind)]()
        return backend.generate([self.declarations[n] for n in ordered], aliases=self._aliases())

    def _aliases(self) -> dict[str, str]:
        """References to tagged errors point at their body structs."""
        return {
            d.name: d.body_struct_name
            for d in self.declarations.values()
            if d.kind == DeclarationKind.TAGGED_ERROR and d.body_struct_name
        }
