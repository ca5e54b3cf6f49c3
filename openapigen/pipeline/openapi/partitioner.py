"""
Module partitioner: splits declarations across per-tag output modules.

Names used (transitively) by two or more tag groups move to a shared
module; every tag module emits only its exclusive names and imports and
re-exports the shared ones it needs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ...log import get_logger
from ...utils import to_kebab_case
from ..config import OutputKind
from ..generator import SchemaGenerator
from .operations import ParsedOperation
from .transformer import ClientTransformer

logger = get_logger("partitioner")


@dataclass
class TagModule:
    """One output module."""

    tag_name: str = ""
    source: str = ""

    # Declarations the module uses (transitively), whether emitted here or imported
    schema_names: set[str] = field(default_factory=set)

    operations: list[ParsedOperation] = field(default_factory=list)

    # Shared names imported from the common module and re-exported
    common_imports: list[str] = field(default_factory=list)

    @property
    def file_name(self) -> str:
        """File stem of the module (the shared module keeps its name verbatim)."""
        if self.tag_name.startswith("_"):
            return self.tag_name
        return to_kebab_case(self.tag_name) or self.tag_name


def group_by_tag(operations: list[ParsedOperation]) -> dict[str, list[ParsedOperation]]:
    """Group operations by primary tag, keeping first-seen tag order."""
    groups: dict[str, list[ParsedOperation]] = {}
    for op in operations:
        groups.setdefault(op.primary_tag, []).append(op)
    return groups


class ModulePartitioner:
    """Builds the shared module and the per-tag modules."""

    def __init__(
        self,
        generator: SchemaGenerator,
        transformer: ClientTransformer | None = None,
        common_module_name: str = "_common",
    ):
        self.generator = generator
        self.transformer = transformer or ClientTransformer()
        self.common_module_name = common_module_name

    def shared_names(self, tag_names: dict[str, set[str]]) -> set[str]:
        """Names referenced by two or more tag groups (never any with a single group)."""
        if len(tag_names) < 2:
            return set()
        counts: dict[str, int] = {}
        for names in tag_names.values():
            for name in names:
                counts[name] = counts.get(name, 0) + 1
        return {name for name, count in counts.items() if count > 1}

    def partition(self, operations: list[ParsedOperation], name: str = "Client", ext: str = ".js") -> dict[str, TagModule]:
        """
        Partition operations and their declarations into modules.

        Args:
            operations: Every parsed operation
            name: Client interface name
            ext: Extension used in relative import specifiers

        Returns:
            Ordered mapping module name -> TagModule (shared module first when present)
        """
        groups = group_by_tag(operations)

        # Dependency-closed names per tag (covers transitive and error-body names)
        tag_names = {
            tag: self.generator.closure(name for op in ops for name in op.schema_names) for tag, ops in groups.items()
        }
        common = self.shared_names(tag_names)
        for shared in common:
            self.generator.declarations[shared].is_shared = True

        modules: dict[str, TagModule] = {}
        if common:
            logger.info("Extracting %d shared declarations into %s", len(common), self.common_module_name)
            schemas = self.generator.generate(OutputKind.SCHEMA, common)
            modules[self.common_module_name] = TagModule(
                tag_name=self.common_module_name,
                source=self._join([self.transformer.schema_imports(), schemas]),
                schema_names=common,
            )

        for tag, ops in groups.items():
            names = tag_names[tag]
            imported = self._ordered(names & common)
            schemas = self.generator.generate(OutputKind.SCHEMA, names - common, exclude=common)

            parts = [self.transformer.imports(streaming=any(op.stream_schema for op in ops))]
            if imported:
                specifier = f"./{self.common_module_name}{ext}"
                parts.append(f'import {{ {", ".join(imported)} }} from "{specifier}"\nexport {{ {", ".join(imported)} }}')
            parts.append(schemas)
            parts.append(self.transformer.to_implementation(name, ops))
            parts.append(self.transformer.to_types(name, ops))

            modules[tag] = TagModule(
                tag_name=tag,
                source=self._join(parts),
                schema_names=names,
                operations=ops,
                common_imports=imported,
            )
            logger.debug("Module %s: %d operations, %d declarations", tag, len(ops), len(names))

        return modules

    def _ordered(self, names: set[str]) -> list[str]:
        declarations = self.generator.declarations
        return sorted(names, key=lambda n: (declarations[n].order, n))

    def _join(self, parts: list[str]) -> str:
        return "\n\n".join(p for p in parts if p) + "\n"
