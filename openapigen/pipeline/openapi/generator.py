"""
OpenAPI document generator: document -> ordered output modules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ...errors import UnsupportedFormatError
from ...log import get_logger
from ..config import GeneratorConfig
from ..generator import SchemaGenerator
from .operations import OperationWalker, ParsedOperation
from .partitioner import ModulePartitioner, TagModule
from .swagger import convert_swagger2, is_swagger2
from .transformer import ClientTransformer

logger = get_logger("openapi")


@dataclass
class GenerateResult:
    """Modules of one generation run, shared module first."""

    modules: dict[str, TagModule] = field(default_factory=dict)
    operations: list[ParsedOperation] = field(default_factory=list)


class OpenApiGenerator:
    """Generates client modules from an OpenAPI (or Swagger 2.0) document."""

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()

    def generate(self, document: dict[str, Any], name: str | None = None, ext: str | None = None) -> GenerateResult:
        """
        Generate the modules for a document.

        Each call uses a fresh SchemaGenerator, so runs never share state.

        Args:
            document: Parsed OpenAPI 3.x or Swagger 2.0 document
            name: Client interface name (defaults to the configured name)
            ext: Import specifier extension (defaults to the configured ext)

        Returns:
            GenerateResult with the ordered modules

        Raises:
            UnsupportedFormatError: If the document is neither OpenAPI 3.x nor convertible Swagger 2.0
        """
        document = self.prepare(document)
        name = name or self.config.name
        ext = self.config.ext if ext is None else ext

        generator = SchemaGenerator(self.config)
        operations = OperationWalker(generator, document, self.config.untagged_name).walk()
        logger.info("Parsed %d operations, %d declarations", len(operations), len(generator.declarations))

        partitioner = ModulePartitioner(generator, ClientTransformer(), self.config.common_module_name)
        modules = partitioner.partition(operations, name=name, ext=ext)
        return GenerateResult(modules=modules, operations=operations)

    def prepare(self, document: Any) -> dict[str, Any]:
        """Check the dialect, converting Swagger 2.0 to OpenAPI 3."""
        if not isinstance(document, dict):
            raise UnsupportedFormatError("The API description must be a JSON/YAML object")
        if is_swagger2(document):
            return convert_swagger2(document)
        if "openapi" not in document:
            raise UnsupportedFormatError("Unknown API description format: expected an 'openapi' or 'swagger' version key")
        version = str(document["openapi"])
        if not version.startswith("3"):
            raise UnsupportedFormatError(f"Unsupported OpenAPI version: {version!r}")
        return document
