"""openapigen

Generate Effect Schema declarations and a typed Effect HttpClient from
OpenAPI 3.x (and Swagger 2.0) documents, split into per-tag modules.
"""

__version__ = "0.3.0"

from .errors import OpenApiGenError, OutputValidationError, SpecLoadError, UnsupportedFormatError
from .pipeline import (
    AtomicWriter,
    GenerateResult,
    GeneratorConfig,
    OpenApiGenerator,
    OutputConfig,
    OutputKind,
    SchemaGenerator,
    TagModule,
)

__all__ = [
    "SchemaGenerator",
    "OpenApiGenerator",
    "GenerateResult",
    "TagModule",
    "GeneratorConfig",
    "OutputConfig",
    "OutputKind",
    "AtomicWriter",
    "OpenApiGenError",
    "UnsupportedFormatError",
    "SpecLoadError",
    "OutputValidationError",
]
