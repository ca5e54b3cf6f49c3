"""
Configuration for the client generator pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutputKind(Enum):
    """What the declaration renderer produces."""

    SCHEMA = "Schema"  # runtime validation schemas
    TYPE = "Type"  # plain TypeScript types

    @staticmethod
    def parse(value: str | OutputKind) -> OutputKind:
        if isinstance(value, OutputKind):
            return value
        for kind in OutputKind:
            if kind.value.lower() == str(value).lower():
                return kind
        raise ValueError(f"Unknown output kind: {value!r}")


@dataclass
class OutputConfig:
    """Options for writing generated modules."""

    # Refuse to write empty or structurally broken modules
    validate_before_write: bool = True

    # Write through a temp file + rename
    atomic_write: bool = True


@dataclass
class GeneratorConfig:
    """Configuration options for client generation."""

    # Client interface name
    name: str = "Client"

    # Extension used in relative import specifiers (".js", ".ts" or "")
    ext: str = ".js"

    # Declaration flavour for the standalone schema output
    output_kind: OutputKind = OutputKind.SCHEMA

    # Brand identifier-shaped properties (id, userId, user_id, ...)
    brand_ids: bool = True

    # Module holding declarations shared by several tags
    common_module_name: str = "_common"

    # Group for operations without tags
    untagged_name: str = "_untagged"

    # Add generation comment at top of each file
    add_generation_comment: bool = True

    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                for ok, ov in v.items():
                    if hasattr(config.output, ok):
                        setattr(config.output, ok, ov)
            elif k == "output_kind":
                config.output_kind = OutputKind.parse(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "name": self.name,
            "ext": self.ext,
            "output_kind": self.output_kind.value,
            "brand_ids": self.brand_ids,
            "common_module_name": self.common_module_name,
            "untagged_name": self.untagged_name,
            "add_generation_comment": self.add_generation_comment,
            "output": {
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
