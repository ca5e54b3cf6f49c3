"""
Base class for declaration rendering backends.

Defines the interface that all target-syntax backends must implement.
Backends are the only place where target-language syntax is produced.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import jinja2

from ...utils import to_comment
from ..analyzer.ir_nodes import Declaration, DeclarationKind, FieldDef, TypeRef

TEMPLATE_ROOT = Path(__file__).parent.parent.parent / "templates"


def template_environment(template_lang: str) -> jinja2.Environment:
    """Create the Jinja2 environment for one template directory."""
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_ROOT / template_lang)),
        lstrip_blocks=True,
        trim_blocks=True,
    )


class CodeBackend(ABC):
    """Abstract base class for declaration rendering backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension of the templates
    FILE_EXTENSION: str = "ts"

    def __init__(self):
        self._setup_templates()

        # Names referenced through another declaration (tagged error -> body struct)
        self.aliases: dict[str, str] = {}

        # Names declared later in the current output (forward references)
        self.deferred: set[str] = set()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        self.jinja_env = template_environment(self.TEMPLATE_LANG)
        self.declaration_template = self.jinja_env.get_template(f"declaration.{self.FILE_EXTENSION}.jinja2")

    def generate(self, declarations: Iterable[Declaration], aliases: dict[str, str] | None = None) -> str:
        """
        Render declarations in the given order.

        Args:
            declarations: Declarations, already dependency-ordered
            aliases: Names whose references must point at another declaration

        Returns:
            Generated source (empty string when there is nothing to emit)
        """
        declarations = list(declarations)
        self.aliases = dict(aliases or {})
        self.deferred = {d.name for d in declarations}

        blocks = []
        for declaration in declarations:
            blocks.append(self.render_declaration(declaration).strip("\n"))
            self.deferred.discard(declaration.name)
        return "\n\n".join(blocks)

    def render_declaration(self, declaration: Declaration) -> str:
        return self.declaration_template.render(**self._prepare_declaration_context(declaration))

    @abstractmethod
    def translate_type(self, type_ref: TypeRef) -> str:
        """
        Translate an IR type to a target-language expression.

        Args:
            type_ref: The type reference

        Returns:
            Target-language expression string
        """

    @abstractmethod
    def translate_field(self, field: FieldDef) -> str:
        """
        Translate a struct field, including its presence/default wrapper.

        Args:
            field: The field definition

        Returns:
            Target-language expression string
        """

    def format_literal(self, value: Any) -> str:
        """Format a JSON value as a target-language literal."""
        return json.dumps(value, ensure_ascii=False)

    def reference(self, name: str) -> str:
        """Resolve a referenced name through the alias table."""
        return self.aliases.get(name, name)

    def _prepare_declaration_context(self, declaration: Declaration) -> dict[str, Any]:
        """
        Prepare the template context for a declaration.

        Args:
            declaration: The declaration

        Returns:
            Dictionary of template variables
        """
        context: dict[str, Any] = {
            "NAME": declaration.name,
            "KIND": declaration.kind.value,
            "COMMENT": to_comment(declaration.description),
            "BODY": declaration.body_struct_name,
            "FIELDS": [],
            "EXPRESSION": "",
        }

        if declaration.kind in (DeclarationKind.STRUCT, DeclarationKind.CLASS):
            fields = declaration.type_ref.fields if declaration.type_ref else []
            context["FIELDS"] = [self._prepare_field_context(f) for f in fields]
        elif declaration.kind != DeclarationKind.TAGGED_ERROR and declaration.type_ref is not None:
            context["EXPRESSION"] = self.translate_type(declaration.type_ref)

        return context

    def _prepare_field_context(self, field: FieldDef) -> dict[str, Any]:
        return {
            "key": json.dumps(field.name, ensure_ascii=False),
            "type": self.translate_field(field),
            "comment": to_comment(field.description),
        }
