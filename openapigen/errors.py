"""
Exception types raised by the generator.

Unresolvable references and malformed allOf members are not errors:
they are recovered locally while building declarations.
"""

from __future__ import annotations


class OpenApiGenError(Exception):
    """Base class for fatal generator failures."""


class UnsupportedFormatError(OpenApiGenError):
    """The input document is not OpenAPI 3.x and could not be converted to it."""


class SpecLoadError(OpenApiGenError):
    """The spec source could not be read or parsed."""


class OutputValidationError(OpenApiGenError):
    """Generated output failed validation before it was written."""
