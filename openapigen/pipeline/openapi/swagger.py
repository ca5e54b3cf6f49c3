"""
Swagger 2.0 to OpenAPI 3 conversion.

Covers what the operation walker consumes: definitions, parameters (body and
formData become request bodies), responses and media types. Everything
else is carried over unchanged.
"""

from __future__ import annotations

import copy
from typing import Any

from ...errors import UnsupportedFormatError
from ...log import get_logger

logger = get_logger("swagger")

_REF_PREFIXES = {
    "#/definitions/": "#/components/schemas/",
    "#/parameters/": "#/components/parameters/",
    "#/responses/": "#/components/responses/",
}

_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")

# Parameter keys that describe the value rather than the parameter
_SCHEMA_KEYS = (
    "type",
    "format",
    "items",
    "enum",
    "default",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "minLength",
    "maxLength",
    "pattern",
    "minItems",
    "maxItems",
    "multipleOf",
    "x-nullable",
)


def is_swagger2(document: Any) -> bool:
    return isinstance(document, dict) and "swagger" in document


def convert_swagger2(document: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a Swagger 2.0 document to OpenAPI 3.0.

    Args:
        document: Parsed Swagger 2.0 document

    Returns:
        A new OpenAPI 3.0 document (the input is not modified)

    Raises:
        UnsupportedFormatError: If the document cannot be converted
    """
    version = str(document.get("swagger", ""))
    if not version.startswith("2"):
        raise UnsupportedFormatError(f"Unsupported Swagger version: {version!r}")

    paths = document.get("paths", {})
    if not isinstance(paths, dict):
        raise UnsupportedFormatError("Swagger document has no valid 'paths' object")

    logger.info("Converting Swagger %s document to OpenAPI 3", version)
    try:
        return _SwaggerConverter(document).convert()
    except (AttributeError, KeyError, TypeError) as e:
        raise UnsupportedFormatError(f"Could not convert Swagger 2.0 document: {e}") from e


class _SwaggerConverter:
    def __init__(self, document: dict[str, Any]):
        self.source = _rewrite_refs(copy.deepcopy(document))
        self.consumes = self.source.get("consumes") or ["application/json"]
        self.produces = self.source.get("produces") or ["application/json"]

        # Global body parameters become request bodies
        self.body_parameters: dict[str, dict[str, Any]] = {}

    def convert(self) -> dict[str, Any]:
        source = self.source
        result: dict[str, Any] = {
            "openapi": "3.0.3",
            "info": source.get("info", {"title": "", "version": ""}),
        }

        servers = self._servers()
        if servers:
            result["servers"] = servers
        if "tags" in source:
            result["tags"] = source["tags"]
        if "security" in source:
            result["security"] = source["security"]

        components: dict[str, Any] = {"schemas": {k: _convert_schema(v) for k, v in source.get("definitions", {}).items()}}

        parameters = {}
        for name, parameter in source.get("parameters", {}).items():
            if parameter.get("in") == "body":
                self.body_parameters[f"#/components/parameters/{name}"] = parameter
            else:
                parameters[name] = self._parameter(parameter)
        if parameters:
            components["parameters"] = parameters

        responses = {name: self._response(r, self.produces) for name, r in source.get("responses", {}).items()}
        if responses:
            components["responses"] = responses

        if "securityDefinitions" in source:
            components["securitySchemes"] = source["securityDefinitions"]

        result["components"] = components
        result["paths"] = {path: self._path_item(item) for path, item in source.get("paths", {}).items()}
        return result

    def _servers(self) -> list[dict[str, str]]:
        host = self.source.get("host")
        base_path = self.source.get("basePath", "")
        if not host:
            return [{"url": base_path}] if base_path else []
        schemes = self.source.get("schemes") or ["https"]
        return [{"url": f"{scheme}://{host}{base_path}"} for scheme in schemes]

    def _path_item(self, item: dict[str, Any]) -> dict[str, Any]:
        shared = item.get("parameters", [])
        converted: dict[str, Any] = {}
        for key, value in item.items():
            if key in _METHODS:
                converted[key] = self._operation(value, shared)
            elif key != "parameters":
                converted[key] = value
        return converted

    def _operation(self, operation: dict[str, Any], shared: list[dict[str, Any]]) -> dict[str, Any]:
        consumes = operation.get("consumes") or self.consumes
        produces = operation.get("produces") or self.produces

        converted = {k: v for k, v in operation.items() if k not in ("parameters", "responses", "consumes", "produces")}

        parameters = []
        form_fields: dict[str, Any] = {}
        form_required: list[str] = []
        for parameter in [*shared, *operation.get("parameters", [])]:
            ref = parameter.get("$ref")
            if ref in self.body_parameters:
                parameter = self.body_parameters[ref]

            location = parameter.get("in")
            if location == "body":
                converted["requestBody"] = {
                    "content": {ct: {"schema": _convert_schema(parameter.get("schema", {}))} for ct in consumes},
                    "required": parameter.get("required", False),
                }
            elif location == "formData":
                form_fields[parameter["name"]] = self._parameter_schema(parameter)
                if parameter.get("required"):
                    form_required.append(parameter["name"])
            elif "$ref" in parameter:
                parameters.append(parameter)
            else:
                parameters.append(self._parameter(parameter))

        if form_fields:
            media_type = "multipart/form-data" if "multipart/form-data" in consumes else "application/x-www-form-urlencoded"
            schema: dict[str, Any] = {"type": "object", "properties": form_fields}
            if form_required:
                schema["required"] = form_required
            converted["requestBody"] = {"content": {media_type: {"schema": schema}}}

        if parameters:
            converted["parameters"] = parameters

        converted["responses"] = {
            str(status): self._response(response, produces) for status, response in operation.get("responses", {}).items()
        }
        return converted

    def _parameter(self, parameter: dict[str, Any]) -> dict[str, Any]:
        converted = {k: parameter[k] for k in ("name", "in", "description", "required") if k in parameter}
        converted["schema"] = self._parameter_schema(parameter)
        return converted

    def _parameter_schema(self, parameter: dict[str, Any]) -> dict[str, Any]:
        return _convert_schema({k: parameter[k] for k in _SCHEMA_KEYS if k in parameter})

    def _response(self, response: dict[str, Any], produces: list[str]) -> dict[str, Any]:
        if "$ref" in response:
            return response
        converted = {"description": response.get("description", "")}
        if "schema" in response:
            schema = _convert_schema(response["schema"])
            converted["content"] = {ct: {"schema": schema} for ct in produces}
        return converted


def _rewrite_refs(value: Any) -> Any:
    """Point Swagger 2.0 $refs at their OpenAPI 3 component locations."""
    if isinstance(value, dict):
        rewritten = {}
        for key, item in value.items():
            if key == "$ref" and isinstance(item, str):
                for old, new in _REF_PREFIXES.items():
                    if item.startswith(old):
                        item = new + item[len(old) :]
                        break
                rewritten[key] = item
            else:
                rewritten[key] = _rewrite_refs(item)
        return rewritten
    if isinstance(value, list):
        return [_rewrite_refs(item) for item in value]
    return value


def _convert_schema(schema: Any) -> Any:
    """Map Swagger-only schema spellings (type: file) to OpenAPI 3."""
    if isinstance(schema, dict):
        converted = {k: _convert_schema(v) for k, v in schema.items()}
        if converted.get("type") == "file":
            converted["type"] = "string"
            converted["format"] = "binary"
        return converted
    if isinstance(schema, list):
        return [_convert_schema(item) for item in schema]
    return schema
