"""
Spec walking: OpenAPI operations -> registered schemas + operation metadata.

Every path x method becomes a ParsedOperation. Its parameters, request
body and responses are registered on the SchemaGenerator; the operation
keeps the resulting declaration names for the client renderer and the
module partitioner.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ...log import get_logger
from ...utils import camelize, identifier, non_empty_string
from ..analyzer.reference_resolver import ReferenceResolver
from ..generator import SchemaGenerator

logger = get_logger("operations")

METHOD_NAMES = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

_PATH_PARAMETER = re.compile(r"{([^}]+)}")

JSON_MEDIA_TYPE = "application/json"
FORM_DATA_MEDIA_TYPE = "multipart/form-data"
EVENT_STREAM_MEDIA_TYPE = "text/event-stream"


class ResponseClass(Enum):
    """Classification of one operation x status."""

    SUCCESS = "success"
    ERROR_TAGGED = "error_tagged"
    ERROR_PLAIN = "error_plain"
    VOID = "void"
    IGNORED = "ignored"


@dataclass
class ParsedOperation:
    """Operation metadata: which declaration backs which part of the request/response."""

    id: str = ""
    method: str = "get"
    path: str = ""
    path_template: str = ""
    path_ids: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    description: str | None = None

    params: str | None = None
    params_optional: bool = True
    url_params: list[str] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)

    payload: str | None = None
    payload_form_data: bool = False

    # status key -> declaration name
    success_schemas: dict[str, str] = field(default_factory=dict)
    error_schemas: dict[str, str] = field(default_factory=dict)

    # Tagged error declaration -> body struct it decodes through
    object_error_schemas: dict[str, str] = field(default_factory=dict)

    void_statuses: list[str] = field(default_factory=list)
    ignored_statuses: list[str] = field(default_factory=list)
    default_schema: str | None = None
    stream_schema: str | None = None

    # status -> classification (statuses as written in the document)
    classifications: dict[str, ResponseClass] = field(default_factory=dict)

    @property
    def primary_tag(self) -> str:
        return self.tags[0]

    @property
    def schema_names(self) -> list[str]:
        """Every declaration the operation references directly, in a stable order."""
        names: list[str] = []
        for name in [
            self.params,
            self.payload,
            *self.success_schemas.values(),
            *self.error_schemas.values(),
            self.default_schema,
            self.stream_schema,
        ]:
            if name and name not in names:
                names.append(name)
        return names


def process_path(path: str) -> tuple[str, list[str]]:
    """
    Turn an OpenAPI path into a template literal.

    Examples:
        "/pets/{pet_id}" -> ("`/pets/${petId}`", ["petId"])

    Returns:
        (template literal, camelized path parameter names)
    """
    ids: list[str] = []

    def _replace(match: re.Match) -> str:
        name = camelize(match.group(1))
        ids.append(name)
        return "${" + name + "}"

    return "`" + _PATH_PARAMETER.sub(_replace, path) + "`", ids


def status_major(status: str) -> int | None:
    """Leading digit of a status key ("404" -> 4, "2XX" -> 2, "default" -> None)."""
    if status and status[0].isdigit():
        return int(status[0])
    return None


class OperationWalker:
    """Walks the paths of an OpenAPI 3 document."""

    def __init__(self, generator: SchemaGenerator, document: dict[str, Any], untagged_name: str = "_untagged"):
        """
        Initialize the walker.

        Args:
            generator: Registration target for every schema met
            document: The OpenAPI 3 document (also the $ref context)
            untagged_name: Tag of operations without tags
        """
        self.generator = generator
        self.document = document
        self.untagged_name = untagged_name
        self.resolver = ReferenceResolver()

    def walk(self) -> list[ParsedOperation]:
        operations: list[ParsedOperation] = []
        for path, item in (self.document.get("paths") or {}).items():
            if not isinstance(item, dict):
                continue
            for method in METHOD_NAMES:
                operation = item.get(method)
                if isinstance(operation, dict):
                    operations.append(self.parse_operation(path, method, operation, item.get("parameters", [])))
        return operations

    def parse_operation(
        self,
        path: str,
        method: str,
        operation: dict[str, Any],
        shared_parameters: list[Any] | None = None,
    ) -> ParsedOperation:
        """Register the schemas of one operation and collect its metadata."""
        path_template, path_ids = process_path(path)
        operation_id = operation.get("operationId")

        op = ParsedOperation(
            id=camelize(operation_id) if operation_id else f"{method.upper()}{path}",
            method=method,
            path=path,
            path_template=path_template,
            path_ids=path_ids,
            tags=list(operation.get("tags") or [self.untagged_name]),
            description=non_empty_string(operation.get("description")) or non_empty_string(operation.get("summary")),
        )
        schema_id = identifier(operation_id or path)

        self._parse_parameters(op, schema_id, [*(shared_parameters or []), *operation.get("parameters", [])])
        self._parse_request_body(op, schema_id, operation.get("requestBody"))
        self._parse_responses(op, schema_id, operation.get("responses") or {})

        logger.debug("Parsed %s %s as %s", method.upper(), path, op.id)
        return op

    def _resolve(self, value: Any) -> Any:
        """Follow $ref chains of parameters, request bodies and responses."""
        seen: set[str] = set()
        while isinstance(value, dict) and "$ref" in value:
            pointer = value["$ref"]
            if pointer in seen:
                return None
            seen.add(pointer)
            resolved = self.resolver.resolve(pointer, self.document)
            if resolved is None:
                logger.warning("Unresolvable reference %s", pointer)
                return None
            value = resolved.fragment
        return value

    def _parse_parameters(self, op: ParsedOperation, schema_id: str, parameters: list[Any]) -> None:
        """Collect query/header parameters into a single `{Id}Params` object schema."""
        properties: dict[str, Any] = {}
        required: list[str] = []

        # Later (operation-level) parameters override shared ones with the same name and location
        by_key: dict[tuple[str, str], dict[str, Any]] = {}
        for parameter in parameters:
            parameter = self._resolve(parameter)
            if not isinstance(parameter, dict) or parameter.get("in") in ("path", "cookie", None):
                continue
            by_key[(parameter.get("in"), parameter.get("name", ""))] = parameter

        for parameter in by_key.values():
            schema = self._parameter_schema(parameter)
            added: list[str] = []
            if isinstance(schema, dict) and isinstance(schema.get("properties"), dict):
                schema_required = schema.get("required") or []
                for name, prop in schema["properties"].items():
                    key = f"{parameter['name']}[{name}]"
                    properties[key] = prop
                    if name in schema_required:
                        required.append(key)
                    added.append(key)
            else:
                properties[parameter["name"]] = schema
                if parameter.get("required"):
                    required.append(parameter["name"])
                added.append(parameter["name"])

            if parameter["in"] == "query":
                op.url_params.extend(added)
            elif parameter["in"] == "header":
                op.headers.extend(added)

        if properties:
            op.params = self.generator.add_schema(
                f"{schema_id}Params",
                {"type": "object", "properties": properties, "required": required},
                self.document,
                prefer_struct=True,
            )
            op.params_optional = not required

    def _parameter_schema(self, parameter: dict[str, Any]) -> Any:
        if "schema" in parameter:
            return parameter["schema"]
        # Parameters described through a media type
        for media in (parameter.get("content") or {}).values():
            if isinstance(media, dict) and "schema" in media:
                return media["schema"]
        return {}

    def _parse_request_body(self, op: ParsedOperation, schema_id: str, request_body: Any) -> None:
        content = (self._resolve(request_body) or {}).get("content") or {}

        json_schema = (content.get(JSON_MEDIA_TYPE) or {}).get("schema")
        if json_schema is not None:
            op.payload = self.generator.add_schema(f"{schema_id}Request", json_schema, self.document)
        elif FORM_DATA_MEDIA_TYPE in content:
            op.payload = self.generator.add_schema(
                f"{schema_id}Request",
                (content[FORM_DATA_MEDIA_TYPE] or {}).get("schema", {}),
                self.document,
            )
            op.payload_form_data = True

    def _parse_responses(self, op: ParsedOperation, schema_id: str, responses: dict[str, Any]) -> None:
        """Register response schemas and classify every status."""
        for status, response in responses.items():
            status = str(status)
            response = self._resolve(response)
            if not isinstance(response, dict):
                continue

            content = response.get("content")
            json_schema = ((content or {}).get(JSON_MEDIA_TYPE) or {}).get("schema")
            major = status_major(status)

            if json_schema is not None:
                name = self.generator.add_schema(f"{schema_id}{status}", json_schema, self.document, prefer_struct=True)
                if status == "default":
                    op.default_schema = name
                elif major is not None and major < 4:
                    op.success_schemas[status.lower()] = name
                    op.classifications[status] = ResponseClass.SUCCESS
                elif major is not None:
                    self._register_error(op, status, name)

            stream_schema = ((content or {}).get(EVENT_STREAM_MEDIA_TYPE) or {}).get("schema")
            if op.stream_schema is None and stream_schema is not None:
                op.stream_schema = self.generator.add_schema(
                    f"{schema_id}StreamEvent", stream_schema, self.document, prefer_struct=True
                )

            if not content and major is not None:
                if major < 4:
                    op.void_statuses.append(status.lower())
                    op.classifications[status] = ResponseClass.VOID
                else:
                    # No schema to decode against: falls through to the unexpected-status failure
                    op.ignored_statuses.append(status.lower())
                    op.classifications[status] = ResponseClass.IGNORED

        if not op.success_schemas and op.default_schema:
            op.success_schemas["2xx"] = op.default_schema
            op.classifications["default"] = ResponseClass.SUCCESS

        # A single 2xx success decodes under the generic bucket
        if len(op.success_schemas) == 1:
            status, name = next(iter(op.success_schemas.items()))
            if status.startswith("2") and status != "2xx":
                op.success_schemas = {"2xx": name}

    def _register_error(self, op: ParsedOperation, status: str, name: str) -> None:
        self.generator.mark_as_error(name)
        op.error_schemas[status.lower()] = name
        if self.generator.is_struct(name):
            op.object_error_schemas[name] = self.generator.body_struct_name(name) or f"{name}Body"
            op.classifications[status] = ResponseClass.ERROR_TAGGED
        else:
            op.classifications[status] = ResponseClass.ERROR_PLAIN
