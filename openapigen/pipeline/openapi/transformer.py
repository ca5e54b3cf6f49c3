"""
Client renderer: operation metadata -> Effect HttpClient implementation and interface.

Consumes the declaration names recorded on each ParsedOperation; never
looks at schemas itself.
"""

from __future__ import annotations

from ...utils import to_comment
from ..backends.base import template_environment
from .operations import ParsedOperation

HTTP_CLIENT_METHODS = {
    "get": "get",
    "put": "put",
    "post": "post",
    "delete": "del",
    "options": "options",
    "head": "head",
    "patch": "patch",
    "trace": 'make("TRACE")',
}


class ClientTransformer:
    """Renders the per-tag client implementation and its interface type."""

    TEMPLATE_LANG = "client"

    def __init__(self):
        self.jinja_env = template_environment(self.TEMPLATE_LANG)
        self.imports_template = self.jinja_env.get_template("imports.ts.jinja2")
        self.schema_imports_template = self.jinja_env.get_template("schema_imports.ts.jinja2")
        self.implementation_template = self.jinja_env.get_template("implementation.ts.jinja2")
        self.operation_template = self.jinja_env.get_template("operation.ts.jinja2")
        self.stream_operation_template = self.jinja_env.get_template("stream_operation.ts.jinja2")
        self.interface_template = self.jinja_env.get_template("interface.ts.jinja2")

    def imports(self, streaming: bool = False) -> str:
        """Imports of a module holding client code."""
        return self.imports_template.render(STREAMING=streaming).strip("\n")

    def schema_imports(self) -> str:
        """Imports of a module holding declarations only."""
        return self.schema_imports_template.render().strip("\n")

    def to_implementation(self, name: str, operations: list[ParsedOperation]) -> str:
        """Render the unexpected-status helper and `make(httpClient)`."""
        methods = []
        for op in operations:
            methods.append(self._render_operation(op))
            if op.stream_schema:
                methods.append(self._render_stream_operation(op))
        return self.implementation_template.render(NAME=name, METHODS=methods).strip("\n")

    def to_types(self, name: str, operations: list[ParsedOperation]) -> str:
        """Render the `interface {name}` describing every method."""
        methods = []
        for op in operations:
            args = ", ".join(self._signature_args(op))
            errors = " | ".join(self._error_types(op))
            success = " | ".join(f"typeof {s}.Type" for s in op.success_schemas.values()) or "void"
            methods.append(
                {
                    "id": op.id,
                    "args": args,
                    "returns": f"Effect.Effect<{success}, {errors}>",
                    "comment": to_comment(op.description),
                }
            )
            if op.stream_schema:
                methods.append(
                    {
                        "id": f"{op.id}Stream",
                        "args": args,
                        "returns": f"Stream.Stream<typeof {op.stream_schema}.Type, {errors}>",
                        "comment": "",
                    }
                )
        return self.interface_template.render(NAME=name, METHODS=methods).strip("\n")

    def _signature_args(self, op: ParsedOperation) -> list[str]:
        args = [f"{path_id}: string" for path_id in op.path_ids]

        option_fields = []
        if op.params:
            option_fields.append(f"readonly params{'?' if op.params_optional else ''}: typeof {op.params}.Encoded")
        if op.payload:
            option_fields.append(f"readonly payload: typeof {op.payload}.Type")
        option_fields.append("readonly headers?: Headers.Input")

        has_required = bool(op.payload) or (bool(op.params) and not op.params_optional)
        args.append(f"options{'' if has_required else '?'}: {{ {'; '.join(option_fields)} }}")
        return args

    def _error_types(self, op: ParsedOperation) -> list[str]:
        errors = ["HttpClientError.HttpClientError", "ParseError"]
        if op.payload:
            errors.append("HttpBody.HttpBodyError")
        errors.extend(dict.fromkeys(op.error_schemas.values()))
        return errors

    def _request_pipeline(self, op: ParsedOperation, with_headers: bool = True) -> list[str]:
        pipeline = []
        if op.params:
            if op.url_params:
                props = ", ".join(f'"{p}": options?.params?.["{p}"] as any' for p in op.url_params)
                pipeline.append(f"HttpClientRequest.setUrlParams({{ {props} }})")
            if op.headers and with_headers:
                props = ", ".join(f'"{p}": options?.params?.["{p}"] ?? undefined' for p in op.headers)
                pipeline.append(f"HttpClientRequest.setHeaders({{ {props} }})")
        pipeline.append("HttpClientRequest.setHeaders(options?.headers ?? {})")

        if op.payload:
            if op.payload_form_data:
                pipeline.append("HttpClientRequest.bodyFormDataRecord(options.payload as any)")
            else:
                pipeline.append(f"HttpClientRequest.schemaBodyJson({op.payload})(options.payload)")
        return pipeline

    def _decodes(self, op: ParsedOperation) -> list[str]:
        decodes = []
        for status, schema in op.success_schemas.items():
            decodes.append(f'"{status}": (response) => HttpClientResponse.schemaBodyJson({schema})(response)')
        for status, schema in op.error_schemas.items():
            body = op.object_error_schemas.get(schema)
            if body:
                decodes.append(
                    f'"{status}": (response) => HttpClientResponse.schemaBodyJson({body})(response)'
                    f".pipe(Effect.map((body) => new {schema}(body)), Effect.flatMap(Effect.fail))"
                )
            else:
                decodes.append(
                    f'"{status}": (response) => HttpClientResponse.schemaBodyJson({schema})(response).pipe(Effect.flatMap(Effect.fail))'
                )
        for status in op.void_statuses:
            decodes.append(f'"{status}": () => Effect.void')
        return decodes

    def _operation_context(self, op: ParsedOperation, with_headers: bool = True) -> dict:
        return {
            "ID": op.id,
            "ARGS": ", ".join([*op.path_ids, "options"]),
            "METHOD": HTTP_CLIENT_METHODS[op.method],
            "PATH": op.path_template,
            "PIPELINE": self._request_pipeline(op, with_headers),
            # A JSON body is encoded effectfully, so the request itself becomes an Effect
            "BODY_EFFECT": bool(op.payload) and not op.payload_form_data,
        }

    def _render_operation(self, op: ParsedOperation) -> str:
        context = self._operation_context(op)
        context["DECODES"] = self._decodes(op)
        return self.operation_template.render(**context).rstrip("\n")

    def _render_stream_operation(self, op: ParsedOperation) -> str:
        context = self._operation_context(op, with_headers=False)
        context["EVENT"] = op.stream_schema
        return self.stream_operation_template.render(**context).rstrip("\n")
