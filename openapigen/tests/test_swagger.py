"""
Tests for Swagger 2.0 conversion and dialect checks.
"""

from __future__ import annotations

import copy

import pytest

from openapigen.errors import UnsupportedFormatError
from openapigen.pipeline import OpenApiGenerator
from openapigen.pipeline.openapi import convert_swagger2

SWAGGER_DOCUMENT = {
    "swagger": "2.0",
    "info": {"title": "Pet Store", "version": "1.0.0"},
    "host": "api.example.com",
    "basePath": "/v1",
    "schemes": ["https"],
    "definitions": {
        "Pet": {
            "type": "object",
            "required": ["name"],
            "properties": {"name": {"type": "string"}, "tag": {"$ref": "#/definitions/Tag"}},
        },
        "Tag": {"type": "string"},
    },
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "tags": ["pets"],
                "parameters": [{"name": "limit", "in": "query", "type": "integer", "maximum": 100}],
                "responses": {
                    "200": {"description": "ok", "schema": {"type": "array", "items": {"$ref": "#/definitions/Pet"}}}
                },
            },
            "post": {
                "operationId": "createPet",
                "tags": ["pets"],
                "parameters": [{"name": "body", "in": "body", "required": True, "schema": {"$ref": "#/definitions/Pet"}}],
                "responses": {"201": {"description": "created"}},
            },
        },
        "/pets/{petId}/photo": {
            "parameters": [{"name": "petId", "in": "path", "required": True, "type": "string"}],
            "post": {
                "operationId": "uploadPhoto",
                "consumes": ["multipart/form-data"],
                "parameters": [{"name": "file", "in": "formData", "type": "file", "required": True}],
                "responses": {"200": {"description": "ok"}},
            },
        },
    },
}


class TestConvertSwagger2:
    @pytest.fixture
    def converted(self):
        return convert_swagger2(SWAGGER_DOCUMENT)

    def test_version_and_servers(self, converted):
        assert converted["openapi"] == "3.0.3"
        assert converted["servers"] == [{"url": "https://api.example.com/v1"}]
        assert converted["info"] == SWAGGER_DOCUMENT["info"]

    def test_definitions_become_component_schemas(self, converted):
        pet = converted["components"]["schemas"]["Pet"]
        assert pet["properties"]["tag"] == {"$ref": "#/components/schemas/Tag"}

    def test_query_parameter_schema(self, converted):
        (parameter,) = converted["paths"]["/pets"]["get"]["parameters"]
        assert parameter == {"name": "limit", "in": "query", "schema": {"type": "integer", "maximum": 100}}

    def test_body_parameter_becomes_request_body(self, converted):
        post = converted["paths"]["/pets"]["post"]
        assert "parameters" not in post
        assert post["requestBody"] == {
            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}},
            "required": True,
        }

    def test_form_data_becomes_multipart_body(self, converted):
        upload = converted["paths"]["/pets/{petId}/photo"]["post"]
        schema = upload["requestBody"]["content"]["multipart/form-data"]["schema"]
        assert schema == {"type": "object", "properties": {"file": {"type": "string", "format": "binary"}}, "required": ["file"]}
        assert upload["parameters"] == [{"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}}]

    def test_responses(self, converted):
        responses = converted["paths"]["/pets"]["get"]["responses"]
        assert responses["200"]["content"]["application/json"]["schema"]["items"] == {"$ref": "#/components/schemas/Pet"}
        assert converted["paths"]["/pets"]["post"]["responses"]["201"] == {"description": "created"}

    def test_input_is_not_modified(self):
        original = copy.deepcopy(SWAGGER_DOCUMENT)
        convert_swagger2(SWAGGER_DOCUMENT)
        assert SWAGGER_DOCUMENT == original

    def test_global_body_parameter(self):
        document = {
            "swagger": "2.0",
            "parameters": {"PetBody": {"name": "body", "in": "body", "schema": {"type": "string"}}},
            "paths": {"/pets": {"post": {"parameters": [{"$ref": "#/parameters/PetBody"}], "responses": {}}}},
        }
        post = convert_swagger2(document)["paths"]["/pets"]["post"]
        assert post["requestBody"]["content"]["application/json"]["schema"] == {"type": "string"}

    def test_unsupported_version(self):
        with pytest.raises(UnsupportedFormatError):
            convert_swagger2({"swagger": "1.2", "paths": {}})

    def test_invalid_paths(self):
        with pytest.raises(UnsupportedFormatError):
            convert_swagger2({"swagger": "2.0", "paths": []})

    def test_malformed_document(self):
        with pytest.raises(UnsupportedFormatError):
            convert_swagger2({"swagger": "2.0", "paths": {"/pets": {"get": {"parameters": [{"in": "formData"}]}}}})


class TestOpenApiGenerator:
    def test_swagger_document_is_generated(self):
        result = OpenApiGenerator().generate(SWAGGER_DOCUMENT)
        assert list(result.modules) == ["pets", "_untagged"]
        pets = result.modules["pets"].source
        assert 'export class Pet extends Schema.Class<Pet>("Pet")({' in pets
        assert "HttpClientRequest.schemaBodyJson(Pet)(options.payload)" in pets
        assert "HttpClientRequest.bodyFormDataRecord(options.payload as any)" in result.modules["_untagged"].source

    @pytest.mark.parametrize(
        "document",
        [
            [],
            {"info": {"title": "no version"}},
            {"openapi": "2.5", "paths": {}},
            {"swagger": "1.2", "paths": {}},
        ],
    )
    def test_unsupported_documents(self, document):
        with pytest.raises(UnsupportedFormatError):
            OpenApiGenerator().generate(document)

    def test_runs_are_independent(self):
        generator = OpenApiGenerator()
        first = generator.generate(SWAGGER_DOCUMENT)
        second = generator.generate(SWAGGER_DOCUMENT)
        assert first.modules["pets"].source == second.modules["pets"].source
        assert "Pet2" not in second.modules["pets"].source

    def test_config_defaults(self):
        result = OpenApiGenerator().generate({"openapi": "3.1.0", "paths": {"/a": {"get": {"operationId": "a", "tags": ["x"], "responses": {}}}}})
        assert "): Client => ({" in result.modules["x"].source
        assert [op.id for op in result.operations] == ["a"]
