"""
Tests for SchemaGenerator: registration, error marking and rendered Effect Schema output.
"""

from __future__ import annotations

import pytest

from openapigen.pipeline import GeneratorConfig, OutputKind, SchemaGenerator
from openapigen.pipeline.analyzer import CheckKind, DeclarationKind

PET_SCHEMA = {
    "type": "object",
    "required": ["id", "name"],
    "properties": {"id": {"type": "string"}, "name": {"type": "string"}},
}


def declaration_of(generator, name):
    output = generator.generate(OutputKind.SCHEMA, {name})
    return next(line for line in output.splitlines() if line.startswith(f"export const {name} = "))


class TestObjectsAndChecks:
    def test_id_property_gets_parent_brand(self):
        generator = SchemaGenerator()
        assert generator.add_schema("Pet", PET_SCHEMA) == "Pet"
        output = generator.generate()

        assert 'export const PetId = Schema.String.pipe(Schema.brand("PetId"))' in output
        assert 'export class Pet extends Schema.Class<Pet>("Pet")({' in output
        assert '  "id": PetId,' in output
        assert '  "name": Schema.String,' in output
        assert output.index("export const PetId") < output.index("export class Pet")

    def test_string_checks_keep_their_order(self):
        generator = SchemaGenerator()
        generator.add_schema("Code", {"type": "string", "minLength": 3, "maxLength": 10, "pattern": "^[A-Z]+$"})

        checks = generator.declarations["Code"].type_ref.checks
        assert [c.kind for c in checks] == [CheckKind.MIN_LENGTH, CheckKind.MAX_LENGTH, CheckKind.PATTERN]
        assert declaration_of(generator, "Code") == (
            "export const Code = Schema.String.pipe("
            "Schema.check(Schema.isMinLength(3)), "
            "Schema.check(Schema.isMaxLength(10)), "
            'Schema.check(Schema.isPattern(new RegExp("^[A-Z]+$"))))'
        )


class TestChecks:
    def test_uuid_comes_first(self):
        generator = SchemaGenerator()
        generator.add_schema("Key", {"type": "string", "format": "uuid", "maxLength": 36})
        assert declaration_of(generator, "Key") == (
            "export const Key = Schema.String.pipe(Schema.check(Schema.isUUID(undefined)), Schema.check(Schema.isMaxLength(36)))"
        )

    def test_numeric_checks(self):
        generator = SchemaGenerator()
        generator.add_schema("Score", {"type": "integer", "minimum": 1, "maximum": 100, "multipleOf": 5})
        generator.add_schema("Ratio", {"type": "number", "exclusiveMinimum": 0})
        assert declaration_of(generator, "Score") == (
            "export const Score = Schema.Int.pipe("
            "Schema.check(Schema.isGreaterThanOrEqualTo(1)), "
            "Schema.check(Schema.isLessThanOrEqualTo(100)), "
            "Schema.check(Schema.isMultipleOf(5)))"
        )
        assert declaration_of(generator, "Ratio") == "export const Ratio = Schema.Number.pipe(Schema.check(Schema.isGreaterThan(0)))"

    def test_nullable_wraps_checks(self):
        generator = SchemaGenerator()
        generator.add_schema("Short", {"type": ["string", "null"], "maxLength": 2})
        assert declaration_of(generator, "Short") == (
            "export const Short = Schema.NullOr(Schema.String.pipe(Schema.check(Schema.isMaxLength(2))))"
        )


class TestNullableEquivalence:
    def test_three_spellings(self):
        generator = SchemaGenerator()
        generator.add_schema("A", {"type": ["string", "null"]})
        generator.add_schema("B", {"type": "string", "nullable": True})
        generator.add_schema("C", {"anyOf": [{"type": "string"}, {"type": "null"}]})

        declarations = generator.declarations
        assert declarations["A"].type_ref == declarations["B"].type_ref == declarations["C"].type_ref
        for name in "ABC":
            assert declaration_of(generator, name) == f"export const {name} = Schema.NullOr(Schema.String)"


class TestDeadCodeElimination:
    def test_filter_emits_only_dependencies(self):
        document = {"components": {"schemas": {"Baz": {"type": "string", "enum": ["x"]}}}}
        generator = SchemaGenerator()
        generator.add_schema("Foo", {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/Baz"}}}, document)
        generator.add_schema("Bar", {"type": "object", "properties": {"b": {"type": "string"}}})

        output = generator.generate(OutputKind.SCHEMA, {"Foo"})
        assert 'export const Baz = Schema.Literals(["x"])' in output
        assert "export class Foo" in output
        assert "Bar" not in output

    def test_exclude(self):
        document = {"components": {"schemas": {"Baz": {"type": "string"}}}}
        generator = SchemaGenerator()
        generator.add_schema("Foo", {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/Baz"}}}, document)

        output = generator.generate(OutputKind.SCHEMA, {"Foo"}, exclude={"Baz"})
        assert "export const Baz" not in output
        assert '  "a": Schema.optionalKey(Baz),' in output

    def test_empty_filter(self):
        generator = SchemaGenerator()
        generator.add_schema("Foo", {"type": "string"})
        assert generator.generate(OutputKind.SCHEMA, set()) == ""


class TestCycles:
    def test_self_reference_is_suspended(self):
        document = {
            "components": {
                "schemas": {
                    "Node": {
                        "type": "object",
                        "properties": {"children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}}},
                    }
                }
            }
        }
        generator = SchemaGenerator()
        assert generator.add_schema("Tree", {"$ref": "#/components/schemas/Node"}, document) == "Node"
        output = generator.generate()
        assert '  "children": Schema.optionalKey(Schema.Array(Schema.suspend(() => Node))),' in output
        assert "Tree" not in output

    def test_mutual_references(self):
        document = {
            "components": {
                "schemas": {
                    "A": {"type": "object", "properties": {"b": {"$ref": "#/components/schemas/B"}}},
                    "B": {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/A"}}},
                }
            }
        }
        generator = SchemaGenerator()
        generator.add_schema("Root", {"$ref": "#/components/schemas/A"}, document)
        output = generator.generate()

        assert output.index("export class A ") < output.index("export class B ")
        assert '  "b": Schema.optionalKey(Schema.suspend(() => B)),' in output
        assert '  "a": Schema.optionalKey(A),' in output

    def test_dependent_of_a_cycle_is_not_suspended(self):
        document = {
            "components": {
                "schemas": {
                    "A": {"type": "object", "properties": {"b": {"$ref": "#/components/schemas/B"}}},
                    "B": {"type": "object", "properties": {"c": {"$ref": "#/components/schemas/C"}}},
                    "C": {"type": "object", "properties": {"b": {"$ref": "#/components/schemas/B"}}},
                }
            }
        }
        generator = SchemaGenerator()
        generator.add_schema("Root", {"$ref": "#/components/schemas/A"}, document)
        output = generator.generate()

        assert output.index("export class B ") < output.index("export class A ") < output.index("export class C ")
        assert '  "b": Schema.optionalKey(B),' in output
        assert '  "c": Schema.optionalKey(Schema.suspend(() => C)),' in output
        assert "Schema.suspend(() => B)" not in output


class TestContainers:
    @pytest.mark.parametrize(
        "fragment, expected",
        [
            (
                {"type": "array", "prefixItems": [{"type": "string"}, {"type": "integer"}], "items": False},
                "Schema.Tuple([Schema.String, Schema.Int])",
            ),
            (
                {"type": "array", "prefixItems": [{"type": "string"}], "items": {"type": "boolean"}},
                "Schema.TupleWithRest(Schema.Tuple([Schema.String]), [Schema.Boolean])",
            ),
            ({"type": "object", "additionalProperties": {"type": "integer"}}, "Schema.Record(Schema.String, Schema.Int)"),
            ({"type": "object"}, "Schema.Record(Schema.String, Schema.Json)"),
            ({"type": "array", "items": {"type": "string"}, "minItems": 1}, "Schema.NonEmptyArray(Schema.String)"),
            ({"type": "array", "items": True}, "Schema.Array(Schema.Json)"),
            ({"type": "array", "items": False}, "Schema.Array(Schema.Never)"),
            (
                {"type": "array", "items": {"type": "string"}, "maxItems": 3},
                "Schema.Array(Schema.String).pipe(Schema.check(Schema.isMaxLength(3)))",
            ),
            ({"oneOf": [{"type": "string"}, {"type": "integer"}]}, "Schema.Union([Schema.String, Schema.Int])"),
            ({"const": "cat"}, 'Schema.Literal("cat")'),
            ({"type": "string", "format": "binary"}, "Schema.instanceOf(globalThis.Blob)"),
            ({"not": {}}, "Schema.Json"),
        ],
    )
    def test_expression(self, fragment, expected):
        generator = SchemaGenerator()
        generator.add_schema("Value", fragment)
        assert declaration_of(generator, "Value") == f"export const Value = {expected}"

    def test_nullable_struct_root_is_inline(self):
        generator = SchemaGenerator()
        generator.add_schema("Box", {"type": "object", "nullable": True, "properties": {"a": {"type": "string"}}})
        assert declaration_of(generator, "Box") == (
            'export const Box = Schema.NullOr(Schema.Struct({ "a": Schema.optionalKey(Schema.String) }))'
        )


class TestFields:
    def test_defaults_and_optional(self):
        generator = SchemaGenerator()
        generator.add_schema(
            "Settings",
            {
                "type": "object",
                "required": ["theme", "nickname", "retries"],
                "properties": {
                    "theme": {"type": "string", "default": "dark"},
                    "nickname": {"type": ["string", "null"], "default": None},
                    "retries": {"type": "integer", "default": 3},
                    "note": {"type": "string", "nullable": True},
                },
            },
        )
        output = generator.generate()
        assert '  "theme": Schema.String.pipe(Schema.withConstructorDefault(() => Option.some("dark"))),' in output
        assert '  "nickname": Schema.NullOr(Schema.String).pipe(Schema.withDecodingDefault(() => null)),' in output
        assert '  "retries": Schema.Int.pipe(Schema.withConstructorDefault(() => Option.some(3))),' in output
        assert '  "note": Schema.optionalKey(Schema.NullOr(Schema.String)),' in output

    def test_descriptions_become_comments(self):
        generator = SchemaGenerator()
        generator.add_schema(
            "Pet",
            {"type": "object", "description": "A pet", "properties": {"name": {"type": "string", "description": "The name"}}},
        )
        output = generator.generate()
        assert output.startswith("/**\n* A pet\n*/\nexport class Pet")
        assert '  /**\n  * The name\n  */\n  "name": Schema.optionalKey(Schema.String),' in output

    def test_property_keys_are_quoted(self):
        generator = SchemaGenerator()
        generator.add_schema("Params", {"type": "object", "properties": {"filter[name]": {"type": "string"}}}, prefer_struct=True)
        assert '  "filter[name]": Schema.optionalKey(Schema.String),' in generator.generate()


class TestBrands:
    @pytest.mark.parametrize("order", [("Order", "Invoice"), ("Invoice", "Order")])
    def test_brand_dedup(self, order):
        generator = SchemaGenerator()
        for name in order:
            generator.add_schema(name, {"type": "object", "properties": {"userId": {"type": "string"}}})
        output = generator.generate()
        assert output.count("export const UserId =") == 1
        assert output.count("Schema.optionalKey(UserId)") == 2

    def test_uuid_brand(self):
        generator = SchemaGenerator()
        generator.add_schema("Entity", {"type": "object", "properties": {"id": {"type": "string", "format": "uuid"}}})
        assert (
            'export const EntityId = Schema.String.pipe(Schema.check(Schema.isUUID(undefined))).pipe(Schema.brand("EntityId"))'
            in generator.generate()
        )

    def test_integer_brand_and_nullable_reference(self):
        generator = SchemaGenerator()
        generator.add_schema(
            "Pet",
            {"type": "object", "required": ["id", "ownerId"], "properties": {"id": {"type": "integer"}, "ownerId": {"type": ["string", "null"]}}},
        )
        output = generator.generate()
        assert 'export const PetId = Schema.Int.pipe(Schema.brand("PetId"))' in output
        assert 'export const OwnerId = Schema.String.pipe(Schema.brand("OwnerId"))' in output
        assert '  "ownerId": Schema.NullOr(OwnerId),' in output

    def test_branding_can_be_disabled(self):
        generator = SchemaGenerator(GeneratorConfig(brand_ids=False))
        generator.add_schema("Pet", PET_SCHEMA)
        output = generator.generate()
        assert "Schema.brand" not in output
        assert '  "id": Schema.String,' in output


class TestRegistration:
    def test_name_collisions_get_suffixes(self):
        generator = SchemaGenerator()
        assert generator.add_schema("Pet", {"type": "string"}) == "Pet"
        assert generator.add_schema("Pet", {"type": "integer"}) == "Pet2"
        assert generator.add_schema("Pet", {"type": "boolean"}) == "Pet3"

    def test_nullable_root_reference_is_aliased(self):
        document = {"components": {"schemas": {"Pet": {"type": "object", "properties": {"name": {"type": "string"}}}}}}
        generator = SchemaGenerator()
        assert generator.add_schema("MaybePet", {"$ref": "#/components/schemas/Pet", "nullable": True}, document) == "MaybePet"
        output = generator.generate()
        assert "export const MaybePet = Schema.NullOr(Pet)" in output
        assert output.index("export class Pet ") < output.index("export const MaybePet")

    def test_all_of_is_merged(self):
        document = {
            "components": {
                "schemas": {"Base": {"type": "object", "required": ["id"], "properties": {"id": {"type": "string"}}}}
            }
        }
        generator = SchemaGenerator()
        generator.add_schema(
            "Dog",
            {"allOf": [{"$ref": "#/components/schemas/Base"}, {"required": ["bark"], "properties": {"bark": {"type": "boolean"}}}]},
            document,
        )
        dog = generator.declarations["Dog"]
        assert dog.kind == DeclarationKind.CLASS
        assert [f.name for f in dog.type_ref.fields] == ["id", "bark"]
        assert '  "bark": Schema.Boolean,' in generator.generate()

    def test_independent_generators(self):
        first, second = SchemaGenerator(), SchemaGenerator()
        first.add_schema("Pet", PET_SCHEMA)
        second.add_schema("Pet", PET_SCHEMA)
        assert first.generate() == second.generate()
        assert first.context is not second.context


class TestErrors:
    def test_tagged_error(self):
        generator = SchemaGenerator()
        generator.add_schema(
            "GetPet404",
            {"type": "object", "required": ["message"], "properties": {"message": {"type": "string"}}},
            prefer_struct=True,
        )
        generator.mark_as_error("GetPet404")

        declaration = generator.declarations["GetPet404"]
        assert declaration.kind == DeclarationKind.TAGGED_ERROR
        assert declaration.body_struct_name == "GetPet404Body"
        assert generator.is_struct("GetPet404")

        output = generator.generate(OutputKind.SCHEMA, {"GetPet404"})
        assert "export const GetPet404Body = Schema.Struct({" in output
        assert (
            'export class GetPet404 extends Schema.TaggedError<GetPet404>()("GetPet404", GetPet404Body.fields) {}' in output
        )
        assert output.index("GetPet404Body = ") < output.index("export class GetPet404")

    def test_marking_twice_keeps_one_body(self):
        generator = SchemaGenerator()
        generator.add_schema("Oops", {"type": "object", "properties": {"message": {"type": "string"}}})
        generator.mark_as_error("Oops")
        generator.mark_as_error("Oops")
        assert "OopsBody2" not in generator.declarations

    def test_plain_error(self):
        generator = SchemaGenerator()
        generator.add_schema("Oops", {"type": "string"})
        generator.mark_as_error("Oops")
        declaration = generator.declarations["Oops"]
        assert declaration.is_error_variant
        assert declaration.kind == DeclarationKind.SCHEMA
        assert not generator.is_struct("Oops")
        assert generator.body_struct_name("Oops") is None

    def test_mark_unknown_is_ignored(self):
        generator = SchemaGenerator()
        generator.mark_as_error("Nope")
        assert generator.declarations == {}

    def test_references_to_tagged_errors_use_the_body(self):
        document = {"components": {"schemas": {"Error": {"type": "object", "properties": {"message": {"type": "string"}}}}}}
        generator = SchemaGenerator()
        assert generator.add_schema("Fail", {"$ref": "#/components/schemas/Error"}, document) == "Error"
        generator.mark_as_error("Error")
        generator.add_schema("Wrapper", {"type": "object", "properties": {"error": {"$ref": "#/components/schemas/Error"}}}, document)

        output = generator.generate(OutputKind.SCHEMA, {"Wrapper"})
        assert '  "error": Schema.optionalKey(ErrorBody),' in output
        assert "export const ErrorBody" in output
        assert "TaggedError" not in output
