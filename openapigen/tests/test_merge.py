"""
Tests for the allOf merge and anyOf null-filtering algebra.
"""

from __future__ import annotations

from openapigen.pipeline.analyzer.merge import filter_nullable, flatten_all_of, merge_all_of, single_ref
from openapigen.pipeline.schema_ast import AllOfNode, AnyOfNode, ObjectNode, PrimitiveNode, RefNode
from openapigen.pipeline.schema_ast.normalizer import SchemaNormalizer

normalizer = SchemaNormalizer()


def no_refs(ref):
    return None


def lookup_in(schemas):
    def lookup(ref):
        name = ref.ref_path.rsplit("/", 1)[-1]
        if name not in schemas:
            return None
        return normalizer.normalize(schemas[name], ref.ref_path)

    return lookup


def members(*fragments):
    return [normalizer.normalize(f) for f in fragments]


class TestRequiredUnion:
    def test_required_lists_commute(self):
        first = merge_all_of(members({"required": ["a"]}, {"required": ["b"]}), no_refs)
        second = merge_all_of(members({"required": ["b"]}, {"required": ["a"]}), no_refs)
        assert set(first.required) == {"a", "b"}
        assert set(second.required) == {"a", "b"}

    def test_required_lists_commute_with_properties(self):
        a = {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["a"]}
        b = {"type": "object", "properties": {"b": {"type": "string"}}, "required": ["b"]}
        for merged in (merge_all_of(members(a, b), no_refs), merge_all_of(members(b, a), no_refs)):
            assert set(merged.required) == {"a", "b"}
            assert set(merged.properties) == {"a", "b"}
            assert merged.has_explicit_properties

    def test_required_is_deduplicated(self):
        merged = merge_all_of(members({"required": ["a"]}, {"required": ["a", "b"]}), no_refs)
        assert merged.required == ["a", "b"]


class TestOverlay:
    def test_later_properties_win(self):
        merged = merge_all_of(
            members(
                {"type": "object", "properties": {"a": {"type": "string"}}},
                {"type": "object", "properties": {"a": {"type": "integer"}}},
            ),
            no_refs,
        )
        assert merged.properties["a"].type_name == "integer"

    def test_references_are_resolved_before_merging(self):
        lookup = lookup_in({"Base": {"type": "object", "required": ["id"], "properties": {"id": {"type": "string"}}}})
        merged = merge_all_of(
            members(
                {"$ref": "#/components/schemas/Base"},
                {"type": "object", "properties": {"name": {"type": "string"}}, "required": ["name"]},
            ),
            lookup,
        )
        assert list(merged.properties) == ["id", "name"]
        assert merged.required == ["id", "name"]

    def test_unresolvable_members_are_skipped(self):
        merged = merge_all_of(
            members({"$ref": "#/components/schemas/Missing"}, {"type": "object", "properties": {"a": {}}}),
            no_refs,
        )
        assert isinstance(merged, ObjectNode)
        assert list(merged.properties) == ["a"]

    def test_non_object_member_is_overlaid_best_effort(self):
        merged = merge_all_of(
            members({"type": "object", "properties": {"a": {}}}, {"type": "string", "description": "odd"}),
            no_refs,
        )
        assert isinstance(merged, ObjectNode)
        assert list(merged.properties) == ["a"]
        assert merged.description == "odd"

    def test_annotation_only_member(self):
        merged = merge_all_of(members({"type": "string", "maxLength": 3}, {"description": "code"}), no_refs)
        assert isinstance(merged, PrimitiveNode)
        assert merged.max_length == 3
        assert merged.description == "code"

    def test_self_reference_terminates(self):
        schemas = {"Loop": {"allOf": [{"$ref": "#/components/schemas/Loop"}, {"type": "object", "properties": {"x": {}}}]}}
        node = normalizer.normalize(schemas["Loop"])
        merged = flatten_all_of(node, lookup_in(schemas))
        assert list(merged.properties) == ["x"]

    def test_flatten_keeps_nullable(self):
        node = normalizer.normalize({"allOf": [{"type": "object", "properties": {"a": {}}}], "nullable": True})
        assert flatten_all_of(node, no_refs).nullable is True


class TestFilterNullable:
    def test_only_null(self):
        node = filter_nullable(members({"type": "null"}, {"type": "null"}))
        assert isinstance(node, PrimitiveNode)
        assert node.type_name == "null"

    def test_single_member_absorbs_null(self):
        node = filter_nullable(members({"type": "integer"}, {"type": "null"}))
        assert node.type_name == "integer"
        assert node.nullable

    def test_union_without_null(self):
        node = filter_nullable(members({"type": "integer"}, {"type": "string"}))
        assert isinstance(node, AnyOfNode)
        assert not node.nullable


class TestSingleRef:
    def test_single_ref(self):
        node = AllOfNode(members=[RefNode(ref_path="#/components/schemas/Pet")])
        assert single_ref(node).ref_path == "#/components/schemas/Pet"

    def test_not_single_ref(self):
        assert single_ref(AllOfNode(members=members({"$ref": "#/a"}, {"$ref": "#/b"}))) is None
        assert single_ref(AllOfNode(members=members({"type": "object"}))) is None
