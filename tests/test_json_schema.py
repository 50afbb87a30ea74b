"""Tests for JSON Schema document conversion."""

import pytest

from schemaloom.codes import Kind
from schemaloom.kernel.compiler import compile_schema
from schemaloom.kernel.nodes import ArrayNode, ObjectNode, PrimitiveNode, RefNode, WrapperNode
from schemaloom._internal.json_schema import UnsupportedKeyword, from_json_schema, is_json_schema


def test_object_required_and_optional():
    node = from_json_schema({
        "type": "object",
        "title": "User",
        "properties": {"name": {"type": "string", "minLength": 1}, "age": {"type": "integer"}},
        "required": ["name"],
    })

    assert isinstance(node, ObjectNode)
    assert node.title == "User"
    assert node.required == ("name",)
    assert node.properties["name"].constraints.min_length == 1
    assert isinstance(node.properties["age"], WrapperNode)
    assert node.properties["age"].kind is Kind.OPTIONAL


def test_additional_properties_false_closes_object():
    node = from_json_schema({"type": "object", "properties": {}, "additionalProperties": False})

    assert node.additional_properties is False


def test_defs_and_refs_share_one_table():
    node = from_json_schema({
        "$defs": {"Tag": {"type": "object", "properties": {"label": {"type": "string"}}, "required": ["label"]}},
        "type": "object",
        "properties": {"tags": {"type": "array", "items": {"$ref": "#/$defs/Tag"}}},
        "required": ["tags"],
    })

    items = node.properties["tags"].items
    assert isinstance(items, RefNode)
    assert items.name == "Tag"
    assert isinstance(items.target, ObjectNode)
    assert compile_schema(node).check({"tags": [{"label": "a"}]}) is True
    assert compile_schema(node).check({"tags": [{}]}) is False


def test_recursive_definition():
    node = from_json_schema({
        "$defs": {"Tree": {
            "type": "object",
            "properties": {"children": {"type": "array", "items": {"$ref": "#/$defs/Tree"}}},
        }},
        "$ref": "#/$defs/Tree",
    })

    assert isinstance(node, RefNode)
    assert compile_schema(node).check({"children": [{"children": []}]}) is True


def test_binary_strings_become_files():
    node = from_json_schema({
        "type": "object",
        "properties": {
            "avatar": {"type": "string", "format": "binary"},
            "docs": {"type": "array", "items": {"type": "string", "format": "binary"}},
        },
        "required": ["avatar", "docs"],
    })

    assert node.properties["avatar"].kind is Kind.FILE
    assert isinstance(node.properties["docs"], ArrayNode)
    assert node.properties["docs"].kind is Kind.FILES


def test_type_lists_and_nullable():
    multi = from_json_schema({"type": ["string", "null"]})
    nullable = from_json_schema({"type": "integer", "nullable": True})

    assert multi.kind is Kind.ANY_OF
    assert [branch.kind for branch in multi.branches] == [Kind.STRING, Kind.NULL]
    assert nullable.kind is Kind.NULLABLE


def test_enum_and_const():
    colors = from_json_schema({"enum": ["red", "green"]})
    answer = from_json_schema({"const": 42})

    assert isinstance(colors, PrimitiveNode)
    assert colors.kind is Kind.STRING
    assert colors.constraints.enum == ("red", "green")
    assert answer.kind is Kind.INTEGER
    assert compile_schema(answer).check(42) is True
    assert compile_schema(answer).check(41) is False


def test_compositions():
    any_of = from_json_schema({"anyOf": [{"type": "string"}, {"type": "number"}]})
    single = from_json_schema({"allOf": [{"type": "string"}]})

    assert any_of.kind is Kind.ANY_OF
    assert single.kind is Kind.STRING


def test_number_constraints():
    node = from_json_schema({"type": "number", "minimum": 1, "exclusiveMaximum": 5, "multipleOf": 0.5})

    assert node.constraints.minimum == 1
    assert node.constraints.exclusive_maximum == 5
    assert node.constraints.multiple_of == 0.5


def test_untyped_schema_is_any():
    assert from_json_schema({}).kind is Kind.ANY
    assert from_json_schema({"description": "free form"}).kind is Kind.ANY


@pytest.mark.parametrize("keyword", ["not", "if", "prefixItems", "patternProperties"])
def test_unsupported_keywords(keyword):
    document = {"type": "object", "properties": {"x": {keyword: {}}}}

    with pytest.raises(UnsupportedKeyword) as exc_info:
        from_json_schema(document)

    assert exc_info.value.keyword == keyword


def test_external_refs_are_unsupported():
    with pytest.raises(UnsupportedKeyword):
        from_json_schema({"$ref": "https://example.com/schema.json"})


def test_is_json_schema():
    assert is_json_schema({"type": "string"}) is True
    assert is_json_schema({"$ref": "#/$defs/X"}) is True
    assert is_json_schema({"name": "value"}) is False
    assert is_json_schema("string") is False
