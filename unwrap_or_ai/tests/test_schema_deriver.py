"""Schema derivation for recovery target types.

Covers:
- object roots (pydantic models, dataclasses) and nested objects
- required vs optional fields
- wrapping of non-object roots and strict validation of answers
- determinism and caching
- types without structural metadata
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import pytest
from pydantic import BaseModel, ValidationError

from unwrap_or_ai.base.errors import SchemaDerivationError
from unwrap_or_ai.schema import clear_schema_cache, derive_schema, schema_name, simple_schema


class Address(BaseModel):
    street: str
    city: str


class User(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    address: Address
    tags: List[str] = []


class TreeNode(BaseModel):
    label: str
    children: List["TreeNode"] = []


@dataclass
class Point:
    x: int
    y: int


class Opaque:
    def __init__(self, handle):
        self.handle = handle


def test_model_schema_is_closed_object_with_required_fields():
    target = derive_schema(User)
    schema = target.schema

    assert schema["type"] == "object"  # nosec B101
    assert schema["additionalProperties"] is False  # nosec B101
    assert target.required == frozenset({"id", "name", "address"})  # nosec B101
    assert set(target.properties) == {"id", "name", "email", "address", "tags"}  # nosec B101
    assert target.properties["id"]["type"] == "integer"  # nosec B101
    assert target.wrapped is False  # nosec B101


def test_nested_model_is_inlined_without_refs_or_titles():
    schema = derive_schema(User).schema
    address = schema["properties"]["address"]

    assert "$ref" not in address  # nosec B101
    assert "$defs" not in schema  # nosec B101
    assert address["type"] == "object"  # nosec B101
    assert address["required"] == ["street", "city"]  # nosec B101
    assert address["additionalProperties"] is False  # nosec B101
    assert "title" not in schema  # nosec B101
    assert "title" not in address  # nosec B101


def test_recursive_model_keeps_its_definitions():
    schema = derive_schema(TreeNode).schema

    assert schema["type"] == "object"  # nosec B101
    assert "TreeNode" in schema["$defs"]  # nosec B101
    assert schema["properties"]["children"]["items"] == {"$ref": "#/$defs/TreeNode"}  # nosec B101


def test_dataclass_target():
    point = derive_schema(Point)
    assert point.required == frozenset({"x", "y"})  # nosec B101
    assert point.validate_json('{"x": 1, "y": 2}') == Point(1, 2)  # nosec B101


def test_scalar_root_is_wrapped_and_unwrapped():
    target = derive_schema(int)

    assert target.wrapped is True  # nosec B101
    assert target.schema == {  # nosec B101
        "type": "object",
        "properties": {"value": {"type": "integer"}},
        "required": ["value"],
        "additionalProperties": False,
    }
    assert target.validate_json('{"value": 42}') == 42  # nosec B101


def test_list_root_is_wrapped():
    target = derive_schema(List[str])

    assert target.name == "list"  # nosec B101
    assert target.schema["properties"]["value"] == {"type": "array", "items": {"type": "string"}}  # nosec B101
    assert target.validate_json('{"value": ["a", "b"]}') == ["a", "b"]  # nosec B101


def test_validation_is_strict():
    with pytest.raises(ValidationError):
        derive_schema(int).validate_json('{"value": "42"}')
    with pytest.raises(ValidationError):
        derive_schema(User).validate_json('{"id": "1", "name": "x", "address": {"street": "s", "city": "c"}}')
    with pytest.raises(ValidationError):
        derive_schema(User).validate_json("not json at all")


def test_undeclared_keys_are_rejected_at_every_depth():
    address = '{"street": "s", "city": "c"}'
    with pytest.raises(ValidationError) as top:
        derive_schema(User).validate_json('{"id": 1, "name": "x", "address": %s, "extra": 5}' % address)
    assert top.value.errors()[0]["loc"] == ("extra",)  # nosec B101
    assert top.value.errors()[0]["type"] == "extra_forbidden"  # nosec B101

    with pytest.raises(ValidationError) as nested:
        derive_schema(User).validate_json('{"id": 1, "name": "x", "address": {"street": "s", "city": "c", "zip": "1"}}')
    assert nested.value.errors()[0]["loc"] == ("address", "zip")  # nosec B101

    with pytest.raises(ValidationError):
        derive_schema(Point).validate_json('{"x": 1, "y": 2, "z": 3}')
    with pytest.raises(ValidationError):
        derive_schema(List[Address]).validate_json('{"value": [{"street": "s", "city": "c", "n": 1}]}')
    with pytest.raises(ValidationError):
        derive_schema(TreeNode).validate_json('{"label": "a", "children": [{"label": "b", "depth": 1}]}')


def test_declared_keys_and_open_mappings_still_validate():
    assert derive_schema(TreeNode).validate_json('{"label": "a", "children": [{"label": "b"}]}').children[0].label == "b"  # nosec B101
    assert derive_schema(Dict[str, int]).validate_json('{"a": 1, "b": 2}') == {"a": 1, "b": 2}  # nosec B101


def test_missing_required_field_is_rejected_but_optional_may_be_omitted():
    target = derive_schema(User)
    user = target.validate_json('{"id": 1, "name": "Ann", "address": {"street": "Main", "city": "Oslo"}}')
    assert user.email is None  # nosec B101
    assert user.tags == []  # nosec B101
    with pytest.raises(ValidationError):
        target.validate_json('{"id": 1, "address": {"street": "Main", "city": "Oslo"}}')


def test_derivation_is_deterministic_and_cached():
    first = derive_schema(User)
    assert derive_schema(User) is first  # nosec B101
    clear_schema_cache()
    again = derive_schema(User)
    assert again is not first  # nosec B101
    assert again == first  # nosec B101


def test_response_format_carries_name_and_schema():
    target = derive_schema(User)
    assert target.response_format() == {  # nosec B101
        "type": "json_schema",
        "json_schema": {"name": "user", "schema": target.schema},
    }


def test_dump_json_matches_schema_shape():
    assert derive_schema(int).dump_json(5) == '{"value": 5}'  # nosec B101
    assert derive_schema(Point).dump_json(Point(1, 2)) == '{"x":1,"y":2}'  # nosec B101


def test_schema_name_variants():
    assert schema_name(User) == "user"  # nosec B101
    assert schema_name(int) == "int"  # nosec B101
    assert schema_name(list[int]) == "list"  # nosec B101
    assert schema_name(Optional[int]) in {"optional", "union", "response"}  # nosec B101


def test_type_without_structure_raises_schema_derivation_error():
    with pytest.raises(SchemaDerivationError):
        derive_schema(Opaque)


def test_simple_schema_requires_every_field():
    schema = simple_schema([("city", "string", "City name"), ("population", "integer", "Head count")])
    assert schema["required"] == ["city", "population"]  # nosec B101
    assert schema["additionalProperties"] is False  # nosec B101
    assert schema["properties"]["city"] == {"type": "string", "description": "City name"}  # nosec B101
