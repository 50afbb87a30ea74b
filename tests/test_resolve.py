"""Tests for schema name resolution and the registry."""

from schemaloom.kernel import builders as t
from schemaloom.kernel.compiler import compile_schema
from schemaloom.kernel.nodes import RefNode
from schemaloom.kernel.resolve import SchemaRegistry, resolve_schema


def test_modules_take_precedence_over_models():
    schema_a = t.obj({"name": t.string()})
    schema_b = t.obj({"sku": t.string()})

    assert resolve_schema("Product", {"Product": schema_a}, {"Product": schema_b}) is schema_b


def test_falls_back_to_models():
    schema_a = t.obj({"name": t.string()})

    assert resolve_schema("Product", {"Product": schema_a}, {"Other": t.string()}) is schema_a
    assert resolve_schema("Product", {"Product": schema_a}) is schema_a


def test_unknown_name_is_none():
    assert resolve_schema("Missing", {"Product": t.string()}, {"Order": t.string()}) is None
    assert resolve_schema("Missing") is None
    assert resolve_schema("Missing", {}, {}) is None


def test_non_string_passes_through():
    schema = t.obj()
    foreign = {"~standard": {"validate": lambda value: {"value": value}}}

    assert resolve_schema(schema, {"x": t.string()}) is schema
    assert resolve_schema(foreign) is foreign
    assert resolve_schema(None) is None


def test_registry_resolves_compiled_modules_first():
    registry = SchemaRegistry().model("User", t.obj({"name": t.string()}))

    assert registry.resolve("User") is registry.models["User"]

    modules = registry.compile()
    resolved = registry.resolve("User")

    assert isinstance(resolved, RefNode)
    assert resolved is modules["User"]
    assert resolved.target is registry.models["User"]


def test_registry_exposes_foreign_models_as_is():
    foreign = {"~standard": {"validate": lambda value: {"value": value}}}
    registry = SchemaRegistry({"Payload": foreign})
    registry.compile()

    assert registry.resolve("Payload") is foreign


def test_registry_references_are_lazy_and_recursive():
    """A model may reference itself by name."""
    registry = SchemaRegistry()
    registry.model("Node", t.obj({"value": t.integer(), "next": t.optional(registry.ref("Node"))}))
    registry.compile()

    validator = compile_schema(registry.resolve("Node"))

    assert validator.check({"value": 1, "next": {"value": 2, "next": {"value": 3}}}) is True
    assert validator.check({"value": 1, "next": {"value": "two"}}) is False


def test_model_registration_is_chainable():
    registry = SchemaRegistry().model("A", t.string()).model("B", t.number())

    assert set(registry.models) == {"A", "B"}
    assert registry.modules == {}
