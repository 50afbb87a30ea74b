"""Tests for has_type capability detection."""

from schemaloom.codes import Kind
from schemaloom.kernel import builders as t
from schemaloom.kernel.capability import has_any_type, has_type
from schemaloom.kernel.coercions import object_string
from schemaloom.kernel.resolve import SchemaRegistry


def test_file_inside_union_branch():
    """A File nested in an object branch of a union is found."""
    schema = t.union([t.string(), t.obj({"avatar": t.file()}), t.number()])

    assert has_type("File", schema) is True
    assert has_type(Kind.FILE, schema) is True


def test_absent_kind_is_false():
    schema = t.obj({"name": t.string(), "tags": t.array(t.string())})

    assert has_type("File", schema) is False
    assert has_type(Kind.NUMBER, schema) is False


def test_root_itself_matches():
    assert has_type("Object", t.obj()) is True
    assert has_type("String", t.string()) is True


def test_none_and_non_node_inputs_are_false():
    assert has_type("File", None) is False
    assert has_type("Object", {"type": "object"}) is False
    assert has_type("String", "String") is False


def test_files_kind_and_its_items():
    """Files is its own kind and still contains File items."""
    schema = t.obj({"docs": t.files()})

    assert has_type("Files", schema) is True
    assert has_type("File", schema) is True
    assert has_type("Array", schema) is False


def test_wrappers_are_descended():
    schema = t.obj({"avatar": t.optional(t.nullable(t.file()))})

    assert has_type("File", schema) is True
    assert has_type("Optional", schema) is True
    assert has_type("Nullable", schema) is True


def test_codec_inner_structure_is_descended():
    """A coerced object still exposes the File it wraps."""
    schema = t.obj({"profile": object_string(t.obj({"photo": t.file()}))})

    assert has_type("File", schema) is True
    assert has_type("Codec", schema) is True


def test_reference_targets_are_followed():
    registry = SchemaRegistry().model("Avatar", t.obj({"image": t.file()}))
    registry.compile()
    schema = t.obj({"avatar": registry.ref("Avatar")})

    assert has_type("File", schema) is True


def test_unresolved_reference_is_not_an_error():
    registry = SchemaRegistry()
    schema = t.obj({"avatar": registry.ref("Missing")})

    assert has_type("File", schema) is False
    assert has_type("Ref", schema) is True


def test_foreign_node_matches_declared_kind_only():
    schema = t.obj({"upload": t.foreign(object(), "File"), "other": t.foreign({"type": "object"})})

    assert has_type("File", schema) is True
    assert has_type("Object", t.obj({"other": t.foreign({"type": "object"})})) is True  # root
    assert has_type("String", t.array(t.foreign({"type": "string"}))) is False


def test_self_reference_terminates():
    """A property whose value is the containing node does not loop."""
    node = t.obj({"name": t.string()})
    node.properties["self"] = node

    assert has_type("File", node) is False
    assert has_type("String", node) is True


def test_mutual_reference_through_registry_terminates():
    registry = SchemaRegistry()
    registry.model("A", t.obj({"b": registry.ref("B")}))
    registry.model("B", t.obj({"a": registry.ref("A")}))
    registry.compile()

    assert has_type("File", registry.modules["A"]) is False
    assert has_type("Object", registry.modules["A"]) is True


def test_fifty_levels_deep():
    node = t.obj({"avatar": t.file()})
    for _ in range(49):
        node = t.obj({"child": node})

    assert has_type("File", node) is True
    assert has_type("Number", node) is False


def test_hundred_properties_wide():
    properties = {f"field_{i}": t.string() for i in range(99)}
    properties["upload"] = t.file()
    schema = t.obj(properties)

    assert has_type("File", schema) is True
    assert has_type("Boolean", schema) is False


def test_has_any_type():
    schema = t.obj({"docs": t.files()})

    assert has_any_type(("File", "Files"), schema) is True
    assert has_any_type((Kind.BOOLEAN, Kind.NULL), schema) is False
