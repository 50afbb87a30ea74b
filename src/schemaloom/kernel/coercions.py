"""Wire-transport coercions.

Form and query transports deliver nested structures and scalars as strings.
The constructors here wrap a schema in a codec that accepts the string form
and decodes it back to the structure; the four rule sets apply them with the
rewrite engine. Each rule set is built once and returned by identity.
"""

import json
import re
from functools import lru_cache
from typing import Any, Callable, Tuple

from schemaloom.codes import CoercionTag, Kind
from schemaloom.kernel import builders as t
from schemaloom.kernel.nodes import (
    ArrayNode,
    Codec,
    CompositionNode,
    Constraints,
    ObjectNode,
    PrimitiveNode,
    SchemaNode,
    WrapperNode,
    structural_kind,
)
from schemaloom.kernel.replace import ReplaceRule

NUMERIC_PATTERN = r"^-?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$"
_NUMERIC_RE = re.compile(NUMERIC_PATTERN)


def _decode_json(value: Any) -> Any:
    if isinstance(value, (str, bytes, bytearray)):
        return json.loads(value)
    return value


def _encode_json(value: Any) -> Any:
    return json.dumps(value, separators=(",", ":"))


def _string_encoded(node: SchemaNode, fmt: str, tag: CoercionTag,
                    decode: Callable[[Any], Any], encode: Callable[[Any], Any],
                    *also: SchemaNode) -> WrapperNode:
    inner = CompositionNode(Kind.ANY_OF, (PrimitiveNode(Kind.STRING, Constraints(format=fmt)), *also, node))
    return WrapperNode(
        Kind.CODEC,
        inner,
        Codec(decode, encode, output=node),
        coercion=tag,
        title=node.title,
        description=node.description,
    )


def object_string(node: ObjectNode) -> WrapperNode:
    """Accept an object or its JSON text."""
    return _string_encoded(node, "ObjectString", CoercionTag.OBJECT_STRING, _decode_json, _encode_json)


def array_string(node: ArrayNode) -> WrapperNode:
    """Accept an array or its JSON text."""
    return _string_encoded(node, "ArrayString", CoercionTag.ARRAY_STRING, _decode_json, _encode_json)


def _parse_number(text: str) -> Any:
    if not _NUMERIC_RE.match(text):
        return text
    number = float(text)
    return int(number) if number.is_integer() and "." not in text and "e" not in text.lower() else number


def _parse_boolean(text: str) -> Any:
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return text


def _item_parser(items: Any) -> Callable[[str], Any]:
    kind = structural_kind(items) if isinstance(items, SchemaNode) else Kind.ANY
    if kind in (Kind.NUMBER, Kind.INTEGER):
        return _parse_number
    if kind is Kind.BOOLEAN:
        return _parse_boolean
    if kind in (Kind.OBJECT, Kind.ARRAY):
        return _decode_json
    return str


def array_query(node: ArrayNode) -> WrapperNode:
    """Accept an array, repeated query values, or a comma-separated list."""
    parse_item = _item_parser(node.items)

    def decode(value: Any) -> Any:
        if isinstance(value, str):
            parts = [part.strip() for part in value.split(",")] if value else []
        elif isinstance(value, (list, tuple)):
            parts = list(value)
        else:
            return value
        return [parse_item(part) if isinstance(part, str) else part for part in parts]

    def encode(value: Any) -> Any:
        return ",".join(_encode_json(item) if isinstance(item, (dict, list)) else _scalar_text(item) for item in value)

    # Repeated query keys arrive as a list of strings
    repeated = ArrayNode(PrimitiveNode(Kind.STRING))
    return _string_encoded(node, "ArrayQuery", CoercionTag.ARRAY_QUERY, decode, encode, repeated)


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def numeric(node: PrimitiveNode) -> WrapperNode:
    """Carry a number as a numeric-pattern string; decoding checks the original bounds."""
    inner = PrimitiveNode(Kind.STRING, Constraints(pattern=NUMERIC_PATTERN, format="numeric"))

    def decode(value: Any) -> Any:
        return _parse_number(value) if isinstance(value, str) else value

    return WrapperNode(
        Kind.CODEC,
        inner,
        Codec(decode, _scalar_text, output=node),
        coercion=CoercionTag.NUMERIC,
        title=node.title,
        description=node.description,
    )


def boolean_string(node: PrimitiveNode) -> WrapperNode:
    """Accept a boolean or the strings "true"/"false"."""
    inner = CompositionNode(
        Kind.ANY_OF,
        (PrimitiveNode(Kind.BOOLEAN), PrimitiveNode(Kind.STRING, Constraints(format="boolean"))),
    )

    def decode(value: Any) -> Any:
        return _parse_boolean(value) if isinstance(value, str) else value

    return WrapperNode(
        Kind.CODEC,
        inner,
        Codec(decode, _scalar_text, output=node),
        coercion=CoercionTag.BOOLEAN_STRING,
        title=node.title,
        description=node.description,
    )


CoercionRules = Tuple[ReplaceRule, ...]


@lru_cache(maxsize=None)
def string_to_structure_coercions() -> CoercionRules:
    """Nested objects and arrays may arrive as JSON text; the root never does."""
    return (
        ReplaceRule(t.obj(), object_string, exclude_root=True),
        ReplaceRule(t.array(t.any_type()), array_string, exclude_root=True),
    )


@lru_cache(maxsize=None)
def query_coercions() -> CoercionRules:
    """Query transport: nested objects as JSON text, arrays as comma lists."""
    return (
        ReplaceRule(t.obj(), object_string, exclude_root=True),
        ReplaceRule(t.array(t.any_type()), array_query, exclude_root=True),
    )


@lru_cache(maxsize=None)
def query_scalar_coercions() -> CoercionRules:
    """Query values are text: numbers and booleans down to the first nested object."""
    return (
        ReplaceRule(t.number(), numeric, until_object_found=True),
        ReplaceRule(t.integer(), numeric, until_object_found=True),
        ReplaceRule(t.boolean(), boolean_string, until_object_found=True),
    )


@lru_cache(maxsize=None)
def coerce_primitive_root() -> CoercionRules:
    """A bare Number or Boolean root travels as a string."""
    return (
        ReplaceRule(t.number(), numeric, root_only=True),
        ReplaceRule(t.boolean(), boolean_string, root_only=True),
    )


@lru_cache(maxsize=None)
def coerce_form_data() -> CoercionRules:
    """Multipart fields: only first-level objects and arrays arrive as JSON text."""
    return (
        ReplaceRule(t.obj(), object_string, only_first=Kind.OBJECT, exclude_root=True),
        ReplaceRule(t.array(t.any_type()), array_string, only_first=Kind.ARRAY, exclude_root=True),
    )
