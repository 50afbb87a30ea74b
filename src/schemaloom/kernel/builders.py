"""Constructors for native schema nodes.

    from schemaloom.kernel import builders as t

    user = t.obj({"name": t.string(min_length=1), "avatar": t.optional(t.file())})
"""

from typing import Any, Callable, Iterable, Mapping, Optional

from schemaloom.codes import Kind
from schemaloom.kernel.nodes import (
    ArrayNode,
    Codec,
    CompositionNode,
    Constraints,
    ForeignNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaNode,
    WrapperNode,
)


def _primitive(kind: Kind, constraints: Mapping[str, Any]) -> PrimitiveNode:
    return PrimitiveNode(kind, Constraints(**constraints) if constraints else Constraints())


def string(**constraints) -> PrimitiveNode:
    return _primitive(Kind.STRING, constraints)


def number(**constraints) -> PrimitiveNode:
    return _primitive(Kind.NUMBER, constraints)


def integer(**constraints) -> PrimitiveNode:
    return _primitive(Kind.INTEGER, constraints)


def boolean(**constraints) -> PrimitiveNode:
    return _primitive(Kind.BOOLEAN, constraints)


def null() -> PrimitiveNode:
    return PrimitiveNode(Kind.NULL)


def any_type() -> PrimitiveNode:
    return PrimitiveNode(Kind.ANY)


def never() -> PrimitiveNode:
    return PrimitiveNode(Kind.NEVER)


def file(**constraints) -> PrimitiveNode:
    """Binary upload leaf."""
    return _primitive(Kind.FILE, {"format": "binary", **constraints})


def files(min_items: Optional[int] = None, max_items: Optional[int] = None) -> ArrayNode:
    """Array of uploads, with its own kind."""
    return ArrayNode(file(), min_items=min_items, max_items=max_items, kind=Kind.FILES)


def obj(properties: Optional[Mapping[str, SchemaNode]] = None, *, additional_properties: bool = True) -> ObjectNode:
    return ObjectNode(dict(properties or {}), additional_properties=additional_properties)


def array(items: SchemaNode, *, min_items: Optional[int] = None, max_items: Optional[int] = None,
          unique_items: bool = False) -> ArrayNode:
    return ArrayNode(items, min_items=min_items, max_items=max_items, unique_items=unique_items)


def union(branches: Iterable[SchemaNode]) -> CompositionNode:
    return CompositionNode(Kind.ANY_OF, tuple(branches))


def one_of(branches: Iterable[SchemaNode]) -> CompositionNode:
    return CompositionNode(Kind.ONE_OF, tuple(branches))


def all_of(branches: Iterable[SchemaNode]) -> CompositionNode:
    return CompositionNode(Kind.ALL_OF, tuple(branches))


def optional(inner: SchemaNode) -> WrapperNode:
    return WrapperNode(Kind.OPTIONAL, inner)


def nullable(inner: SchemaNode) -> WrapperNode:
    return WrapperNode(Kind.NULLABLE, inner)


def codec(inner: SchemaNode, decode: Callable[[Any], Any], encode: Callable[[Any], Any],
          output: Optional[SchemaNode] = None, **meta) -> WrapperNode:
    return WrapperNode(Kind.CODEC, inner, Codec(decode, encode, output), **meta)


def ref(name: str, defs: Mapping[str, SchemaNode]) -> RefNode:
    return RefNode(name, defs)


def foreign(payload: Any, kind: Optional[str] = None) -> ForeignNode:
    return ForeignNode(payload, kind)
