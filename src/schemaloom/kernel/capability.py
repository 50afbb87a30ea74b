"""Detect whether a schema graph reaches a node of a given kind.

The walk follows object properties, array items, composition branches,
wrapper inner nodes and reference targets. It uses an explicit work list and
an identity-keyed visited set, so cyclic graphs terminate and nesting depth is
not bounded by the interpreter stack.
"""

from typing import Any, List, Set

from schemaloom.codes import Kind
from schemaloom.kernel.nodes import ForeignNode, RefNode, SchemaNode


def _kind_name(kind: "Kind | str") -> str:
    if isinstance(kind, Kind):
        return kind.value
    return str(kind)


def has_type(kind: "Kind | str", schema: Any) -> bool:
    """Return True if `schema` reaches a node whose kind is `kind`.

    `kind` is a Kind or its value ("File", "Files", "String", ...). Foreign
    nodes match on their declared kind and are not descended into.
    """
    if not isinstance(schema, SchemaNode):
        return False

    wanted = _kind_name(kind)
    visited: Set[int] = set()
    stack: List[SchemaNode] = [schema]

    while stack:
        node = stack.pop()
        if id(node) in visited:
            continue
        visited.add(id(node))

        if isinstance(node, ForeignNode):
            if node.declared_kind == wanted:
                return True
            continue

        if node.kind.value == wanted:
            return True

        if isinstance(node, RefNode):
            target = node.target
            if target is not None and id(target) not in visited:
                stack.append(target)
            continue

        # Reverse so the first child is examined first
        for child in reversed(node.children()):
            if child is not None and id(child) not in visited:
                stack.append(child)

    return False


def has_any_type(kinds, schema: Any) -> bool:
    """Return True if `schema` reaches any of `kinds`."""
    return any(has_type(kind, schema) for kind in kinds)
