"""Tagged-variant schema nodes.

Every variant carries an explicit `kind` (see `schemaloom.codes.Kind`) and an
optional coercion tag. Nodes are frozen dataclasses compared and hashed by
identity: the kernel keys visited sets and validator caches on node identity,
and never mutates a node after construction. Rewrites build new nodes for
changed branches and share unchanged sub-nodes.

Object properties are held in a plain dict so that self-referential graphs can
be closed after construction (``node.properties["self"] = node``).
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from schemaloom.codes import (
    COMPOSITION_KINDS,
    PRIMITIVE_KINDS,
    WRAPPER_KINDS,
    CoercionTag,
    Kind,
)


class Constraints(BaseModel):
    """Leaf metadata. Ignored when matching nodes for rewrites."""
    format: Optional[str] = None
    pattern: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusive_minimum: Optional[float] = None
    exclusive_maximum: Optional[float] = None
    multiple_of: Optional[float] = None
    enum: Optional[Tuple[Any, ...]] = None
    default: Any = None

    model_config = ConfigDict(frozen=True, extra="forbid")


NO_CONSTRAINTS = Constraints()


@dataclass(frozen=True)
class Codec:
    """Decode/encode pair attached to a codec wrapper.

    `output` describes the decoded value. When set, decoded values are
    validated (and decoded further) against it.
    """
    decode: Callable[[Any], Any]
    encode: Callable[[Any], Any]
    output: Optional["SchemaNode"] = None


@dataclass(frozen=True, eq=False, repr=False, kw_only=True)
class SchemaNode:
    """Base class of all schema node variants."""
    coercion: Optional[CoercionTag] = None
    title: Optional[str] = None
    description: Optional[str] = None

    def children(self) -> Tuple[Optional["SchemaNode"], ...]:
        """Direct sub-nodes that a rewrite may replace, in a stable order."""
        return ()

    def with_children(self, children: Sequence[Optional["SchemaNode"]]) -> "SchemaNode":
        """Return a copy of this node holding `children` (same order as children())."""
        return self

    def __repr__(self) -> str:
        tag = f", coercion={self.coercion.value}" if self.coercion else ""
        return f"{type(self).__name__}(kind={self.kind.value}{tag})"  # type: ignore[attr-defined]


@dataclass(frozen=True, eq=False, repr=False)
class PrimitiveNode(SchemaNode):
    kind: Kind
    constraints: Constraints = NO_CONSTRAINTS

    def __post_init__(self):
        if self.kind not in PRIMITIVE_KINDS:
            raise ValueError(f"{self.kind.value} is not a primitive kind")


@dataclass(frozen=True, eq=False, repr=False)
class ObjectNode(SchemaNode):
    properties: Dict[str, Optional[SchemaNode]] = field(default_factory=dict)
    additional_properties: bool = True
    kind: Kind = field(default=Kind.OBJECT, init=False)

    @property
    def required(self) -> Tuple[str, ...]:
        """Names of properties that must be present."""
        return tuple(
            name for name, node in self.properties.items()
            if node is not None and not (isinstance(node, WrapperNode) and node.kind is Kind.OPTIONAL)
        )

    def children(self):
        return tuple(self.properties.values())

    def with_children(self, children):
        return replace(self, properties=dict(zip(self.properties.keys(), children)))

    def __repr__(self) -> str:
        tag = f", coercion={self.coercion.value}" if self.coercion else ""
        return f"ObjectNode(keys={list(self.properties)}{tag})"


@dataclass(frozen=True, eq=False, repr=False)
class ArrayNode(SchemaNode):
    items: Optional[SchemaNode]
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    unique_items: bool = False
    kind: Kind = Kind.ARRAY

    def __post_init__(self):
        if self.kind not in (Kind.ARRAY, Kind.FILES):
            raise ValueError(f"{self.kind.value} is not an array kind")

    def children(self):
        return (self.items,)

    def with_children(self, children):
        return replace(self, items=children[0])


@dataclass(frozen=True, eq=False, repr=False)
class CompositionNode(SchemaNode):
    kind: Kind
    branches: Tuple[Optional[SchemaNode], ...] = ()

    def __post_init__(self):
        if self.kind not in COMPOSITION_KINDS:
            raise ValueError(f"{self.kind.value} is not a composition kind")
        if not isinstance(self.branches, tuple):
            object.__setattr__(self, "branches", tuple(self.branches))

    def children(self):
        return self.branches

    def with_children(self, children):
        return replace(self, branches=tuple(children))


@dataclass(frozen=True, eq=False, repr=False)
class WrapperNode(SchemaNode):
    kind: Kind
    inner: Optional[SchemaNode]
    codec: Optional[Codec] = None

    def __post_init__(self):
        if self.kind not in WRAPPER_KINDS:
            raise ValueError(f"{self.kind.value} is not a wrapper kind")
        if (self.kind is Kind.CODEC) != (self.codec is not None):
            raise ValueError("A codec is required on, and only on, Codec wrappers")

    def children(self):
        return (self.inner,)

    def with_children(self, children):
        return replace(self, inner=children[0])


@dataclass(frozen=True, eq=False, repr=False)
class RefNode(SchemaNode):
    """Named indirection into a definitions table, resolved at use time."""
    name: str
    defs: Mapping[str, SchemaNode] = field(default_factory=dict)
    kind: Kind = field(default=Kind.REF, init=False)

    @property
    def target(self) -> Optional[SchemaNode]:
        return self.defs.get(self.name)

    def __repr__(self) -> str:
        return f"RefNode(name={self.name!r})"


@dataclass(frozen=True, eq=False, repr=False)
class ForeignNode(SchemaNode):
    """Schema from another ecosystem; never introspected structurally."""
    payload: Any
    declared_kind: Optional[str] = None
    kind: Kind = field(default=Kind.FOREIGN, init=False)

    def __repr__(self) -> str:
        return f"ForeignNode(declared_kind={self.declared_kind!r})"


def structural_kind(node: SchemaNode) -> Kind:
    """Kind used for matching; codec wrappers take the kind of what they wrap."""
    seen = set()
    while isinstance(node, WrapperNode) and node.kind is Kind.CODEC and node.inner is not None:
        if id(node) in seen:
            break
        seen.add(id(node))
        node = node.inner
    return node.kind


def is_node(value: Any) -> bool:
    return isinstance(value, SchemaNode)
