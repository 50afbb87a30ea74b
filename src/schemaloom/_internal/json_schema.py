"JSON Schema documents to native schema nodes."

from typing import Any, Dict, List, Mapping, Optional

from schemaloom.codes import Kind
from schemaloom.kernel import builders as t
from schemaloom.kernel.nodes import (
    ArrayNode,
    Constraints,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaNode,
)

# Keywords with no native counterpart; a document using any of them is not converted.
UNSUPPORTED_KEYWORDS = frozenset({
    "not",
    "if",
    "then",
    "else",
    "prefixItems",
    "patternProperties",
    "dependentSchemas",
    "dependentRequired",
    "unevaluatedProperties",
    "unevaluatedItems",
    "contains",
    "propertyNames",
    "$dynamicRef",
})

_DEF_KEYS = ("$defs", "definitions")

_STRING_KEYS = {
    "minLength": "min_length",
    "maxLength": "max_length",
    "pattern": "pattern",
    "format": "format",
}

_NUMBER_KEYS = {
    "minimum": "minimum",
    "maximum": "maximum",
    "exclusiveMinimum": "exclusive_minimum",
    "exclusiveMaximum": "exclusive_maximum",
    "multipleOf": "multiple_of",
}


class UnsupportedKeyword(ValueError):
    """Raised when a document uses a keyword the native model cannot express."""
    def __init__(self, keyword: str, where: str):
        self.keyword = keyword
        super().__init__(f"JSON Schema keyword '{keyword}' is not supported (at {where or '#'})")


def _ref_name(ref: str) -> str:
    for prefix in ("#/$defs/", "#/definitions/"):
        if ref.startswith(prefix):
            return ref[len(prefix):].replace("~1", "/").replace("~0", "~")
    raise UnsupportedKeyword("$ref", ref)


def _meta(doc: Mapping[str, Any]) -> Dict[str, Any]:
    return {"title": doc.get("title"), "description": doc.get("description")}


def _with_meta(node: SchemaNode, doc: Mapping[str, Any]) -> SchemaNode:
    meta = _meta(doc)
    if not any(meta.values()) or isinstance(node, RefNode):
        return node
    # Nodes are frozen; rebuild with the metadata set
    fields = {name: getattr(node, name) for name in node.__dataclass_fields__ if node.__dataclass_fields__[name].init}
    fields.update({key: value for key, value in meta.items() if value is not None})
    return type(node)(**fields)


class _Converter:
    def __init__(self, defs: Dict[str, SchemaNode]):
        self.defs = defs

    def convert(self, doc: Any, where: str) -> SchemaNode:
        if doc is True:
            return t.any_type()
        if doc is False:
            return t.never()
        if not isinstance(doc, Mapping):
            raise UnsupportedKeyword(type(doc).__name__, where)

        for keyword in doc:
            if keyword in UNSUPPORTED_KEYWORDS:
                raise UnsupportedKeyword(keyword, where)

        node = self._convert(doc, where)
        if doc.get("nullable") is True:
            node = t.nullable(node)
        return node

    def _convert(self, doc: Mapping[str, Any], where: str) -> SchemaNode:
        if "$ref" in doc:
            return RefNode(_ref_name(doc["$ref"]), self.defs)

        for keyword, build in (("anyOf", t.union), ("oneOf", t.one_of), ("allOf", t.all_of)):
            if keyword in doc:
                branches = [self.convert(branch, f"{where}/{keyword}/{i}") for i, branch in enumerate(doc[keyword])]
                if len(branches) == 1:
                    return _with_meta(branches[0], doc)
                return _with_meta(build(branches), doc)

        if "const" in doc:
            return self._leaf(doc, _kind_of_values([doc["const"]]), enum=(doc["const"],))
        if "enum" in doc:
            return self._leaf(doc, _kind_of_values(doc["enum"]), enum=tuple(doc["enum"]))

        declared = doc.get("type")
        if isinstance(declared, list):
            branches = [self._typed(dict(doc, type=name), name, where) for name in declared]
            return branches[0] if len(branches) == 1 else t.union(branches)
        if declared is None:
            if "properties" in doc:
                declared = "object"
            elif "items" in doc:
                declared = "array"
            else:
                return _with_meta(t.any_type(), doc)
        return self._typed(doc, declared, where)

    def _typed(self, doc: Mapping[str, Any], declared: str, where: str) -> SchemaNode:
        if declared == "object":
            return self._object(doc, where)
        if declared == "array":
            return self._array(doc, where)
        if declared == "string":
            if doc.get("format") == "binary" or doc.get("contentMediaType") == "application/octet-stream":
                return _with_meta(t.file(), doc)
            return self._leaf(doc, Kind.STRING)
        if declared == "integer":
            return self._leaf(doc, Kind.INTEGER)
        if declared == "number":
            return self._leaf(doc, Kind.NUMBER)
        if declared == "boolean":
            return self._leaf(doc, Kind.BOOLEAN)
        if declared == "null":
            return _with_meta(t.null(), doc)
        raise UnsupportedKeyword(f"type={declared}", where)

    def _leaf(self, doc: Mapping[str, Any], kind: Kind, enum: Optional[tuple] = None) -> PrimitiveNode:
        constraints: Dict[str, Any] = {}
        if kind is Kind.STRING:
            keys = _STRING_KEYS
        elif kind in (Kind.NUMBER, Kind.INTEGER):
            keys = _NUMBER_KEYS
        else:
            keys = {}
        for source, target in keys.items():
            if source in doc and not isinstance(doc[source], bool):
                constraints[target] = doc[source]
        if enum is not None:
            constraints["enum"] = enum
        if "default" in doc:
            constraints["default"] = doc["default"]
        return PrimitiveNode(kind, Constraints(**constraints), **{k: v for k, v in _meta(doc).items() if v is not None})

    def _object(self, doc: Mapping[str, Any], where: str) -> ObjectNode:
        required = set(doc.get("required") or ())
        properties: Dict[str, SchemaNode] = {}
        for name, prop in (doc.get("properties") or {}).items():
            node = self.convert(prop, f"{where}/properties/{name}")
            properties[name] = node if name in required else t.optional(node)
        return ObjectNode(
            properties,
            additional_properties=doc.get("additionalProperties", True) is not False,
            **{k: v for k, v in _meta(doc).items() if v is not None},
        )

    def _array(self, doc: Mapping[str, Any], where: str) -> ArrayNode:
        items_doc = doc.get("items", True)
        items = self.convert(items_doc, f"{where}/items")
        is_files = isinstance(items, PrimitiveNode) and items.kind is Kind.FILE
        return ArrayNode(
            items,
            min_items=doc.get("minItems"),
            max_items=doc.get("maxItems"),
            unique_items=bool(doc.get("uniqueItems", False)),
            kind=Kind.FILES if is_files else Kind.ARRAY,
            **{k: v for k, v in _meta(doc).items() if v is not None},
        )


def _kind_of_values(values: List[Any]) -> Kind:
    if values and all(isinstance(v, str) for v in values):
        return Kind.STRING
    if values and all(isinstance(v, bool) for v in values):
        return Kind.BOOLEAN
    if values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return Kind.INTEGER
    if values and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return Kind.NUMBER
    return Kind.ANY


def from_json_schema(document: Mapping[str, Any]) -> SchemaNode:
    """Convert a JSON Schema document into a native node.

    Definitions under `$defs` (or `definitions`) are converted into one shared
    table; `$ref`s become RefNodes into it, so recursive models stay lazy.
    Properties not listed in `required` are wrapped in Optional.

    Raises:
        UnsupportedKeyword: If the document uses a keyword that has no native
            counterpart.
    """
    defs: Dict[str, SchemaNode] = {}
    converter = _Converter(defs)
    for key in _DEF_KEYS:
        for name, definition in (document.get(key) or {}).items():
            defs[name] = converter.convert(definition, f"#/{key}/{name}")
    root = {k: v for k, v in document.items() if k not in _DEF_KEYS and k != "$schema"}
    return converter.convert(root, "#")


def is_json_schema(value: Any) -> bool:
    """Heuristic: a mapping carrying at least one JSON Schema keyword."""
    if not isinstance(value, Mapping):
        return False
    return any(key in value for key in (
        "type", "properties", "items", "$ref", "anyOf", "oneOf", "allOf", "enum", "const", "$defs", "$schema",
    ))


__all__ = [
    "UNSUPPORTED_KEYWORDS",
    "UnsupportedKeyword",
    "from_json_schema",
    "is_json_schema",
]
