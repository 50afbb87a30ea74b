"""Process-wide bridging collaborator.

The bridge turns schemas from other ecosystems into native nodes. The default
bridge is backed by pydantic: model classes and TypeAdapters are rendered to
JSON Schema, and JSON Schema documents are converted with
`schemaloom._internal.json_schema`. Availability is probed once per process;
an unavailable bridge is not an error anywhere in the engine.
"""

import importlib
import inspect
from collections.abc import Mapping
from typing import Any, Callable, Optional, Union

import structlog

from schemaloom.codes import Kind
from schemaloom.config import get_config
from schemaloom.kernel.nodes import PrimitiveNode, SchemaNode
from schemaloom.kernel.standard import is_standard_schema
from schemaloom._internal.json_schema import UnsupportedKeyword, from_json_schema, is_json_schema

logger = structlog.get_logger(__name__)


class _Unsupported:
    """Sentinel returned by convert() when a schema has no native form."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSUPPORTED"

    def __bool__(self) -> bool:
        return False


UNSUPPORTED = _Unsupported()

ConvertResult = Union[SchemaNode, _Unsupported]


def _json_schema_of(schema: Any, pydantic: Any) -> Optional[Mapping[str, Any]]:
    """Render `schema` as a JSON Schema document, or None when it is not a pydantic type."""
    if inspect.isclass(schema) and issubclass(schema, pydantic.BaseModel):
        return schema.model_json_schema()
    if isinstance(schema, pydantic.TypeAdapter):
        return schema.json_schema()
    if isinstance(schema, Mapping) and not is_standard_schema(schema) and is_json_schema(schema):
        return schema
    return None


class SchemaBridge:
    """Lazily probed converter handle.

    `probe()` runs once and caches the result; concurrent first calls compute
    the same value.
    """

    def __init__(self, module_name: str = "pydantic"):
        self.module_name = module_name
        self._probed = False
        self._module: Any = None

    @property
    def available(self) -> bool:
        return self.probe()

    def probe(self) -> bool:
        """Return True if the bridge can convert schemas."""
        if not self._probed:
            module = None
            if get_config().bridge_enabled:
                try:
                    module = importlib.import_module(self.module_name)
                except ImportError:
                    module = None
            self._module = module
            self._probed = True
            logger.debug("bridge.probe", module=self.module_name, available=module is not None)
        return self._module is not None

    def convert(self, schema: Any) -> ConvertResult:
        """Convert `schema` into a native node, or return UNSUPPORTED.

        Raises whatever the underlying library raises on a malformed schema;
        callers treat any exception like UNSUPPORTED.
        """
        if not self.probe():
            return UNSUPPORTED
        document = _json_schema_of(schema, self._module)
        if document is None:
            return UNSUPPORTED
        try:
            node = from_json_schema(document)
        except UnsupportedKeyword as exc:
            logger.debug("bridge.unsupported_keyword", keyword=exc.keyword)
            return UNSUPPORTED
        if isinstance(node, PrimitiveNode) and node.kind is Kind.NEVER:
            return UNSUPPORTED
        return node


_bridge: Optional[SchemaBridge] = None


def get_bridge() -> SchemaBridge:
    """Return the process-wide bridge, creating it on first use."""
    global _bridge
    if _bridge is None:
        _bridge = SchemaBridge()
    return _bridge


def set_bridge(bridge: Optional[SchemaBridge]) -> None:
    """Install a bridge (None restores the default on next use)."""
    global _bridge
    _bridge = bridge


class CallableBridge(SchemaBridge):
    """Bridge backed by a plain `convert(schema) -> node | UNSUPPORTED` function."""

    def __init__(self, convert: Callable[[Any], ConvertResult]):
        super().__init__(module_name=getattr(convert, "__module__", None) or "callable")
        self._convert = convert
        self._probed = True
        self._module = convert

    def convert(self, schema: Any) -> ConvertResult:
        return self._convert(schema)
