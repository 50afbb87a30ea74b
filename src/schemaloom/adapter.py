"""Pick the fastest validator available for a schema.

Priority:
1. Native schema node -> compiled validator.
2. Bridge converts the schema -> compiled validator over the converted node.
3. Standard validation capability -> StandardValidator around its validate().
4. Otherwise UnsupportedSchemaError.
"""

import weakref
from typing import Any, Callable, Iterator, Optional, Union

import structlog

from schemaloom.config import get_config
from schemaloom.contracts import ValidationIssue
from schemaloom.kernel.compiler import CompiledValidator, compile_schema
from schemaloom.kernel.errors import UnsupportedSchemaError
from schemaloom.kernel.nodes import SchemaNode
from schemaloom.kernel.standard import is_standard_schema, read_result, standard_validate_of
from schemaloom._internal.bridge import get_bridge

logger = structlog.get_logger(__name__)


class StandardValidator:
    """Validator that defers to a foreign schema's own validate function."""

    kind = "standard"

    def __init__(self, schema: Any, validate: Callable[[Any], Any]):
        self.schema = schema
        self.validate = validate

    def check(self, value: Any) -> bool:
        _, issues = read_result(self.validate(value))
        return issues is None

    def errors(self, value: Any) -> Iterator[ValidationIssue]:
        _, issues = read_result(self.validate(value))
        return iter(issues or ())


Validator = Union[CompiledValidator, StandardValidator]

# Keyed by schema identity; entries go away with the schema
_compiled_cache: "weakref.WeakKeyDictionary[Any, CompiledValidator]" = weakref.WeakKeyDictionary()


def is_native(schema: Any) -> bool:
    """True for native schema nodes."""
    return isinstance(schema, SchemaNode)


def try_convert_to_native(schema: Any) -> Optional[SchemaNode]:
    """Return `schema` as a native node, or None when no conversion is available.

    Conversion failures are logged and swallowed.
    """
    if is_native(schema):
        return schema
    bridge = get_bridge()
    if not bridge.probe():
        return None
    try:
        converted = bridge.convert(schema)
    except Exception as exc:  # Any bridge failure means "try the next strategy"
        logger.debug("bridge.convert_failed", schema_type=type(schema).__name__, error=str(exc))
        return None
    if not isinstance(converted, SchemaNode):
        logger.debug("bridge.convert_unsupported", schema_type=type(schema).__name__)
        return None
    return converted


def _compile_cached(schema: Any, node: SchemaNode) -> CompiledValidator:
    if not get_config().cache_validators:
        return compile_schema(node)
    try:
        cached = _compiled_cache.get(schema)
    except TypeError:  # Not weak-referenceable or unhashable
        return compile_schema(node)
    if cached is None:
        cached = compile_schema(node)
        _compiled_cache[schema] = cached
    return cached


def to_validator(schema: Any) -> Validator:
    """Return a validator for `schema`.

    Raises:
        UnsupportedSchemaError: If the schema is not native, cannot be
            converted, and does not expose the standard capability.
    """
    if is_native(schema):
        logger.debug("to_validator.strategy", strategy="native")
        return _compile_cached(schema, schema)

    converted = try_convert_to_native(schema)
    if converted is not None:
        logger.debug("to_validator.strategy", strategy="bridge", schema_type=type(schema).__name__)
        return _compile_cached(schema, converted)

    if is_standard_schema(schema):
        validate = standard_validate_of(schema)
        if validate is not None:
            logger.debug("to_validator.strategy", strategy="standard", schema_type=type(schema).__name__)
            return StandardValidator(schema, validate)

    raise UnsupportedSchemaError(schema)


def has_bridge() -> bool:
    """True if the bridging collaborator is available. Never converts anything."""
    return get_bridge().probe()


def clear_validator_cache() -> None:
    _compiled_cache.clear()
