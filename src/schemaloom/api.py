"""Public API for the schemaloom engine.

The transport layer should use these functions instead of importing from
kernel modules or _internal.
"""

from itertools import islice
from typing import Any, Mapping, Optional, Tuple, Union

from schemaloom.adapter import (
    StandardValidator,
    Validator,
    has_bridge,
    is_native,
    to_validator,
    try_convert_to_native,
)
from schemaloom.codes import Kind
from schemaloom.config import get_config
from schemaloom.contracts import ValidationResult
from schemaloom.kernel.capability import has_any_type, has_type
from schemaloom.kernel.coercions import (
    coerce_form_data,
    coerce_primitive_root,
    query_coercions,
    query_scalar_coercions,
    string_to_structure_coercions,
)
from schemaloom.kernel.compiler import CompiledValidator, compile_schema
from schemaloom.kernel.errors import DecodeError
from schemaloom.kernel.nodes import RefNode
from schemaloom.kernel.replace import ReplaceRule, replace_schema
from schemaloom.kernel.resolve import SchemaRegistry, resolve_schema
from schemaloom.kernel.standard import is_standard_schema, read_result

Transport = str  # "json" | "form" | "query"


def _is_validator(value: Any) -> bool:
    return isinstance(value, (CompiledValidator, StandardValidator))


def validate_value(schema: Union[Any, Validator], value: Any) -> ValidationResult:
    """Validate (and decode) `value` against a schema or a ready validator.

    Compiled validators decode the value; standard validators return the
    value produced by the foreign validate(). Issues are capped at the
    configured max_issues.

    Raises:
        UnsupportedSchemaError: If no validator can be built for `schema`.
    """
    validator = schema if _is_validator(schema) else to_validator(schema)
    max_issues = get_config().max_issues

    if isinstance(validator, StandardValidator):
        result, issues = read_result(validator.validate(value))
        if issues:
            return ValidationResult(ok=False, issues=issues[:max_issues], validator=validator.kind)
        return ValidationResult(ok=True, value=result, validator=validator.kind)

    if not validator.check(value):
        issues = list(islice(validator.errors(value), max_issues))
        return ValidationResult(ok=False, issues=issues, validator=validator.kind)
    try:
        decoded = validator.decode(value, max_issues=max_issues)
    except DecodeError as exc:
        return ValidationResult(ok=False, issues=exc.issues[:max_issues], validator=validator.kind)
    return ValidationResult(ok=True, value=decoded, validator=validator.kind)


def _dereference_root(node: Any) -> Any:
    seen = set()
    while isinstance(node, RefNode) and node.target is not None and id(node) not in seen:
        seen.add(id(node))
        node = node.target
    return node


def prepare_schema(
    schema: Any,
    transport: Transport = "json",
    models: Optional[Mapping[str, Any]] = None,
    modules: Optional[Mapping[str, Any]] = None,
) -> Tuple[Any, Optional[Validator]]:
    """Resolve a route schema and apply the coercions its transport needs.

    - "form": multipart bodies; only applied when the schema reaches a File
      or Files node, otherwise bodies are treated as JSON.
    - "query": numbers and booleans as text down to the first nested object,
      nested objects as JSON text, arrays as comma lists, then a primitive
      root as a string.
    - "json": no rewrite.

    Returns (schema, validator); both are None when the name does not resolve.
    """
    if transport not in ("json", "form", "query"):
        raise ValueError(f"Unknown transport: {transport!r}")

    resolved = resolve_schema(schema, models, modules)
    if resolved is None:
        return None, None

    native = try_convert_to_native(resolved)
    if native is not None:
        native = _dereference_root(native)
        if transport == "form" and has_any_type((Kind.FILE, Kind.FILES), native):
            native = replace_schema(native, coerce_form_data())
        elif transport == "query":
            native = replace_schema(native, query_scalar_coercions())
            native = replace_schema(native, query_coercions())
            native = replace_schema(native, coerce_primitive_root())
        return native, to_validator(native)

    return resolved, to_validator(resolved)


__all__ = [
    "CompiledValidator",
    "ReplaceRule",
    "SchemaRegistry",
    "StandardValidator",
    "ValidationResult",
    "coerce_form_data",
    "coerce_primitive_root",
    "compile_schema",
    "has_bridge",
    "has_type",
    "is_native",
    "is_standard_schema",
    "prepare_schema",
    "query_coercions",
    "query_scalar_coercions",
    "replace_schema",
    "resolve_schema",
    "string_to_structure_coercions",
    "to_validator",
    "try_convert_to_native",
    "validate_value",
]
