"""schemaloom: schema rewriting, capability detection and validator compilation."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("schemaloom")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from schemaloom.api import (
    ReplaceRule,
    SchemaRegistry,
    coerce_form_data,
    coerce_primitive_root,
    compile_schema,
    has_bridge,
    has_type,
    is_native,
    is_standard_schema,
    prepare_schema,
    query_coercions,
    query_scalar_coercions,
    replace_schema,
    resolve_schema,
    string_to_structure_coercions,
    to_validator,
    try_convert_to_native,
    validate_value,
)
from schemaloom.codes import CoercionTag, IssueCode, Kind
from schemaloom.contracts import ValidationIssue, ValidationResult
from schemaloom.kernel.errors import (
    DecodeError,
    EncodeError,
    KernelError,
    ReplaceConfigError,
    UnsupportedSchemaError,
)

__all__ = [
    "__version__",
    "CoercionTag",
    "DecodeError",
    "EncodeError",
    "IssueCode",
    "KernelError",
    "Kind",
    "ReplaceConfigError",
    "ReplaceRule",
    "SchemaRegistry",
    "UnsupportedSchemaError",
    "ValidationIssue",
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
