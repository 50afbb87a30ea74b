"""Standard Validation Capability.

A foreign schema exposes the capability through a structural marker: the
``"~standard"`` key on a mapping, or a ``__standard_schema__`` attribute on any
other object. Its ``validate(value)`` returns ``{"value": ...}`` on success or
``{"issues": [{"message": ..., "path": ...}, ...]}`` on failure; objects with
``value``/``issues`` attributes are accepted as well.
"""

from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Sequence, Tuple

from schemaloom.codes import IssueCode
from schemaloom.contracts import ValidationIssue

STANDARD_KEY = "~standard"
STANDARD_ATTR = "__standard_schema__"

_MISSING = object()


def _marker(schema: Any) -> Any:
    if schema is None:
        return _MISSING
    if isinstance(schema, Mapping):
        return schema.get(STANDARD_KEY, _MISSING)
    return getattr(schema, STANDARD_ATTR, _MISSING)


def _member(holder: Any, name: str) -> Any:
    if isinstance(holder, Mapping):
        return holder.get(name)
    return getattr(holder, name, None)


def is_standard_schema(schema: Any) -> bool:
    """True if `schema` carries the standard marker."""
    return _marker(schema) is not _MISSING


def standard_validate_of(schema: Any) -> Optional[Callable[[Any], Any]]:
    """Return the validate function of a standard schema, or None."""
    marker = _marker(schema)
    if marker is _MISSING:
        return None
    validate = _member(marker, "validate")
    if not callable(validate):
        validate = _member(schema, "validate")
    return validate if callable(validate) else None


def _issue_path(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, Sequence):
        segments = []
        for segment in raw:
            key = _member(segment, "key") if not isinstance(segment, (str, int)) else segment
            segments.append(str(key).replace("~", "~0").replace("/", "~1"))
        return "/" + "/".join(segments) if segments else None
    return str(raw)


def normalize_issue(raw: Any, prefix: str = "") -> ValidationIssue:
    """Convert one foreign issue into a ValidationIssue, prefixing its path."""
    if isinstance(raw, str):
        message, path = raw, None
    else:
        message = str(_member(raw, "message") or "Invalid value")
        path = _issue_path(_member(raw, "path"))
    if prefix:
        path = prefix + (path or "")
    return ValidationIssue(message=message, path=path, code=IssueCode.FOREIGN_ISSUE)


def read_result(result: Any, prefix: str = "") -> Tuple[Any, Optional[List[ValidationIssue]]]:
    """Split a standard validate() result into (value, issues).

    Any `issues` entry other than None marks a failure, even an empty one,
    which is reported as a single generic issue. `issues` is None on success.
    """
    issues = _member(result, "issues")
    if issues is not None:
        normalized = [normalize_issue(issue, prefix) for issue in issues]
        return None, normalized or [normalize_issue({}, prefix)]
    return _member(result, "value"), None
