"""Exceptions raised by the schema kernel."""

from typing import List, Sequence


class KernelError(Exception):
    """Base exception for kernel errors."""
    pass


class ReplaceConfigError(KernelError, ValueError):
    """Raised when a rewrite rule combines mutually exclusive flags."""
    def __init__(self, first: str, second: str):
        self.conflict = (first, second)
        super().__init__(f"Can't set both {first} and {second}")


class UnsupportedSchemaError(KernelError, TypeError):
    """Raised when no compilation path exists for a schema."""
    def __init__(self, schema: object, detail: str | None = None):
        self.schema = schema
        msg = (
            "Unsupported schema type. Schema must be a native schema node, "
            "be convertible by the installed bridge, or implement the standard "
            "validation capability."
        )
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class _IssueCarrier(KernelError, ValueError):
    """Shared base for errors that carry validation issues."""
    action = "process"

    def __init__(self, issues: Sequence["ValidationIssue"]):  # noqa: F821
        self.issues: List = list(issues)
        if self.issues:
            first = self.issues[0]
            where = first.path or "/"
            msg = f"Unable to {self.action} value: {first.message} at {where}"
            if len(self.issues) > 1:
                msg += f" (+{len(self.issues) - 1} more)"
        else:
            msg = f"Unable to {self.action} value"
        super().__init__(msg)


class DecodeError(_IssueCarrier):
    """Raised when a value cannot be decoded against its schema."""
    action = "decode"


class EncodeError(_IssueCarrier):
    """Raised when an encoded value no longer satisfies its wire schema."""
    action = "encode"
