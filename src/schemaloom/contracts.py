"""Public result models returned to the transport layer."""

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from schemaloom.codes import IssueCode


class ValidationIssue(BaseModel):
    """A single validation issue."""
    message: str
    path: Optional[str] = None  # JSON-pointer style, e.g. "/user/name"; None for foreign issues without a path
    code: IssueCode = IssueCode.FOREIGN_ISSUE

    model_config = ConfigDict(frozen=True)


class ValidationResult(BaseModel):
    """Outcome of validating one value."""
    ok: bool
    value: Any = None  # Decoded value when ok
    issues: List[ValidationIssue] = Field(default_factory=list)
    validator: str  # "compiled" | "standard"
