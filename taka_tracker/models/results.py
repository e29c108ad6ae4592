"""
Validation and Command Result Models

Every command the facade accepts answers with a CommandResult instead of
raising. Callers inspect `error_kind` to tell a rejected input (the user
can fix it) from a storage failure (the data may not survive a restart).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_category')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (types, required fields, positive amounts)
    Stage 2: Semantic validation (vocabulary and date checks, warnings only)
    """

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]


class ErrorKind(str, Enum):
    """Why a command did not fully succeed."""
    VALIDATION = "validation"  # input rejected, nothing changed
    STORAGE = "storage"        # state changed in memory but was not persisted
    LOCKED = "locked"          # the access gate is closed


class CommandResult(BaseModel):
    """
    Outcome of one command.

    applied:   the in-memory state changed
    persisted: the change reached the store

    A command on an unknown id is neither applied nor an error.
    """

    command: str = Field(
        ...,
        description="Name of the command that produced this result"
    )
    applied: bool = Field(
        default=False,
        description="Did the in-memory state change?"
    )
    persisted: bool = Field(
        default=False,
        description="Did the change reach the persistent store?"
    )
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="Validation issues (errors and warnings)"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Id or key of the entity the command touched"
    )
    budget_alert: bool = Field(
        default=False,
        description="The command pushed a category to or past its budget"
    )
    outcome: Optional[str] = Field(
        default=None,
        description="Command-specific outcome code (e.g. the PIN gate outcome)"
    )

    @property
    def ok(self) -> bool:
        """Nothing went wrong (a benign no-op also counts as ok)."""
        return self.error_kind is None

    @classmethod
    def rejected(cls, command: str, issues: list[ValidationIssue]) -> "CommandResult":
        errors = [issue.message for issue in issues if issue.severity == "error"]
        return cls(
            command=command,
            error_kind=ErrorKind.VALIDATION,
            message="; ".join(errors) or "Invalid input",
            issues=issues,
        )

    @classmethod
    def locked(cls, command: str) -> "CommandResult":
        return cls(
            command=command,
            error_kind=ErrorKind.LOCKED,
            message="The app is locked",
        )
