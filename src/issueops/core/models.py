"""Core data models shared by every layer of the engine.

Wire names follow the persisted JSON layout (``schemaVersion``,
``newState``); Python attribute names are snake_case.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import ActionValidationError


# ---------------------------------------------------------------------------
# Action
# ---------------------------------------------------------------------------


class Action(BaseModel):
    """A request to change one domain's state. Immutable after creation."""

    model_config = ConfigDict(frozen=True)

    domain: str
    type: str
    payload: dict[str, Any]


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class RepositoryRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str


class ActionContext(BaseModel):
    """Who issued an action and when, plus transport identifiers."""

    model_config = ConfigDict(frozen=True)

    username: str
    timestamp: str  # ISO-8601 UTC
    repository: RepositoryRef | None = None
    issue_number: int | None = None
    comment_id: int | None = None


# ---------------------------------------------------------------------------
# State and log
# ---------------------------------------------------------------------------


class VersionedState(BaseModel):
    """Envelope of every persisted domain state blob."""

    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(alias="schemaVersion")
    data: dict[str, Any]


class ActionLogEntry(BaseModel):
    """One line of a domain's append-only ``actions.jsonl``."""

    model_config = ConfigDict(frozen=True)

    action: Action
    timestamp: str
    username: str


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationIssue(BaseModel):
    """A single field failure: where, what was expected, what was found."""

    model_config = ConfigDict(frozen=True)

    path: str
    expected: str
    actual: Any = None

    def __str__(self) -> str:
        return f"{self.path}: expected {self.expected}, got {self.actual!r}"


class ValidationFailure(BaseModel):
    """Structured validation failure returned by the registry."""

    model_config = ConfigDict(frozen=True)

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def message(self) -> str:
        return "; ".join(str(i) for i in self.issues)

    def raise_(self) -> None:
        raise ActionValidationError(self.issues)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Dispatch result
# ---------------------------------------------------------------------------


class DispatchResult(BaseModel):
    """Outcome of one dispatch. ``success`` decides which fields are set."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    new_state: dict[str, Any] | None = Field(default=None, alias="newState")
    error: str | None = None
    validation_issues: list[ValidationIssue] = Field(
        default_factory=list, alias="validationIssues",
    )

    @classmethod
    def ok(cls, new_state: dict[str, Any]) -> DispatchResult:
        return cls(success=True, new_state=new_state)

    @classmethod
    def fail(
        cls,
        error: str,
        issues: list[ValidationIssue] | None = None,
    ) -> DispatchResult:
        return cls(success=False, error=error, validation_issues=issues or [])

    def to_wire(self) -> dict[str, Any]:
        """Dump with wire names, omitting fields that do not apply."""
        return self.model_dump(by_alias=True, exclude_none=True)
