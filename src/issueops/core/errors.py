"""Custom exception hierarchy for the issue-ops engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ValidationIssue


class IssueOpsError(Exception):
    """Base exception for all issue-ops errors."""


# --- Configuration ---
class ConfigError(IssueOpsError):
    """Invalid or missing configuration."""


# --- Actions ---
class ActionValidationError(IssueOpsError):
    """Action shape or payload does not match the domain's action schema."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = list(issues)
        detail = "; ".join(str(i) for i in self.issues) or "invalid action"
        super().__init__(detail)


class ExtractionError(IssueOpsError):
    """No candidate action could be extracted from the given text."""


# --- Domains ---
class DomainNotFound(IssueOpsError):
    """Action or lookup references an unregistered domain."""

    def __init__(self, domain: str):
        self.domain = domain
        super().__init__(f"Domain {domain} not found")


class DomainError(IssueOpsError):
    """Business-rule failure raised or returned by a reducer."""


# --- Storage ---
class StorageError(IssueOpsError):
    """Content store read/write failure."""


class ContentNotFound(StorageError):
    """The requested blob does not exist in the content store."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}")
