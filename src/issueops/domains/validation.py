"""Translate payload parse failures into structured validation issues.

Payload variants are pydantic models; callers never see pydantic's
``ValidationError``. Each error becomes a :class:`ValidationIssue` with a
dotted field path, a short description of the expected constraint, and the
offending value.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from issueops.core.models import ValidationIssue

# pydantic error type -> human-readable expectation
_EXPECTED: dict[str, str] = {
    "missing": "required field",
    "string_type": "string",
    "int_type": "integer",
    "bool_type": "boolean",
    "float_type": "number",
    "dict_type": "object",
    "model_type": "object",
    "model_attributes_type": "object",
    "list_type": "array",
    "literal_error": "literal",
    "string_too_short": "non-empty string",
}

_MISSING = object()


class Payload(BaseModel):
    """Base class for action payload variants.

    Strings are strict (no number coercion), unknown keys are ignored and
    instances are immutable.
    """

    model_config = ConfigDict(
        frozen=True, strict=True, extra="ignore", populate_by_name=True,
    )


def _format_path(prefix: str, loc: tuple[Any, ...]) -> str:
    parts = [prefix] if prefix else []
    for item in loc:
        if isinstance(item, int) and parts:
            parts[-1] = f"{parts[-1]}[{item}]"
        else:
            parts.append(str(item))
    return ".".join(parts) or "<root>"


def issues_from_pydantic(
    exc: ValidationError, prefix: str = "",
) -> list[ValidationIssue]:
    """Convert a pydantic ``ValidationError`` into ``ValidationIssue`` items."""
    issues: list[ValidationIssue] = []
    for err in exc.errors(include_url=False):
        err_type = err.get("type", "")
        expected = _EXPECTED.get(err_type, err.get("msg", err_type))
        if err_type == "literal_error":
            ctx = err.get("ctx") or {}
            expected = f"one of {ctx.get('expected', '?')}"
        actual = err.get("input", _MISSING)
        if err_type == "missing" or actual is _MISSING:
            actual = None
        issues.append(
            ValidationIssue(
                path=_format_path(prefix, tuple(err.get("loc", ()))),
                expected=expected,
                actual=actual,
            )
        )
    return issues
