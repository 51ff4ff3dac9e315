"""Domain reducer contract.

A domain is registered as a :class:`DomainDefinition`:

    name          -- unique domain name, e.g. ``"team-management"``
    action_schema -- :class:`ActionSchema`, a tagged union over ``type``
    state_schema  -- pydantic model for the versioned state blob
    initial_state -- zero-state returned for a domain with no state yet
    reduce        -- pure ``(state, action, context) -> Ok(state) | Err(DomainError)``

Reducers receive a :class:`TypedAction` whose ``payload`` is the parsed
payload model for its ``type``, never a raw mapping (except for types an
open schema lets through untyped).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ValidationError

from issueops.core.errors import DomainError
from issueops.core.models import (
    Action,
    ActionContext,
    ValidationFailure,
    ValidationIssue,
)
from issueops.core.result import Err, Ok, Result

from .validation import issues_from_pydantic

State = dict[str, Any]


@dataclass(frozen=True)
class TypedAction:
    """An action whose payload has been parsed into its variant model."""

    domain: str
    type: str
    payload: Any  # payload model instance, or a dict for untyped variants
    raw: Action


Reducer = Callable[[State, TypedAction, ActionContext], Result[State, DomainError]]


class ActionSchema:
    """Tagged union of payload models keyed by action ``type``.

    ``open=True`` lets unrecognised types through untyped so the reducer
    can treat them as a no-op; a closed schema rejects them at ``type``.
    """

    def __init__(
        self,
        domain: str,
        variants: Mapping[str, type[BaseModel]],
        *,
        open: bool = False,
    ) -> None:
        self._domain = domain
        self._variants = dict(variants)
        self._open = open

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def types(self) -> list[str]:
        return list(self._variants)

    @property
    def is_open(self) -> bool:
        return self._open

    def variant(self, action_type: str) -> type[BaseModel] | None:
        return self._variants.get(action_type)

    def parse(self, action: Action) -> Result[TypedAction, ValidationFailure]:
        """Parse *action* into a :class:`TypedAction`. Never raises."""
        if action.domain != self._domain:
            return Err(ValidationFailure(issues=[
                ValidationIssue(
                    path="domain",
                    expected=f"'{self._domain}'",
                    actual=action.domain,
                ),
            ]))

        model = self._variants.get(action.type)
        if model is None:
            if self._open:
                return Ok(TypedAction(
                    domain=action.domain,
                    type=action.type,
                    payload=dict(action.payload),
                    raw=action,
                ))
            return Err(ValidationFailure(issues=[
                ValidationIssue(
                    path="type",
                    expected=f"one of {sorted(self._variants)}",
                    actual=action.type,
                ),
            ]))

        try:
            payload = model.model_validate(action.payload)
        except ValidationError as exc:
            return Err(ValidationFailure(
                issues=issues_from_pydantic(exc, prefix="payload"),
            ))
        return Ok(TypedAction(
            domain=action.domain, type=action.type, payload=payload, raw=action,
        ))


@dataclass(frozen=True)
class DomainDefinition:
    """Registration record for one domain."""

    name: str
    action_schema: ActionSchema
    state_schema: type[BaseModel]
    initial_state: Mapping[str, Any]
    reduce: Reducer
    description: str = ""
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.action_schema.domain != self.name:
            raise ValueError(
                f"Action schema for '{self.action_schema.domain}' cannot be "
                f"registered under domain '{self.name}'"
            )
