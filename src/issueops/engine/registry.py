"""Domain registry: the only component that invokes a reducer.

The registry maps domain names to :class:`DomainDefinition` records. It is
populated once by the entry point before any dispatch and read-only
afterwards.

Usage::

    registry = DomainRegistry()
    registry.register_domain(TEAM_MANAGEMENT)
    result = registry.validate_action(action)
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from pydantic import ValidationError

from issueops.core.errors import DomainError, DomainNotFound
from issueops.core.models import Action, ActionContext, ValidationFailure
from issueops.core.result import Err, Ok, Result
from issueops.domains.base import DomainDefinition, State, TypedAction
from issueops.domains.validation import issues_from_pydantic

logger = logging.getLogger(__name__)


class DomainRegistry:
    """Central mapping from domain name to its reducer record."""

    def __init__(self) -> None:
        self._domains: dict[str, DomainDefinition] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_domain(
        self,
        name_or_definition: str | DomainDefinition,
        definition: DomainDefinition | None = None,
    ) -> None:
        """Register a domain, replacing any previous one of the same name.

        Accepts either ``register_domain(definition)`` or
        ``register_domain(name, definition)``; in the second form *name*
        must equal ``definition.name``.
        """
        if isinstance(name_or_definition, DomainDefinition):
            definition = name_or_definition
        elif definition is None:
            raise TypeError("register_domain(name, definition) needs a definition")
        elif definition.name != name_or_definition:
            raise ValueError(
                f"Domain name {name_or_definition!r} does not match "
                f"definition {definition.name!r}"
            )
        previous = self._domains.get(definition.name)
        self._domains[definition.name] = definition
        if previous is not None and previous is not definition:
            logger.warning("Replaced registration for domain %s", definition.name)
        else:
            logger.info(
                "Registered domain: %s (types=%s)",
                definition.name,
                ",".join(definition.action_schema.types),
            )

    def unregister_domain(self, name: str) -> DomainDefinition | None:
        """Remove a domain. Returns the removed record or None."""
        return self._domains.pop(name, None)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def has_domain(self, name: str) -> bool:
        return name in self._domains

    def get_domain(self, name: str) -> DomainDefinition:
        definition = self._domains.get(name)
        if definition is None:
            raise DomainNotFound(name)
        return definition

    def domain_names(self) -> list[str]:
        return list(self._domains)

    # ------------------------------------------------------------------
    # Validation / execution
    # ------------------------------------------------------------------

    def validate_action(
        self, action: Action,
    ) -> Result[TypedAction, ValidationFailure]:
        """Check *action* against its domain's action schema.

        Raises:
            DomainNotFound: If ``action.domain`` is not registered.

        Malformed payloads are returned as ``Err(ValidationFailure)``.
        """
        return self.get_domain(action.domain).action_schema.parse(action)

    def execute_action(
        self,
        action: Action | TypedAction,
        state: State,
        context: ActionContext,
    ) -> Result[State, DomainError | ValidationFailure]:
        """Run the domain reducer for *action* against *state*.

        A raw :class:`Action` is validated first. A ``DomainError`` raised by
        the reducer is returned as ``Err`` with the error unchanged.

        Raises:
            DomainNotFound: If the action's domain is not registered.
        """
        definition = self.get_domain(action.domain)

        if isinstance(action, TypedAction):
            typed = action
        else:
            parsed = definition.action_schema.parse(action)
            if not parsed.is_ok:
                return parsed
            typed = parsed.value

        try:
            return definition.reduce(state, typed, context)
        except DomainError as exc:
            return Err(exc)

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def get_initial_state(self, name: str) -> State:
        """Deep copy of the domain's zero-state."""
        return copy.deepcopy(dict(self.get_domain(name).initial_state))

    def check_state(
        self, name: str, state: Any,
    ) -> Result[State, ValidationFailure]:
        """Validate a loaded state blob against the domain's state schema."""
        schema = self.get_domain(name).state_schema
        try:
            schema.model_validate(state)
        except ValidationError as exc:
            return Err(ValidationFailure(issues=issues_from_pydantic(exc)))
        return Ok(state)

    def summary(self) -> list[dict[str, Any]]:
        """Registered domains and their action types, for the CLI."""
        return [
            {
                "domain": d.name,
                "description": d.description,
                "types": d.action_schema.types,
                "open": d.action_schema.is_open,
            }
            for d in self._domains.values()
        ]
