"""Business domains and their reducers.

Modules:
    base: DomainDefinition / ActionSchema / TypedAction contract
    validation: payload base model and structured validation issues
    team_management: teams, owners and membership

Wiring::

    from issueops.domains import register_builtin_domains
    register_builtin_domains(registry)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import ActionSchema, DomainDefinition, TypedAction
from .team_management import TEAM_MANAGEMENT

if TYPE_CHECKING:
    from issueops.engine.registry import DomainRegistry

BUILTIN_DOMAINS: tuple[DomainDefinition, ...] = (TEAM_MANAGEMENT,)


def register_builtin_domains(registry: DomainRegistry) -> None:
    """Register every domain that ships with the package."""
    for definition in BUILTIN_DOMAINS:
        registry.register_domain(definition)


__all__ = [
    "ActionSchema",
    "BUILTIN_DOMAINS",
    "DomainDefinition",
    "TypedAction",
    "register_builtin_domains",
]
