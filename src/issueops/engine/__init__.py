"""Action-dispatch and domain-state engine.

Modules:
    registry: DomainRegistry (domain lookup, validation, reducer execution)
    state_store: StateStore (versioned state + append-only action log)
    dispatcher: ActionDispatcher (validate -> load -> reduce -> persist)
"""

from .dispatcher import ActionDispatcher
from .registry import DomainRegistry
from .state_store import StateStore

__all__ = ["ActionDispatcher", "DomainRegistry", "StateStore"]
