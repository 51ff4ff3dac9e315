"""Shared fixtures for the issueops test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from issueops.context import build_context
from issueops.core.clock import FixedClock
from issueops.core.models import ActionContext
from issueops.domains import register_builtin_domains
from issueops.engine.dispatcher import ActionDispatcher
from issueops.engine.registry import DomainRegistry
from issueops.engine.state_store import StateStore
from issueops.storage.memory import InMemoryContentStore


# ---------------------------------------------------------------------------
# Clock / context
# ---------------------------------------------------------------------------

@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def ctx(clock: FixedClock) -> ActionContext:
    """Context for user ``alice`` at 2024-05-01T12:00:00Z."""
    return build_context("alice", clock=clock)


@pytest.fixture
def make_ctx(clock: FixedClock):
    def _make(username: str = "alice") -> ActionContext:
        return build_context(username, clock=clock)
    return _make


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

@pytest.fixture
def registry() -> DomainRegistry:
    reg = DomainRegistry()
    register_builtin_domains(reg)
    return reg


@pytest.fixture
def content() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture
def store(content: InMemoryContentStore, registry: DomainRegistry) -> StateStore:
    return StateStore(content, registry)


@pytest.fixture
def dispatcher(registry: DomainRegistry, store: StateStore) -> ActionDispatcher:
    return ActionDispatcher(registry, store)
