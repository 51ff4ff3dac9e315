"""Versioned domain state plus an append-only action log.

Layout (relative to the content store root)::

    <domain>/state.json     pretty-printed VersionedState
    <domain>/actions.jsonl  one compact ActionLogEntry per line, oldest first

Design invariants
-----------------
1.  A missing ``state.json`` is not an error: ``get_state()`` returns the
    domain's initial state (lazy creation). Every other read failure raises
    ``StorageError``; it never falls back to the initial state.
2.  ``save_state()`` writes the state blob first and the log second, so a
    crash between the two can never leave a log entry for a state that was
    not persisted.
3.  Log entries are never rewritten or removed; ``save_state()`` only ever
    appends one line to the existing content.
4.  No locking. At most one in-flight save per domain is assumed; the
    GitHub store turns a lost-update race into a revision-conflict error.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from issueops.core.errors import ContentNotFound, StorageError
from issueops.core.models import (
    Action,
    ActionContext,
    ActionLogEntry,
    VersionedState,
)
from issueops.storage.base import IContentStore

from .registry import DomainRegistry

logger = logging.getLogger(__name__)

STATE_FILE = "state.json"
LOG_FILE = "actions.jsonl"


def state_path(domain: str) -> str:
    return f"{domain}/{STATE_FILE}"


def log_path(domain: str) -> str:
    return f"{domain}/{LOG_FILE}"


def _commit_message(action: Action) -> str:
    return f"{action.type}: {json.dumps(action.payload, separators=(',', ':'))}"


class StateStore:
    """Durable mapping from domain name to its current state and log."""

    def __init__(self, content: IContentStore, registry: DomainRegistry) -> None:
        self._content = content
        self._registry = registry

    @property
    def content(self) -> IContentStore:
        return self._content

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    async def get_state(self, domain: str) -> dict[str, Any]:
        """Current state of *domain*, or its initial state if none is stored.

        Raises:
            DomainNotFound: If *domain* is not registered.
            StorageError: On any read failure other than a missing blob,
                or if the stored blob is not a valid state for the domain.
        """
        self._registry.get_domain(domain)
        path = state_path(domain)
        try:
            raw = await self._content.read(path)
        except ContentNotFound:
            logger.info("No state for %s yet; using initial state", domain)
            return self._registry.get_initial_state(domain)

        try:
            state = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt state blob {path}: {exc}") from exc

        try:
            VersionedState.model_validate(state)
        except ValidationError as exc:
            raise StorageError(
                f"State blob {path} is not a versioned state "
                f"(expected schemaVersion and data): {exc.error_count()} error(s)"
            ) from exc

        checked = self._registry.check_state(domain, state)
        if not checked.is_ok:
            raise StorageError(
                f"State blob {path} does not match the {domain} schema: "
                f"{checked.error.message}"
            )
        return state

    async def save_state(
        self,
        domain: str,
        state: dict[str, Any],
        action: Action,
        context: ActionContext,
    ) -> None:
        """Persist *state* and append one log entry for *action*.

        The existing log is read before anything is written, so a log read
        failure leaves both blobs untouched.
        """
        entry = ActionLogEntry(
            action=action,
            timestamp=context.timestamp,
            username=context.username,
        )
        current_log = await self._read_log(domain)
        if current_log and not current_log.endswith("\n"):
            current_log += "\n"
        updated_log = current_log + entry.model_dump_json() + "\n"

        message = _commit_message(action)
        await self._content.write(
            state_path(domain), json.dumps(state, indent=2), message,
        )
        await self._content.write(
            log_path(domain), updated_log, f"Update action log for {message}",
        )
        logger.info(
            "Saved %s state after %s by %s", domain, action.type, context.username,
        )

    # ------------------------------------------------------------------
    # Log
    # ------------------------------------------------------------------

    async def _read_log(self, domain: str) -> str:
        try:
            return await self._content.read(log_path(domain))
        except ContentNotFound:
            return ""

    async def read_log(self, domain: str) -> list[ActionLogEntry]:
        """Every log entry for *domain*, oldest first."""
        path = log_path(domain)
        entries: list[ActionLogEntry] = []
        for lineno, line in enumerate((await self._read_log(domain)).splitlines(), 1):
            if not line.strip():
                continue
            try:
                entries.append(ActionLogEntry.model_validate_json(line))
            except ValidationError as exc:
                raise StorageError(
                    f"Malformed log entry at {path}:{lineno}: {exc}"
                ) from exc
        return entries

    async def get_action_log(
        self, domain: str, limit: int = 100,
    ) -> list[ActionLogEntry]:
        """The most recent *limit* entries, most recent first."""
        if limit <= 0:
            return []
        entries = await self.read_log(domain)
        return list(reversed(entries[-limit:]))

    # ------------------------------------------------------------------
    # Replay
    # ------------------------------------------------------------------

    async def replay_state(self, domain: str) -> dict[str, Any]:
        """Rebuild *domain*'s state by folding its log over the initial state.

        Entries whose action no longer validates or whose reduction fails
        are skipped and logged; replay never writes.
        """
        state = self._registry.get_initial_state(domain)
        for entry in await self.read_log(domain):
            context = ActionContext(
                username=entry.username, timestamp=entry.timestamp,
            )
            result = self._registry.execute_action(entry.action, state, context)
            if not result.is_ok:
                logger.warning(
                    "Replay of %s skipped %s at %s: %s",
                    domain, entry.action.type, entry.timestamp, result.error,
                )
                continue
            state = result.value
        return state
