"""ActionDispatcher: the single validate -> load -> reduce -> persist path.

Flow for one action:
    1. Validate against the domain's action schema (no I/O)
    2. Load the domain's current state
    3. Reduce (pure; a DomainError ends the dispatch)
    4. Persist state, then append the log entry
    5. Run post-commit hooks (failures logged, result unchanged)

Never raises to callers. Every failure, including unexpected exceptions,
is encoded in the returned DispatchResult, and nothing is written unless
step 4 is reached.
"""

from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Mapping
from typing import Any, Callable

from pydantic import ValidationError

from issueops.core.errors import DomainNotFound, StorageError
from issueops.core.models import (
    Action,
    ActionContext,
    DispatchResult,
    ValidationFailure,
)
from issueops.domains.validation import issues_from_pydantic
from issueops.observability.logger import dispatch_log_context

from .registry import DomainRegistry
from .state_store import StateStore

logger = logging.getLogger(__name__)

PostCommitHook = Callable[[Action, dict[str, Any], ActionContext], Any]


class ActionDispatcher:
    """Orchestrates one dispatch at a time.

    Construction requires:
        - registry: DomainRegistry (validation + reducers)
        - state_store: StateStore (state + log persistence)

    Optional:
        - hooks: post-commit callables ``hook(action, new_state, context)``,
          sync or async, run only after a successful save; each gets its
          own copy of the new state.
    """

    def __init__(
        self,
        registry: DomainRegistry,
        state_store: StateStore,
        hooks: list[PostCommitHook] | None = None,
    ) -> None:
        self._registry = registry
        self._store = state_store
        self._hooks: list[PostCommitHook] = list(hooks or [])

    def add_hook(self, hook: PostCommitHook) -> None:
        self._hooks.append(hook)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    async def dispatch(
        self,
        action: Action | Mapping[str, Any],
        context: ActionContext,
    ) -> DispatchResult:
        """Apply *action* for *context*. Never raises."""
        try:
            return await self._dispatch(action, context)
        except Exception as exc:
            logger.exception("Unexpected error dispatching action")
            return DispatchResult.fail(f"Internal error: {exc}")

    async def _dispatch(
        self,
        action: Action | Mapping[str, Any],
        context: ActionContext,
    ) -> DispatchResult:
        # 0. Coerce raw mappings into an Action (shape check only)
        if not isinstance(action, Action):
            try:
                action = Action.model_validate(action)
            except ValidationError as exc:
                return self._invalid(ValidationFailure(
                    issues=issues_from_pydantic(exc),
                ))

        with dispatch_log_context(action.domain, action.type, context.username):
            return await self._apply(action, context)

    async def _apply(
        self, action: Action, context: ActionContext,
    ) -> DispatchResult:
        logger.info(
            "Dispatching %s/%s for %s", action.domain, action.type, context.username,
        )

        # 1. Validate
        try:
            validated = self._registry.validate_action(action)
        except DomainNotFound as exc:
            logger.warning("Rejected action for unknown domain %s", exc.domain)
            return DispatchResult.fail(str(exc))
        if not validated.is_ok:
            return self._invalid(validated.error)
        typed = validated.value

        # 2. Load
        try:
            current = await self._store.get_state(action.domain)
        except StorageError as exc:
            logger.error("Could not load %s state: %s", action.domain, exc)
            return DispatchResult.fail(f"State unavailable: {exc}")

        # 3. Reduce
        reduced = self._registry.execute_action(typed, current, context)
        if not reduced.is_ok:
            error = reduced.error
            if isinstance(error, ValidationFailure):
                return self._invalid(error)
            logger.warning(
                "%s/%s rejected: %s", action.domain, action.type, error,
            )
            return DispatchResult.fail(str(error))
        new_state = reduced.value

        # 4. Persist
        try:
            await self._store.save_state(action.domain, new_state, action, context)
        except StorageError as exc:
            logger.error("Could not save %s state: %s", action.domain, exc)
            return DispatchResult.fail(f"Failed to save state: {exc}")

        # 5. Post-commit hooks
        await self._run_hooks(action, new_state, context)

        return DispatchResult.ok(new_state)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _invalid(failure: ValidationFailure) -> DispatchResult:
        logger.info("Validation failed: %s", failure.message)
        return DispatchResult.fail(
            f"Validation failed: {failure.message}", failure.issues,
        )

    async def _run_hooks(
        self, action: Action, new_state: dict[str, Any], context: ActionContext,
    ) -> None:
        for hook in self._hooks:
            try:
                result = hook(action, copy.deepcopy(new_state), context)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Post-commit hook %s failed for %s/%s",
                    getattr(hook, "__name__", repr(hook)),
                    action.domain,
                    action.type,
                )

