"""Context providers: who issued an action, when, and from where."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from issueops.core.clock import IClock, utc_now_iso
from issueops.core.models import ActionContext, RepositoryRef


def build_context(
    username: str,
    *,
    repository: RepositoryRef | tuple[str, str] | None = None,
    issue_number: int | None = None,
    comment_id: int | None = None,
    clock: IClock | None = None,
) -> ActionContext:
    """Stamp a new :class:`ActionContext` with the current time."""
    if isinstance(repository, tuple):
        repository = RepositoryRef(owner=repository[0], repo=repository[1])
    return ActionContext(
        username=username,
        timestamp=utc_now_iso(clock),
        repository=repository,
        issue_number=issue_number,
        comment_id=comment_id,
    )


@runtime_checkable
class IContextProvider(Protocol):
    def context_for(self, username: str | None = None) -> ActionContext: ...


class StaticContextProvider:
    """Fixed identity and transport identifiers, fresh timestamp per call.

    Used by the CLI, where the invoking user and optional issue number are
    known up front.
    """

    def __init__(
        self,
        username: str,
        *,
        repository: RepositoryRef | tuple[str, str] | None = None,
        issue_number: int | None = None,
        clock: IClock | None = None,
    ) -> None:
        self._username = username
        self._repository = repository
        self._issue_number = issue_number
        self._clock = clock

    def context_for(self, username: str | None = None) -> ActionContext:
        return build_context(
            username or self._username,
            repository=self._repository,
            issue_number=self._issue_number,
            clock=self._clock,
        )
