"""Runtime wiring.

Builds the registry, content store, state store and dispatcher explicitly
from :class:`Settings`. Nothing here is a module-level singleton; each
caller (the CLI, a webhook worker, a test) owns its ``Runtime``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from issueops.core.config import Settings, StorageBackend
from issueops.domains import register_builtin_domains
from issueops.engine.dispatcher import ActionDispatcher
from issueops.engine.registry import DomainRegistry
from issueops.engine.state_store import StateStore
from issueops.storage.base import IContentStore
from issueops.storage.github import GitHubContentStore
from issueops.storage.local import LocalContentStore
from issueops.storage.memory import InMemoryContentStore

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    settings: Settings
    registry: DomainRegistry
    content: IContentStore
    state_store: StateStore
    dispatcher: ActionDispatcher

    async def close(self) -> None:
        await self.content.close()


def build_content_store(settings: Settings) -> IContentStore:
    """Construct the content store selected by ``settings.storage.backend``."""
    settings.validate_storage()
    storage = settings.storage

    if storage.backend == StorageBackend.GITHUB:
        gh = storage.github
        logger.info("Using GitHub storage %s/%s", gh.owner, gh.repo)
        return GitHubContentStore(
            gh.token,
            gh.owner,
            gh.repo,
            branch=gh.branch,
            path_prefix=gh.path_prefix,
            api_url=gh.api_url,
            timeout=gh.timeout_seconds,
        )
    if storage.backend == StorageBackend.MEMORY:
        logger.info("Using in-memory storage (nothing is persisted)")
        return InMemoryContentStore()

    logger.info("Using local storage at %s", Path(storage.root).resolve())
    return LocalContentStore(storage.root)


def build_runtime(
    settings: Settings | None = None,
    *,
    content: IContentStore | None = None,
    registry: DomainRegistry | None = None,
) -> Runtime:
    """Wire a complete engine.

    Args:
        settings: Application settings (defaults used if omitted).
        content: Content store override; skips backend construction.
        registry: Pre-populated registry; builtin domains are registered
            only when this is omitted.
    """
    settings = settings or Settings()
    if registry is None:
        registry = DomainRegistry()
        register_builtin_domains(registry)
    if content is None:
        content = build_content_store(settings)
    state_store = StateStore(content, registry)
    dispatcher = ActionDispatcher(registry, state_store)
    return Runtime(
        settings=settings,
        registry=registry,
        content=content,
        state_store=state_store,
        dispatcher=dispatcher,
    )
