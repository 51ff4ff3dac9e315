"""Content stores backing the state store.

Modules:
    base: IContentStore protocol
    memory: InMemoryContentStore (tests, dry runs)
    local: LocalContentStore (files under a root directory)
    github: GitHubContentStore (repository contents API, one commit per write)
"""

from .base import IContentStore
from .github import GitHubContentStore
from .local import LocalContentStore
from .memory import InMemoryContentStore

__all__ = [
    "GitHubContentStore",
    "IContentStore",
    "InMemoryContentStore",
    "LocalContentStore",
]
