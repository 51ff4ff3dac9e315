"""Content store protocol: read and write named text blobs.

Paths are POSIX-style and relative to the store's root, e.g.
``team-management/state.json``. A missing blob raises
:class:`~issueops.core.errors.ContentNotFound`; every other failure raises
:class:`~issueops.core.errors.StorageError`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IContentStore(Protocol):
    """Durable blob storage (local files or a remote repository)."""

    async def read(self, path: str) -> str:
        """Return the blob at *path*. Raises ``ContentNotFound`` if absent."""
        ...

    async def write(self, path: str, content: str, message: str = "") -> None:
        """Create or replace the blob at *path*.

        *message* is a commit message for revisioned stores and is ignored
        elsewhere.
        """
        ...

    async def close(self) -> None: ...
