"""Dict-backed content store. No persistence across restarts.

Good for: unit tests, dry runs of the CLI.
"""

from __future__ import annotations

from issueops.core.errors import ContentNotFound, StorageError


class InMemoryContentStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._blobs: dict[str, str] = dict(initial or {})
        self._writes: list[tuple[str, str]] = []
        self._fail_paths: set[str] = set()
        self._fail_write_paths: set[str] = set()

    async def read(self, path: str) -> str:
        if path in self._fail_paths:
            raise StorageError(f"Simulated read failure: {path}")
        try:
            return self._blobs[path]
        except KeyError:
            raise ContentNotFound(path) from None

    async def write(self, path: str, content: str, message: str = "") -> None:
        if path in self._fail_paths or path in self._fail_write_paths:
            raise StorageError(f"Simulated write failure: {path}")
        self._blobs[path] = content
        self._writes.append((path, message))

    async def close(self) -> None:
        return None

    # -- Testing helpers ---------------------------------------------------

    @property
    def blobs(self) -> dict[str, str]:
        return dict(self._blobs)

    @property
    def writes(self) -> list[tuple[str, str]]:
        """``(path, message)`` of every successful write, in order."""
        return list(self._writes)

    def fail_on(self, path: str) -> None:
        """Make reads and writes of *path* raise ``StorageError``."""
        self._fail_paths.add(path)

    def fail_writes_on(self, path: str) -> None:
        """Make only writes of *path* raise; reads still succeed."""
        self._fail_write_paths.add(path)

    def clear(self) -> None:
        self._blobs.clear()
        self._writes.clear()
        self._fail_paths.clear()
        self._fail_write_paths.clear()
