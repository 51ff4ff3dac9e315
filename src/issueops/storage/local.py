"""Local-filesystem content store.

Blobs are plain UTF-8 files under a root directory. Writes replace the
whole file atomically; parent directories are created on demand.
"""

from __future__ import annotations

import logging
from pathlib import Path

from issueops.core.errors import ContentNotFound, StorageError
from issueops.core.file_io import atomic_write_text

logger = logging.getLogger(__name__)


class LocalContentStore:
    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if target != self._root and self._root not in target.parents:
            raise StorageError(f"Path escapes store root: {path}")
        return target

    async def read(self, path: str) -> str:
        target = self._resolve(path)
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ContentNotFound(path) from None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc

    async def write(self, path: str, content: str, message: str = "") -> None:
        target = self._resolve(path)
        try:
            atomic_write_text(target, content)
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}") from exc
        logger.debug("Wrote %s (%d bytes)", target, len(content))

    async def close(self) -> None:
        return None
