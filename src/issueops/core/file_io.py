"""Safe file I/O utilities.

Provides whole-file atomic replacement for state blobs: content goes to a
temporary sibling, is ``fsync``-ed, then moved over the target with
``os.replace`` so readers never observe a half-written file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, content: str) -> None:
    """Replace *path* with *content* atomically.

    * Parent directories are created on demand.
    * The temporary file lives in the same directory so ``os.replace``
      never crosses a filesystem boundary.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            logger.warning("Could not remove temp file %s", tmp_name)
        raise
