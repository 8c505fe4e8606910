"""Safe file I/O utilities.

Provides an atomic whole-file replace with file locking (``fcntl``)
and ``fsync`` so the single ledger blob is never left half-written.
"""

from __future__ import annotations

import fcntl
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, text: str) -> None:
    """Replace *path* with *text* atomically.

    * Writes to a sibling ``.tmp`` file under ``fcntl.LOCK_EX``.
    * ``os.fsync`` ensures the data hits disk before the rename.
    * ``os.replace`` swaps the file in one step, so readers see either
      the old blob or the new one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX)
        try:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    os.replace(tmp, path)
