"""Ledger persistence.

``ILedgerStore`` is the protocol.  Two implementations ship:

* ``MemoryLedgerStore`` -- for unit tests and throwaway sessions.
* ``JsonFileLedgerStore`` -- one JSON blob on disk, replaced atomically.

``load()`` never fails: a missing or corrupt blob falls back to an empty
ledger with the default initial bankroll.  A corrupt blob is first moved
aside with ``preserve()`` so the next ``save()`` cannot overwrite it.
``save()`` raises :class:`StorageError`.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

from bankroll_ledger.core.errors import ImportFileError, StorageError
from bankroll_ledger.core.file_io import atomic_write_text
from bankroll_ledger.core.ids import utc_now
from bankroll_ledger.core.models import Ledger
from bankroll_ledger.ledger.blob import ledger_from_blob

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_BANKROLL = 100.0


def default_ledger(initial_bankroll: float = DEFAULT_INITIAL_BANKROLL) -> Ledger:
    return Ledger(initial_bankroll=initial_bankroll)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ILedgerStore(Protocol):
    """Load/save of the single ledger blob."""

    def load(self) -> Ledger:
        """Return the persisted ledger, or a default one."""
        ...

    def save(self, ledger: Ledger) -> None:
        """Persist *ledger*, replacing the previous blob."""
        ...

    def preserve(self) -> None:
        """Set the current blob aside; it will not be replaced by ``save()``."""
        ...


# ---------------------------------------------------------------------------
# MemoryLedgerStore  (tests)
# ---------------------------------------------------------------------------


class MemoryLedgerStore:
    """In-memory implementation -- no persistence.

    Keeps the serialized blob rather than the object so a load goes
    through the same decoding path as the file store.
    """

    def __init__(
        self,
        ledger: Ledger | None = None,
        *,
        default_initial_bankroll: float = DEFAULT_INITIAL_BANKROLL,
    ) -> None:
        self._default = default_initial_bankroll
        self._blob: dict | None = ledger.to_blob() if ledger is not None else None
        self.save_count = 0
        self.preserved: list[dict] = []

    def load(self) -> Ledger:
        if self._blob is None:
            return default_ledger(self._default)
        return ledger_from_blob(self._blob)

    def save(self, ledger: Ledger) -> None:
        self._blob = ledger.to_blob()
        self.save_count += 1

    def preserve(self) -> None:
        if self._blob is not None:
            self.preserved.append(self._blob)
            self._blob = None

    # -- helpers for tests --------------------------------------------------

    @property
    def blob(self) -> dict | None:
        return self._blob


# ---------------------------------------------------------------------------
# JsonFileLedgerStore
# ---------------------------------------------------------------------------


class JsonFileLedgerStore:
    """JSON file-backed implementation."""

    def __init__(
        self,
        path: str | Path = "data/ledger.json",
        *,
        default_initial_bankroll: float = DEFAULT_INITIAL_BANKROLL,
    ) -> None:
        self._path = Path(path)
        self._default = default_initial_bankroll

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Ledger:
        if not self._path.exists():
            return default_ledger(self._default)
        try:
            data = json.loads(self._path.read_bytes().decode("utf-8"))
            ledger = ledger_from_blob(data)
        except (OSError, ValueError, ImportFileError):
            # ValueError covers UnicodeDecodeError and JSONDecodeError
            logger.exception(
                "Failed to load ledger from %s; starting from a default ledger",
                self._path,
            )
            self.preserve()
            return default_ledger(self._default)
        logger.info(
            "Loaded ledger from %s (%d wagers, %d withdrawals)",
            self._path, len(ledger.wagers), len(ledger.withdrawals),
        )
        return ledger

    def save(self, ledger: Ledger) -> None:
        try:
            atomic_write_text(self._path, json.dumps(ledger.to_blob(), ensure_ascii=False))
        except OSError as exc:
            raise StorageError(f"Failed to save ledger to {self._path}: {exc}") from exc

    def preserve(self) -> None:
        """Rename the ledger file to ``<name>.corrupt-<UTC timestamp>``."""
        if not self._path.exists():
            return
        target = self._path.with_name(
            f"{self._path.name}.corrupt-{utc_now():%Y%m%dT%H%M%S%f}"
        )
        try:
            os.replace(self._path, target)
        except OSError:
            logger.exception("Failed to move unusable ledger %s aside", self._path)
            return
        logger.warning("Moved unusable ledger %s to %s", self._path, target)
