"""Ledger export -- JSON blob and CSV output.

The JSON document has the same shape as the persisted blob and can be
imported back.  The CSV export is a flat wager table for spreadsheets.

Usage::

    exporter = LedgerExporter()
    json_str = exporter.to_json(ledger)
    csv_str = exporter.to_csv(ledger.wagers)
"""

from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any

from bankroll_ledger.core.models import Ledger, Wager

logger = logging.getLogger(__name__)

# Default CSV columns
_CSV_COLUMNS = [
    "id",
    "date",
    "market",
    "league",
    "bet_structure",
    "bet_type",
    "details",
    "selections",
    "status",
    "stake_value",
    "odd",
    "units",
    "profit_loss",
]


class LedgerExporter:
    """Export a ledger as JSON or its wagers as CSV.

    Parameters
    ----------
    decimal_places : int
        Rounding precision for numeric CSV fields.  Default 4.
    """

    def __init__(self, *, decimal_places: int = 4) -> None:
        self._dp = decimal_places

    # ------------------------------------------------------------------ #
    # JSON Export                                                          #
    # ------------------------------------------------------------------ #

    def to_json(self, ledger: Ledger, *, indent: int = 2) -> str:
        """Export the full ledger as a re-importable JSON document."""
        return json.dumps(ledger.to_blob(), indent=indent, ensure_ascii=False)

    # ------------------------------------------------------------------ #
    # CSV Export                                                           #
    # ------------------------------------------------------------------ #

    def to_csv(
        self,
        wagers: list[Wager],
        *,
        columns: list[str] | None = None,
    ) -> str:
        """Export wagers as a CSV string, oldest first.

        Parameters
        ----------
        wagers : list[Wager]
            Wagers to export.
        columns : list[str] | None
            Column selection.  Defaults to ``_CSV_COLUMNS``.
        """
        cols = columns or _CSV_COLUMNS
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()

        for wager in sorted(wagers, key=lambda w: w.date):
            row = self._wager_to_row(wager)
            writer.writerow({c: row.get(c, "") for c in cols})

        return buf.getvalue()

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _wager_to_row(self, wager: Wager) -> dict[str, Any]:
        dp = self._dp
        return {
            "id": wager.id,
            "date": wager.date.isoformat(),
            "market": wager.market,
            "league": wager.league,
            "bet_structure": wager.bet_structure.value,
            "bet_type": wager.bet_type,
            "details": wager.details,
            "selections": " + ".join(
                f"{s.details} @ {s.odd}" for s in wager.selections
            ),
            "status": wager.status.value,
            "stake_value": round(wager.stake_value, dp),
            "odd": round(wager.odd, dp),
            "units": round(wager.units, dp),
            "profit_loss": round(wager.profit_loss, dp),
        }
