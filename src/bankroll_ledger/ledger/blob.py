"""Ledger blob decoding -- the shape shared by storage and import files.

::

    {
      "initialBankroll": 100.0,
      "bets": [...],
      "withdrawals": [...],
      "blacklistedTeams": [...]
    }

Decoding is all-or-nothing at the file level (bad JSON, a non-object
top level, a missing ``bets`` list or an invalid ``initialBankroll``
raise :class:`ImportFileError`) and tolerant at the record level
(individual records go through the normalizer and are dropped only when
they are not objects).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from bankroll_ledger.core.errors import ImportFileError
from bankroll_ledger.core.models import Ledger

from .normalizer import coerce_number, normalize_records, normalize_wager, normalize_withdrawal

logger = logging.getLogger(__name__)


def ledger_from_blob(data: Any, *, now: datetime | None = None) -> Ledger:
    """Build a :class:`Ledger` from a decoded blob.

    Raises:
        ImportFileError: the top level is structurally invalid.
    """
    if not isinstance(data, dict):
        raise ImportFileError("Ledger file must contain a JSON object")
    if not isinstance(data.get("bets"), list):
        raise ImportFileError("Ledger file is missing the 'bets' list")
    if "initialBankroll" not in data:
        raise ImportFileError("Ledger file is missing 'initialBankroll'")
    initial = coerce_number(data["initialBankroll"])
    if initial is None or initial <= 0:
        raise ImportFileError(
            f"'initialBankroll' must be a positive number, got {data['initialBankroll']!r}"
        )

    raw_withdrawals = data.get("withdrawals")
    raw_blacklist = data.get("blacklistedTeams")

    wagers = normalize_records(data["bets"], normalize_wager, now=now)
    withdrawals = normalize_records(
        raw_withdrawals if isinstance(raw_withdrawals, list) else [],
        normalize_withdrawal,
        now=now,
    )
    blacklist = [
        t.strip() for t in (raw_blacklist if isinstance(raw_blacklist, list) else [])
        if isinstance(t, str) and t.strip()
    ]

    dropped = len(data["bets"]) - len(wagers)
    if dropped:
        logger.warning("Dropped %d unparseable wager record(s)", dropped)

    return Ledger(
        initial_bankroll=initial,
        wagers=wagers,
        withdrawals=withdrawals,
        blacklisted_teams=list(dict.fromkeys(blacklist)),
    )


def parse_ledger_text(text: str, *, now: datetime | None = None) -> Ledger:
    """Decode a JSON ledger document.

    Raises:
        ImportFileError: the text is not valid JSON or not a valid ledger.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportFileError(f"Invalid JSON: {exc.msg} (line {exc.lineno})") from exc
    return ledger_from_blob(data, now=now)
