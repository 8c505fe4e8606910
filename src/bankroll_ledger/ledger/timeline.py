"""Chronological event stream shared by the unit recalculator and projector.

Ordering rule
-------------
Events are sorted ascending by timestamp with a *stable* sort over a
sequence that lists resolved wagers in ledger order, then withdrawals in
ledger order.  Equal timestamps therefore keep that input order.  Both
consumers go through :func:`chronological_events` so the rule is
applied uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from bankroll_ledger.core.enums import EventKind
from bankroll_ledger.core.models import Ledger, Wager, Withdrawal


@dataclass(frozen=True)
class LedgerEvent:
    """One bankroll-changing event: a resolved wager or a withdrawal."""

    timestamp: datetime
    delta: float
    kind: EventKind
    wager: Wager | None = None
    withdrawal: Withdrawal | None = None


def chronological_events(
    wagers: list[Wager],
    withdrawals: list[Withdrawal],
) -> list[LedgerEvent]:
    """Resolved wagers and withdrawals merged in ascending time order."""
    events = [
        LedgerEvent(w.date, w.profit_loss, EventKind.WAGER, wager=w)
        for w in wagers
        if w.is_resolved
    ]
    events.extend(
        LedgerEvent(wd.date, -wd.amount, EventKind.WITHDRAWAL, withdrawal=wd)
        for wd in withdrawals
    )
    events.sort(key=lambda e: e.timestamp)
    return events


def ledger_events(ledger: Ledger) -> list[LedgerEvent]:
    return chronological_events(ledger.wagers, ledger.withdrawals)
