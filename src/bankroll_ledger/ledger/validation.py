"""Ledger integrity checks run before any state is committed."""

from __future__ import annotations

import math

from bankroll_ledger.core.errors import LedgerIntegrityError
from bankroll_ledger.core.models import Ledger, compute_profit_loss

from .units import BankrollReplay, units_for

_TOLERANCE = 1e-9


def _close(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=_TOLERANCE, abs_tol=_TOLERANCE)


def validate_ledger(ledger: Ledger, unit_percentage: float) -> None:
    """Raise :class:`LedgerIntegrityError` unless every invariant holds.

    Checks the initial bankroll, per-wager domains (stake, odd, finite
    values), profit/loss purity, unit consistency against a fresh replay,
    withdrawal amounts and id uniqueness.
    """
    problems: list[str] = []

    if not math.isfinite(ledger.initial_bankroll) or ledger.initial_bankroll <= 0:
        problems.append(f"initial bankroll must be positive, got {ledger.initial_bankroll}")

    replay = BankrollReplay(ledger.initial_bankroll, ledger.wagers, ledger.withdrawals)
    seen: set[str] = set()
    for w in ledger.wagers:
        if w.id in seen:
            problems.append(f"duplicate wager id {w.id}")
        seen.add(w.id)
        if not all(math.isfinite(v) for v in (w.stake_value, w.odd, w.units, w.profit_loss)):
            problems.append(f"wager {w.id}: non-finite value")
            continue
        if w.stake_value < 0:
            problems.append(f"wager {w.id}: negative stake {w.stake_value}")
        if w.odd < 1:
            problems.append(f"wager {w.id}: odd below 1 ({w.odd})")
        if any(s.odd < 1 for s in w.selections):
            problems.append(f"wager {w.id}: selection odd below 1")
        if not _close(w.profit_loss, compute_profit_loss(w.status, w.stake_value, w.odd)):
            problems.append(f"wager {w.id}: profit/loss does not match status")
        expected = units_for(w.stake_value, replay.bankroll_before(w.date), unit_percentage)
        if not _close(w.units, expected):
            problems.append(f"wager {w.id}: units {w.units} != {expected}")

    seen.clear()
    for wd in ledger.withdrawals:
        if wd.id in seen:
            problems.append(f"duplicate withdrawal id {wd.id}")
        seen.add(wd.id)
        if not math.isfinite(wd.amount) or wd.amount < 0:
            problems.append(f"withdrawal {wd.id}: invalid amount {wd.amount}")

    if problems:
        raise LedgerIntegrityError("; ".join(problems))
