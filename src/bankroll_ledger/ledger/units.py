"""Temporal unit recalculator.

A wager's ``units`` is its stake expressed in bankroll units *at the time
it was placed*::

    units = stake_value / (bankroll_before(W) * unit_percentage)

``bankroll_before(W)`` replays every event strictly earlier than W,
starting from the initial bankroll.  Editing or settling an earlier
wager (or adding an earlier withdrawal) changes the value for every
later wager, so the whole collection is recalculated after any mutation.

Instead of one fold per wager, a running prefix of the bankroll over the
sorted event stream is built once and each wager's position is found by
binary search: O(n log n) overall.

Usage::

    recalculated = recalculate_units(ledger, unit_percentage=0.01)
"""

from __future__ import annotations

import bisect
import logging
from datetime import datetime

from bankroll_ledger.core.models import Ledger, StakeTier, Wager, Withdrawal

from .timeline import chronological_events

logger = logging.getLogger(__name__)


class BankrollReplay:
    """Prefix-sum view of the bankroll over the event stream.

    Parameters
    ----------
    initial_bankroll : float
        Starting capital.
    wagers, withdrawals : list
        Full collections; only resolved wagers contribute events.
    """

    def __init__(
        self,
        initial_bankroll: float,
        wagers: list[Wager],
        withdrawals: list[Withdrawal],
    ) -> None:
        events = chronological_events(wagers, withdrawals)
        self._timestamps: list[datetime] = [e.timestamp for e in events]
        # _prefix[i] = bankroll after the first i events
        self._prefix: list[float] = [initial_bankroll]
        running = initial_bankroll
        for event in events:
            running += event.delta
            self._prefix.append(running)

    def bankroll_before(self, ts: datetime) -> float:
        """Bankroll produced by all events strictly earlier than *ts*."""
        idx = bisect.bisect_left(self._timestamps, ts)
        return self._prefix[idx]


def units_for(stake_value: float, bankroll_before: float, unit_percentage: float) -> float:
    """Stake in units of ``bankroll_before * unit_percentage``; 0 when undefined."""
    if bankroll_before <= 0 or stake_value <= 0 or unit_percentage <= 0:
        return 0.0
    return stake_value / (bankroll_before * unit_percentage)


def recalculate_wager_units(
    initial_bankroll: float,
    wagers: list[Wager],
    withdrawals: list[Withdrawal],
    unit_percentage: float,
) -> list[Wager]:
    """Return *wagers* (same order) with ``units`` re-derived."""
    replay = BankrollReplay(initial_bankroll, wagers, withdrawals)
    out: list[Wager] = []
    changed = 0
    for wager in wagers:
        units = units_for(
            wager.stake_value, replay.bankroll_before(wager.date), unit_percentage,
        )
        if units != wager.units:
            changed += 1
            wager = wager.with_units(units)
        out.append(wager)
    if changed:
        logger.debug("Recalculated units for %d of %d wagers", changed, len(wagers))
    return out


def recalculate_units(ledger: Ledger, unit_percentage: float) -> Ledger:
    """Copy of *ledger* with every wager's units restored."""
    wagers = recalculate_wager_units(
        ledger.initial_bankroll, ledger.wagers, ledger.withdrawals, unit_percentage,
    )
    return ledger.model_copy(update={"wagers": wagers})


def stake_ladder(
    current_bankroll: float,
    unit_percentage: float,
    tiers: list[float],
) -> list[StakeTier]:
    """Currency value of each unit tier at the current bankroll."""
    unit_value = max(current_bankroll, 0.0) * unit_percentage
    return [StakeTier(units=t, value=round(unit_value * t, 2)) for t in tiers]
