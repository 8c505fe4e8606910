"""Statistics aggregator.

Pure function of the ledger and its projection: ROI, win rate, average
winning odd, totals and maximum drawdown.  Sums are accumulated
unrounded; only ``current_bankroll`` is rounded to currency precision.
"""

from __future__ import annotations

import logging

from bankroll_ledger.core.enums import WagerStatus
from bankroll_ledger.core.models import BankrollHistoryPoint, Ledger, Stats

from .teams import existing_teams

logger = logging.getLogger(__name__)


def max_drawdown(points: list[BankrollHistoryPoint]) -> float:
    """Largest peak-to-trough decline along *points*, in percent.

    Drawdown at a point is ``(peak - value) / peak`` with the running peak;
    it is 0 while the peak is not positive.  A trajectory that falls below
    zero is capped at a 100% drawdown.
    """
    peak = float("-inf")
    worst = 0.0
    for point in points:
        if point.value > peak:
            peak = point.value
        if peak <= 0:
            continue
        drawdown = (peak - point.value) / peak
        if drawdown > worst:
            worst = drawdown
    return min(worst, 1.0) * 100


def compute_stats(ledger: Ledger, projection: list[BankrollHistoryPoint]) -> Stats:
    """Aggregate statistics for *ledger* given its *projection*."""
    resolved = ledger.resolved_wagers()
    won = [w for w in resolved if w.status is WagerStatus.WON]

    total_profit_loss = sum(w.profit_loss for w in resolved)
    total_invested = sum(w.stake_value for w in resolved)
    total_withdrawn = sum(wd.amount for wd in ledger.withdrawals)
    current = ledger.initial_bankroll + total_profit_loss - total_withdrawn

    roi = total_profit_loss / total_invested * 100 if total_invested > 0 else 0.0
    win_rate = len(won) / len(resolved) * 100 if resolved else 0.0
    average_odd = sum(w.odd for w in won) / len(won) if won else 0.0

    return Stats(
        initial_bankroll=ledger.initial_bankroll,
        current_bankroll=round(current, 2),
        total_profit_loss=total_profit_loss,
        total_invested=total_invested,
        total_withdrawn=total_withdrawn,
        resolved_count=len(resolved),
        won_count=len(won),
        roi=roi,
        win_rate=win_rate,
        average_odd=average_odd,
        max_drawdown=max_drawdown(projection),
        existing_teams=existing_teams(ledger.wagers, ledger.blacklisted_teams),
    )
