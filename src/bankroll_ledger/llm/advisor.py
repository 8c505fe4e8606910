"""Recommendation request building.

The advisor sees a stats snapshot, the most recent resolved wagers (in
chronological order) and the performance rollups.  Its answer is a read
model only; any stake change or withdrawal it suggests is a separate
user action.
"""

from __future__ import annotations

from bankroll_ledger.core.models import (
    DailyProfitPoint,
    Ledger,
    MarketPerformancePoint,
    Stats,
)

from .contracts import RecentWager, RecommendationRequest


def recent_resolved(ledger: Ledger, limit: int) -> list[RecentWager]:
    """The *limit* most recent resolved wagers, oldest first."""
    resolved = sorted(ledger.resolved_wagers(), key=lambda w: w.date)
    window = resolved[-limit:] if limit > 0 else []
    return [
        RecentWager(
            date=w.date.isoformat(),
            market=w.market,
            league=w.league,
            units=round(w.units, 4),
            odd=w.odd,
            status=w.status.value,
            profit_loss=round(w.profit_loss, 2),
        )
        for w in window
    ]


def build_recommendation_request(
    ledger: Ledger,
    stats: Stats,
    performance: list[MarketPerformancePoint],
    *,
    recent_limit: int = 20,
    daily: list[DailyProfitPoint] | None = None,
) -> RecommendationRequest:
    return RecommendationRequest(
        stats=stats,
        recent_wagers=recent_resolved(ledger, recent_limit),
        performance=performance,
        daily_profit=daily or [],
    )
