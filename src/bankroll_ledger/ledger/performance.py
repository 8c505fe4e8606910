"""Market/league performance and the daily profit calendar.

Both rollups consider resolved wagers only and are scoped to one
calendar year (local time).  The market rollup is further limited to a
configurable set of months (January through September by default).

Usage::

    perf = market_performance(ledger.wagers, year=2025)
    days = daily_profit(ledger.wagers, year=2025)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, tzinfo

from bankroll_ledger.core.enums import (
    GAME_TITLE_MARKET,
    RECOGNIZED_LEAGUES,
    WagerStatus,
)
from bankroll_ledger.core.models import DailyProfitPoint, MarketPerformancePoint, Wager

logger = logging.getLogger(__name__)

DEFAULT_MONTHS = tuple(range(1, 10))

# Buckets with this much invested stake or less are noise.
_MIN_INVESTED = 0.01


@dataclass
class _Bucket:
    """Accumulator for one market, league or day."""

    profit: float = 0.0
    invested: float = 0.0
    unit_profit: float = 0.0
    count: int = 0

    def record(self, wager: Wager) -> None:
        self.profit += wager.profit_loss
        self.invested += wager.stake_value
        self.unit_profit += unit_profit(wager)
        self.count += 1


def unit_profit(wager: Wager) -> float:
    """Profit of a resolved wager measured in units."""
    if wager.status is WagerStatus.WON:
        return wager.units * (wager.odd - 1)
    if wager.status is WagerStatus.LOST:
        return -wager.units
    return 0.0


def _local(ts: datetime, tz: tzinfo | None) -> datetime:
    return ts.astimezone(tz)


def market_performance(
    wagers: Iterable[Wager],
    year: int,
    *,
    months: Iterable[int] = DEFAULT_MONTHS,
    tz: tzinfo | None = None,
) -> list[MarketPerformancePoint]:
    """Profit per market, plus per league for the game-title market.

    Entries with invested stake of 0.01 or less are dropped.  Sorted by
    profit, highest first.
    """
    allowed = set(months)
    buckets: dict[str, _Bucket] = defaultdict(_Bucket)
    for wager in wagers:
        if not wager.is_resolved:
            continue
        local = _local(wager.date, tz)
        if local.year != year or local.month not in allowed:
            continue
        buckets[wager.market].record(wager)
        if wager.market == GAME_TITLE_MARKET and wager.league in RECOGNIZED_LEAGUES:
            buckets[wager.league].record(wager)

    points = [
        MarketPerformancePoint(
            name=name, profit=b.profit, invested=b.invested, count=b.count,
        )
        for name, b in buckets.items()
        if b.invested > _MIN_INVESTED
    ]
    points.sort(key=lambda p: p.profit, reverse=True)
    return points


def daily_profit(
    wagers: Iterable[Wager],
    year: int,
    *,
    tz: tzinfo | None = None,
) -> list[DailyProfitPoint]:
    """Currency and unit profit per local calendar day of *year*, by date."""
    buckets: dict[str, _Bucket] = defaultdict(_Bucket)
    for wager in wagers:
        if not wager.is_resolved:
            continue
        local = _local(wager.date, tz)
        if local.year != year:
            continue
        buckets[local.strftime("%Y-%m-%d")].record(wager)

    return [
        DailyProfitPoint(
            date=key, profit=b.profit, unit_profit=b.unit_profit, count=b.count,
        )
        for key, b in sorted(buckets.items())
    ]


def available_years(
    wagers: Iterable[Wager],
    current_year: int,
    *,
    tz: tzinfo | None = None,
) -> list[int]:
    """Years with wagers, plus *current_year*, most recent first."""
    years = {_local(w.date, tz).year for w in wagers}
    years.add(current_year)
    return sorted(years, reverse=True)
