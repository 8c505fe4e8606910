"""Ledger projector -- the cumulative bankroll trajectory.

Walks the chronological event stream from the initial bankroll and emits
one :class:`BankrollHistoryPoint` per event, plus an index-0 seed point.
Accumulation is unrounded; each point's ``value`` is rounded to currency
precision on the way out.

Day markers use the local calendar day (or the configured zone), never
UTC truncation.  The seed point always starts a day; every event is
compared with the previous *event's* local date.
"""

from __future__ import annotations

from datetime import datetime, tzinfo

from bankroll_ledger.core.clock import local_date
from bankroll_ledger.core.ids import utc_now
from bankroll_ledger.core.models import BankrollHistoryPoint, Ledger

from .timeline import ledger_events


def project_ledger(
    ledger: Ledger,
    *,
    tz: tzinfo | None = None,
    now: datetime | None = None,
) -> list[BankrollHistoryPoint]:
    """Ordered bankroll trajectory for *ledger*.

    Parameters
    ----------
    ledger : Ledger
        Current ledger state.
    tz : tzinfo | None
        Zone for day boundaries; ``None`` uses the process local zone.
    now : datetime | None
        Seed timestamp when the ledger has no events.
    """
    events = ledger_events(ledger)
    seed_date = events[0].timestamp if events else (now or utc_now())
    points = [
        BankrollHistoryPoint(
            index=0,
            value=round(ledger.initial_bankroll, 2),
            date=seed_date,
            is_new_day=True,
        )
    ]

    running = ledger.initial_bankroll
    last_day = None
    for i, event in enumerate(events, start=1):
        running += event.delta
        day = local_date(event.timestamp, tz)
        points.append(
            BankrollHistoryPoint(
                index=i,
                value=round(running, 2),
                date=event.timestamp,
                is_new_day=day != last_day,
                event_kind=event.kind,
                wager=event.wager,
                withdrawal=event.withdrawal,
            )
        )
        last_day = day
    return points
