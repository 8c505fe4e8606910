"""Model builders and collaborator doubles shared by the test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from bankroll_ledger.core.enums import NO_LEAGUE, Market, WagerStatus
from bankroll_ledger.core.models import Wager, Withdrawal, compute_profit_loss

T0 = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Model helpers
# ---------------------------------------------------------------------------

def make_wager(
    wager_id: str = "w1",
    *,
    date: datetime = T0,
    stake: float = 1.0,
    odd: float = 2.0,
    status: WagerStatus = WagerStatus.PENDING,
    market: str = Market.LOL.value,
    league: str = NO_LEAGUE,
    details: str = "",
    units: float = 0.0,
) -> Wager:
    """A wager whose profit/loss matches its status."""
    return Wager(
        id=wager_id,
        date=date,
        market=market,
        league=league,
        details=details,
        units=units,
        stake_value=stake,
        odd=odd,
        status=status,
        profit_loss=compute_profit_loss(status, stake, odd),
    )


def make_withdrawal(
    withdrawal_id: str = "wd1",
    *,
    date: datetime = T0,
    amount: float = 10.0,
) -> Withdrawal:
    return Withdrawal(id=withdrawal_id, date=date, amount=amount)


def hours(n: float) -> timedelta:
    return timedelta(hours=n)


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------

class FakeClassifier:
    """Classifier double: relabels wagers and can fail on a chosen batch."""

    def __init__(
        self,
        relabel: dict[str, tuple[str, str]] | None = None,
        *,
        fail_on_batch: int | None = None,
    ) -> None:
        self.relabel = relabel or {}
        self.fail_on_batch = fail_on_batch
        self.calls: list[list] = []

    async def classify(self, batch):
        index = len(self.calls)
        self.calls.append(list(batch))
        if self.fail_on_batch is not None and index == self.fail_on_batch:
            raise RuntimeError("classifier unavailable")
        return [
            {"id": req.id, "market": self.relabel[req.id][0], "league": self.relabel[req.id][1]}
            for req in batch
            if req.id in self.relabel
        ]


class FakeAdvisor:
    def __init__(self, answer=None, *, error: Exception | None = None) -> None:
        self.answer = answer if answer is not None else {
            "recommendationTitle": "Manter Disciplina: 1 Unidade",
            "suggestedUnits": 1,
            "analysisSummary": "Stable results.",
            "riskAlert": {"level": "Médio", "message": "Stake grew after a win streak."},
            "strategicAdvice": "Keep the unit size flat.",
        }
        self.error = error
        self.requests: list = []

    async def advise(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.answer


class FakeExtractor:
    def __init__(self, records: list) -> None:
        self.records = records

    async def extract(self, image: bytes, mime_type: str):
        return self.records
