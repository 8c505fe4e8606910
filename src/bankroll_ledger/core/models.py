"""Core domain models for the bankroll ledger.

These are the canonical "truth models" for the system.  Persisted models
(``Wager``, ``Withdrawal``, ``Ledger``) are frozen: a mutation always
produces a new value through ``model_copy``.  Field aliases match the
camelCase keys of the persisted ledger blob.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import NO_LEAGUE, BetStructure, EventKind, Market, RiskLevel, WagerStatus
from .ids import new_id, utc_now

_FROZEN = ConfigDict(frozen=True, populate_by_name=True)


def compute_profit_loss(status: WagerStatus, stake_value: float, odd: float) -> float:
    """Profit or loss implied by a wager's status, stake and odd."""
    if status is WagerStatus.WON:
        return stake_value * (odd - 1)
    if status is WagerStatus.LOST:
        return -stake_value
    return 0.0


# ---------------------------------------------------------------------------
# Persisted models
# ---------------------------------------------------------------------------

class Selection(BaseModel):
    """One leg of a combined wager."""

    model_config = _FROZEN

    details: str = ""
    label: str = ""
    odd: float = 1.0


class Wager(BaseModel):
    """A single bet or a combined multi-selection bet."""

    model_config = _FROZEN

    # Identity
    id: str = Field(default_factory=new_id)
    date: datetime = Field(default_factory=utc_now)  # creation time, immutable

    # Classification
    market: str = Market.LOL.value
    league: str = NO_LEAGUE
    bet_structure: BetStructure = Field(default=BetStructure.SINGLE, alias="betStructure")
    bet_type: str = Field(default="N/A", alias="betType")

    # Content
    details: str = ""
    selections: list[Selection] = Field(default_factory=list)

    # Economics
    units: float = 0.0  # derived, see ledger.units
    stake_value: float = Field(default=0.0, alias="stakeValue")
    odd: float = 1.0
    status: WagerStatus = WagerStatus.PENDING
    profit_loss: float = Field(default=0.0, alias="profitLoss")

    @property
    def is_resolved(self) -> bool:
        return self.status.is_resolved

    def with_status(self, status: WagerStatus) -> Wager:
        """Copy with a new status and the matching profit/loss."""
        return self.model_copy(update={
            "status": status,
            "profit_loss": compute_profit_loss(status, self.stake_value, self.odd),
        })

    def with_units(self, units: float) -> Wager:
        return self.model_copy(update={"units": units})


class Withdrawal(BaseModel):
    """Cash taken out of the bankroll."""

    model_config = _FROZEN

    id: str = Field(default_factory=new_id)
    date: datetime = Field(default_factory=utc_now)
    amount: float = 0.0


class Ledger(BaseModel):
    """The complete, authoritative record of capital, wagers and withdrawals."""

    model_config = _FROZEN

    initial_bankroll: float = Field(default=100.0, alias="initialBankroll")
    wagers: list[Wager] = Field(default_factory=list, alias="bets")
    withdrawals: list[Withdrawal] = Field(default_factory=list)
    blacklisted_teams: list[str] = Field(default_factory=list, alias="blacklistedTeams")

    def find_wager(self, wager_id: str) -> Wager | None:
        for wager in self.wagers:
            if wager.id == wager_id:
                return wager
        return None

    def resolved_wagers(self) -> list[Wager]:
        return [w for w in self.wagers if w.is_resolved]

    def to_blob(self) -> dict:
        """JSON-ready dict in the persisted ledger shape."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Derived read-models (never persisted)
# ---------------------------------------------------------------------------

class BankrollHistoryPoint(BaseModel):
    """One step of the cumulative bankroll trajectory."""

    index: int
    value: float
    date: datetime
    is_new_day: bool = False
    event_kind: EventKind | None = None
    wager: Wager | None = None
    withdrawal: Withdrawal | None = None


class Stats(BaseModel):
    """Aggregate return / risk statistics for a ledger."""

    initial_bankroll: float
    current_bankroll: float
    total_profit_loss: float = 0.0
    total_invested: float = 0.0
    total_withdrawn: float = 0.0
    resolved_count: int = 0
    won_count: int = 0
    roi: float = 0.0
    win_rate: float = 0.0
    average_odd: float = 0.0
    max_drawdown: float = 0.0
    existing_teams: dict[str, list[str]] = Field(default_factory=dict)


class MarketPerformancePoint(BaseModel):
    """Profit and invested stake for one market or league."""

    name: str
    profit: float = 0.0
    invested: float = 0.0
    count: int = 0

    @property
    def roi(self) -> float:
        if self.invested <= 0:
            return 0.0
        return self.profit / self.invested * 100


class DailyProfitPoint(BaseModel):
    """Profit of one local calendar day."""

    date: str  # YYYY-MM-DD
    profit: float = 0.0
    unit_profit: float = 0.0
    count: int = 0


class StakeTier(BaseModel):
    """Currency value of a unit tier at the current bankroll."""

    units: float
    value: float


# ---------------------------------------------------------------------------
# Recommendation read-model
# ---------------------------------------------------------------------------

class RiskAlert(BaseModel):
    level: RiskLevel = RiskLevel.NONE
    message: str = ""


class Recommendation(BaseModel):
    """Coaching advice returned by the recommendation service."""

    title: str = ""
    suggested_units: float = 0.0
    analysis_summary: str = ""
    risk_alert: RiskAlert | None = None
    strategic_advice: str = ""
