"""Request/response contracts for the external collaborators.

The core never implements these services.  It talks to them through
three narrow async protocols:

* ``IWagerClassifier``      -- corrects market/league labels in batches
* ``IRecommendationAdvisor`` -- free-text coaching from a stats snapshot
* ``IBetSlipExtractor``     -- wager records read from a bet-slip image

Responses are treated as untrusted and decoded through the functions
in this module.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from bankroll_ledger.core.enums import NO_LEAGUE, RiskLevel
from bankroll_ledger.core.models import (
    DailyProfitPoint,
    MarketPerformancePoint,
    Recommendation,
    RiskAlert,
    Stats,
    Wager,
)
from bankroll_ledger.ledger.normalizer import coerce_number

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------

class ClassificationRequest(BaseModel):
    id: str
    market: str
    league: str
    details: str
    bet_type: str = Field(alias="betType")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_wager(cls, wager: Wager) -> ClassificationRequest:
        return cls(
            id=wager.id,
            market=wager.market,
            league=wager.league,
            details=wager.details,
            bet_type=wager.bet_type,
        )


class ClassificationCorrection(BaseModel):
    id: str
    market: str
    league: str = NO_LEAGUE


@runtime_checkable
class IWagerClassifier(Protocol):
    """Corrects market/league labels for a batch of wagers."""

    async def classify(
        self,
        batch: list[ClassificationRequest],
    ) -> list[Any]:
        """Return corrections (models or mappings) for a subset of *batch*."""
        ...


def decode_correction(raw: Any) -> ClassificationCorrection | None:
    """Decode one classifier answer; ``None`` when unusable."""
    if isinstance(raw, ClassificationCorrection):
        return raw
    if not isinstance(raw, Mapping):
        return None
    wager_id = raw.get("id")
    market = raw.get("market")
    if not isinstance(wager_id, str) or not wager_id:
        return None
    if not isinstance(market, str) or not market.strip():
        return None
    league = raw.get("league")
    if not isinstance(league, str) or not league.strip():
        league = NO_LEAGUE
    return ClassificationCorrection(id=wager_id, market=market.strip(), league=league.strip())


# ---------------------------------------------------------------------------
# Recommendation advisor
# ---------------------------------------------------------------------------

class RecentWager(BaseModel):
    """Slim view of a resolved wager sent to the advisor."""

    date: str
    market: str
    league: str
    units: float
    odd: float
    status: str
    profit_loss: float


class RecommendationRequest(BaseModel):
    stats: Stats
    recent_wagers: list[RecentWager] = Field(default_factory=list)
    performance: list[MarketPerformancePoint] = Field(default_factory=list)
    daily_profit: list[DailyProfitPoint] = Field(default_factory=list)


@runtime_checkable
class IRecommendationAdvisor(Protocol):
    """Produces coaching advice.  Never mutates the ledger."""

    async def advise(self, request: RecommendationRequest) -> Any:
        ...


_RISK_LOOKUP: dict[str, RiskLevel] = {
    "none": RiskLevel.NONE,
    "nenhum": RiskLevel.NONE,
    "low": RiskLevel.LOW,
    "baixo": RiskLevel.LOW,
    "medium": RiskLevel.MEDIUM,
    "médio": RiskLevel.MEDIUM,
    "medio": RiskLevel.MEDIUM,
    "high": RiskLevel.HIGH,
    "alto": RiskLevel.HIGH,
}


def decode_recommendation(raw: Any) -> Recommendation | None:
    """Decode an advisor answer, accepting the legacy camelCase keys."""
    if isinstance(raw, Recommendation):
        return raw
    if not isinstance(raw, Mapping):
        return None

    alert = None
    raw_alert = raw.get("riskAlert", raw.get("risk_alert"))
    if isinstance(raw_alert, Mapping):
        level = raw_alert.get("level")
        alert = RiskAlert(
            level=_RISK_LOOKUP.get(str(level).strip().casefold(), RiskLevel.NONE),
            message=str(raw_alert.get("message") or ""),
        )

    units = coerce_number(raw.get("suggestedUnits", raw.get("suggested_units")))
    return Recommendation(
        title=str(raw.get("recommendationTitle", raw.get("title")) or ""),
        suggested_units=units if units is not None and units >= 0 else 0.0,
        analysis_summary=str(raw.get("analysisSummary", raw.get("analysis_summary")) or ""),
        risk_alert=alert,
        strategic_advice=str(raw.get("strategicAdvice", raw.get("strategic_advice")) or ""),
    )


# ---------------------------------------------------------------------------
# Bet-slip extractor
# ---------------------------------------------------------------------------

@runtime_checkable
class IBetSlipExtractor(Protocol):
    """Reads wager records from a bet-slip image."""

    async def extract(self, image: bytes, mime_type: str) -> list[Any]:
        """Return loosely-typed wager records found in *image*."""
        ...
