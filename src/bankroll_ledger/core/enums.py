"""Enumerations used across the bankroll ledger."""

from enum import Enum


class WagerStatus(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"

    @property
    def is_resolved(self) -> bool:
        return self is not WagerStatus.PENDING


class BetStructure(str, Enum):
    SINGLE = "Single"
    COMBINED = "Combined"


class Market(str, Enum):
    """Markets the ledger knows about.  Wager markets remain free-form."""

    LOL = "League of Legends"
    CS2 = "Counter-Strike 2"
    SOCCER = "Futebol"


class LolLeague(str, Enum):
    """Recognized leagues of the game-title market."""

    LPL = "LPL"
    LCK = "LCK"
    LTA_SUL = "LTA Sul"
    LTA_NORTE = "LTA Norte"
    LEC = "LEC"
    OTHERS = "Outros/Minors"


class EventKind(str, Enum):
    """Kind of event in the chronological bankroll stream."""

    WAGER = "wager"
    WITHDRAWAL = "withdrawal"


class RiskLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Sentinel league for wagers without one.
NO_LEAGUE = "N/A"

GAME_TITLE_MARKET = Market.LOL.value
RECOGNIZED_LEAGUES = frozenset(league.value for league in LolLeague)
