"""Ledger reconciliation and derived analytics.

Key components
--------------
**Trust boundary**

normalize_wager / normalize_withdrawal   Loosely-typed record -> canonical model
ledger_from_blob / parse_ledger_text     Persisted / imported ledger documents

**Replay**

recalculate_units     Re-derive every wager's units from bankroll-at-placement
project_ledger        Cumulative bankroll trajectory with day markers

**Read models**

compute_stats         ROI, win rate, average odd, drawdown, team suggestions
market_performance    Profit per market and game-title league
daily_profit          Profit calendar keyed by local date

**Export**

LedgerExporter        JSON blob and CSV output
"""

from .blob import ledger_from_blob, parse_ledger_text
from .export import LedgerExporter
from .normalizer import (
    normalize_extracted_wager,
    normalize_wager,
    normalize_withdrawal,
    parse_status,
)
from .performance import available_years, daily_profit, market_performance
from .projector import project_ledger
from .stats import compute_stats, max_drawdown
from .units import BankrollReplay, recalculate_units, stake_ladder
from .validation import validate_ledger

__all__ = [
    "BankrollReplay",
    "LedgerExporter",
    "available_years",
    "compute_stats",
    "daily_profit",
    "ledger_from_blob",
    "market_performance",
    "max_drawdown",
    "normalize_extracted_wager",
    "normalize_wager",
    "normalize_withdrawal",
    "parse_ledger_text",
    "parse_status",
    "project_ledger",
    "recalculate_units",
    "stake_ladder",
    "validate_ledger",
]
