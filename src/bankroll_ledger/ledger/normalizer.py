"""Normalizer -- the trust boundary for loosely-typed wager records.

Every record entering the ledger (manual entry, bet-slip extraction,
file import, persisted blob) passes through here.  Numeric fields are
coerced and clamped to safe defaults instead of rejecting the record, so
a partially corrupt import still yields usable wagers.  Only a record
that is not a mapping at all is rejected (``None``).

Profit/loss is never trusted from input; it is always recomputed from
status, stake and odd.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, TypeVar

from bankroll_ledger.core.enums import NO_LEAGUE, BetStructure, Market, WagerStatus
from bankroll_ledger.core.ids import ensure_aware, new_id, utc_now
from bankroll_ledger.core.models import (
    Selection,
    Wager,
    Withdrawal,
    compute_profit_loss,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Upper bounds keep stake * odd and every bankroll sum finite.
MAX_STAKE = 1e12
MAX_ODD = 1e6

# Status labels seen in the wild, including the localized labels of
# older exports.  Keys are casefolded.
_STATUS_LOOKUP: dict[str, WagerStatus] = {
    "pending": WagerStatus.PENDING,
    "pendente": WagerStatus.PENDING,
    "won": WagerStatus.WON,
    "win": WagerStatus.WON,
    "ganhou": WagerStatus.WON,
    "vitória": WagerStatus.WON,
    "vitoria": WagerStatus.WON,
    "lost": WagerStatus.LOST,
    "loss": WagerStatus.LOST,
    "perdeu": WagerStatus.LOST,
    "derrota": WagerStatus.LOST,
}

_STRUCTURE_LOOKUP: dict[str, BetStructure] = {
    "single": BetStructure.SINGLE,
    "simples": BetStructure.SINGLE,
    "combined": BetStructure.COMBINED,
    "multiple": BetStructure.COMBINED,
    "múltipla": BetStructure.COMBINED,
    "multipla": BetStructure.COMBINED,
    "parlay": BetStructure.COMBINED,
}


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def parse_status(raw: Any) -> WagerStatus:
    """Map a status label to :class:`WagerStatus`; unknown means Pending."""
    if isinstance(raw, WagerStatus):
        return raw
    if isinstance(raw, str):
        return _STATUS_LOOKUP.get(raw.strip().casefold(), WagerStatus.PENDING)
    return WagerStatus.PENDING


def parse_structure(raw: Any, has_selections: bool) -> BetStructure:
    if isinstance(raw, BetStructure):
        return raw
    if isinstance(raw, str):
        found = _STRUCTURE_LOOKUP.get(raw.strip().casefold())
        if found is not None:
            return found
    return BetStructure.COMBINED if has_selections else BetStructure.SINGLE


def coerce_number(raw: Any) -> float | None:
    """Best-effort float conversion.  Returns ``None`` for non-finite or junk."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            return None
    elif isinstance(raw, str):
        text = raw.strip()
        if "," in text and "." not in text:
            text = text.replace(",", ".")
        try:
            value = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(value):
        return None
    return value


def clamp_stake(raw: Any) -> float:
    """Stake in currency; negative or unparseable becomes 0, huge is capped."""
    value = coerce_number(raw)
    if value is None or value < 0:
        return 0.0
    return min(value, MAX_STAKE)


def clamp_odd(raw: Any) -> float:
    """Decimal odd; below 1 or unparseable becomes 1, huge is capped."""
    value = coerce_number(raw)
    if value is None or value < 1:
        return 1.0
    return min(value, MAX_ODD)


def parse_timestamp(raw: Any, default: datetime) -> datetime:
    """Parse ISO strings, datetimes or epoch milliseconds."""
    if isinstance(raw, datetime):
        return ensure_aware(raw)
    if isinstance(raw, str) and raw.strip():
        text = raw.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return ensure_aware(datetime.fromisoformat(text))
        except ValueError:
            return default
    number = coerce_number(raw)
    if number is not None:
        try:
            return datetime.fromtimestamp(number / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return default
    return default


def _text(record: Mapping[str, Any], *keys: str, default: str = "") -> str:
    """First non-empty string among *keys*."""
    for key in keys:
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return default


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


# ---------------------------------------------------------------------------
# Record normalizers
# ---------------------------------------------------------------------------

def normalize_selection(raw: Any) -> Selection | None:
    """Validate one leg of a combined wager.  Unparseable legs yield ``None``."""
    if not isinstance(raw, Mapping):
        return None
    odd = coerce_number(raw.get("odd"))
    if odd is None:
        return None
    return Selection(
        details=_text(raw, "details", "betDetail", "description"),
        label=_text(raw, "label", "betType", "market"),
        odd=min(max(odd, 1.0), MAX_ODD),
    )


def normalize_wager(raw: Any, *, now: datetime | None = None) -> Wager | None:
    """Convert an arbitrary record into a canonical :class:`Wager`.

    Accepts the legacy aliases ``value``/``stake`` for the stake,
    ``context`` for the league and ``betDetail`` for the details.
    Units are carried over as-is; the unit recalculator owns them.
    """
    if not isinstance(raw, Mapping):
        return None
    now = now or utc_now()

    raw_selections = raw.get("selections")
    selections: list[Selection] = []
    if isinstance(raw_selections, list):
        for item in raw_selections:
            selection = normalize_selection(item)
            if selection is None:
                logger.warning("Dropping unparseable selection in wager %s", raw.get("id"))
                continue
            selections.append(selection)

    status = parse_status(raw.get("status"))
    stake = clamp_stake(_first(raw, "stakeValue", "stake_value", "value", "stake"))
    odd = clamp_odd(raw.get("odd"))
    units = coerce_number(raw.get("units"))
    raw_id = raw.get("id")

    return Wager(
        id=str(raw_id) if raw_id not in (None, "") else new_id(),
        date=parse_timestamp(_first(raw, "date", "createdAt", "timestamp"), now),
        market=_text(raw, "market", default=Market.LOL.value),
        league=_text(raw, "league", "context", default=NO_LEAGUE),
        bet_structure=parse_structure(
            _first(raw, "betStructure", "bet_structure"), bool(selections),
        ),
        bet_type=_text(raw, "betType", "bet_type", default="N/A"),
        details=_text(raw, "details", "betDetail"),
        selections=selections,
        units=units if units is not None and units >= 0 else 0.0,
        stake_value=stake,
        odd=odd,
        status=status,
        profit_loss=compute_profit_loss(status, stake, odd),
    )


def normalize_extracted_wager(raw: Any, *, now: datetime | None = None) -> Wager | None:
    """Normalize a bet-slip extraction result.

    Extraction never decides identity, time or outcome: the wager gets a
    fresh id, the current time and Pending status.
    """
    if not isinstance(raw, Mapping):
        return None
    now = now or utc_now()
    payload = {k: v for k, v in raw.items() if k not in ("id", "date", "status")}
    wager = normalize_wager(payload, now=now)
    if wager is None:
        return None
    return wager.model_copy(update={"date": now})


def normalize_withdrawal(raw: Any, *, now: datetime | None = None) -> Withdrawal | None:
    """Convert an arbitrary record into a canonical :class:`Withdrawal`."""
    if not isinstance(raw, Mapping):
        return None
    now = now or utc_now()
    raw_id = raw.get("id")
    return Withdrawal(
        id=str(raw_id) if raw_id not in (None, "") else new_id(),
        date=parse_timestamp(_first(raw, "date", "createdAt", "timestamp"), now),
        amount=clamp_stake(raw.get("amount")),
    )


# Keys that name the same field; a patch using one replaces them all.
_ALIAS_GROUPS: tuple[tuple[str, ...], ...] = (
    ("stakeValue", "stake_value", "value", "stake"),
    ("league", "context"),
    ("details", "betDetail"),
    ("betType", "bet_type"),
    ("betStructure", "bet_structure"),
    ("profitLoss", "profit_loss", "profit"),
)


def merge_record(base: Mapping[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay *patch* on *base*, honouring field aliases."""
    merged = dict(base)
    for group in _ALIAS_GROUPS:
        if any(key in patch for key in group):
            for key in group:
                merged.pop(key, None)
    merged.update(patch)
    return merged


def normalize_records(
    records: Iterable[Any],
    normalizer: Callable[..., T | None],
    *,
    now: datetime | None = None,
) -> list[T]:
    """Run *normalizer* over *records*, dropping rejects and duplicate ids.

    A record whose id was already seen keeps its content but receives a
    new id, so two distinct records never collapse into one.
    """
    out: list[T] = []
    seen: set[str] = set()
    skipped = 0
    for raw in records:
        item = normalizer(raw, now=now)
        if item is None:
            skipped += 1
            continue
        if item.id in seen:
            logger.warning("Duplicate id %s in input; assigning a new id", item.id)
            item = item.model_copy(update={"id": new_id()})
        seen.add(item.id)
        out.append(item)
    if skipped:
        logger.warning("Skipped %d non-object record(s) during normalization", skipped)
    return out
