"""Team-name extraction from free-text wager details.

Feeds the "existing teams" suggestion list: ``"T1 vs Gen.G -1.5"`` yields
``T1`` and ``Gen.G``.  Details that do not look like a matchup are kept
whole as a single name.
"""

from __future__ import annotations

import re

from bankroll_ledger.core.enums import Market
from bankroll_ledger.core.models import Wager

_MATCHUP = re.compile(r"^(.+?)\s+(?:vs\.?|x)\s+(.+)$", re.IGNORECASE)
_HANDICAP_SUFFIX = re.compile(r"\s*[-+]\d+(?:\.\d+)?$")


def clean_team_name(name: str) -> str:
    """Strip a trailing handicap (``-1.5``) and any ``| note`` annotation."""
    name = _HANDICAP_SUFFIX.sub("", name.strip())
    return name.split("|")[0].strip()


def split_teams(details: str) -> list[str]:
    text = details.strip()
    if not text:
        return []
    match = _MATCHUP.match(text)
    if match is None:
        return [text]
    return [clean_team_name(match.group(1)), clean_team_name(match.group(2))]


def existing_teams(
    wagers: list[Wager],
    blacklist: list[str] | None = None,
) -> dict[str, list[str]]:
    """Distinct team names per market, blacklist excluded, sorted.

    Every known :class:`Market` is present, with an empty list when it
    has no teams yet.
    """
    banned = set(blacklist or ())
    by_market: dict[str, set[str]] = {market.value: set() for market in Market}
    for wager in wagers:
        for team in split_teams(wager.details):
            if team and team not in banned:
                by_market.setdefault(wager.market, set()).add(team)
    return {market: sorted(teams) for market, teams in sorted(by_market.items())}
