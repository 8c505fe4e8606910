"""Tests for the record normalizer -- legacy aliases, clamping, profit purity."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from bankroll_ledger.core.enums import NO_LEAGUE, BetStructure, Market, WagerStatus
from bankroll_ledger.ledger.normalizer import (
    MAX_ODD,
    MAX_STAKE,
    coerce_number,
    merge_record,
    normalize_extracted_wager,
    normalize_records,
    normalize_selection,
    normalize_wager,
    normalize_withdrawal,
    parse_status,
    parse_timestamp,
)

NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestParseStatus:
    @pytest.mark.parametrize("label,expected", [
        ("won", WagerStatus.WON),
        ("Ganhou", WagerStatus.WON),
        ("Vitória", WagerStatus.WON),
        ("Perdeu", WagerStatus.LOST),
        ("Derrota", WagerStatus.LOST),
        ("LOST", WagerStatus.LOST),
        ("Pendente", WagerStatus.PENDING),
        ("pending", WagerStatus.PENDING),
    ])
    def test_known_labels(self, label, expected):
        assert parse_status(label) is expected

    @pytest.mark.parametrize("label", ["void", "", None, 3, "cashout"])
    def test_unknown_defaults_to_pending(self, label):
        assert parse_status(label) is WagerStatus.PENDING


class TestCoercion:
    def test_numbers_and_numeric_strings(self):
        assert coerce_number(2) == 2.0
        assert coerce_number("1.85") == 1.85
        assert coerce_number(" 1,85 ") == 1.85

    @pytest.mark.parametrize("raw", [None, True, "abc", "nan", float("inf"), [], {}])
    def test_junk_is_none(self, raw):
        assert coerce_number(raw) is None

    def test_oversized_integer_is_none(self):
        assert coerce_number(10**400) is None
        assert coerce_number(-(10**400)) is None
        assert parse_timestamp(10**400, NOW) == NOW

    def test_timestamp_formats(self):
        assert parse_timestamp("2024-05-01T10:00:00Z", NOW) == datetime(
            2024, 5, 1, 10, tzinfo=timezone.utc
        )
        assert parse_timestamp("2024-05-01T10:00:00", NOW).tzinfo is not None
        assert parse_timestamp(0, NOW) == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp("not a date", NOW) == NOW
        assert parse_timestamp(None, NOW) == NOW


class TestNormalizeWager:
    def test_non_object_is_rejected(self):
        assert normalize_wager("bet") is None
        assert normalize_wager(None) is None
        assert normalize_wager([1, 2]) is None

    def test_legacy_stake_and_localized_status(self):
        wager = normalize_wager({"stake": 50, "odd": 1.8, "status": "Vitória"}, now=NOW)
        assert wager.stake_value == 50
        assert wager.status is WagerStatus.WON
        assert wager.profit_loss == pytest.approx(40.0)

    def test_legacy_value_field(self):
        wager = normalize_wager({"value": 12.5, "odd": 2}, now=NOW)
        assert wager.stake_value == 12.5

    def test_stake_value_wins_over_legacy_alias(self):
        wager = normalize_wager({"stakeValue": 10, "stake": 99}, now=NOW)
        assert wager.stake_value == 10

    def test_supplied_profit_loss_is_discarded(self):
        wager = normalize_wager(
            {"stakeValue": 10, "odd": 3.0, "status": "lost", "profitLoss": 500},
            now=NOW,
        )
        assert wager.profit_loss == -10

    def test_pending_has_zero_profit(self):
        wager = normalize_wager({"stakeValue": 10, "odd": 3.0, "profitLoss": 5}, now=NOW)
        assert wager.status is WagerStatus.PENDING
        assert wager.profit_loss == 0

    def test_out_of_domain_numbers_are_clamped(self):
        wager = normalize_wager(
            {"stakeValue": -5, "odd": 0.5, "status": "won", "units": "NaN"},
            now=NOW,
        )
        assert wager.stake_value == 0
        assert wager.odd == 1
        assert wager.units == 0
        assert wager.profit_loss == 0

    def test_oversized_integer_stake_falls_back(self):
        wager = normalize_wager({"stake": 10**400, "odd": 2, "status": "won"}, now=NOW)
        assert wager.stake_value == 0
        assert wager.profit_loss == 0

    def test_huge_values_are_capped_to_finite_profit(self):
        wager = normalize_wager(
            {"stakeValue": 1e307, "odd": 1e300, "status": "won"}, now=NOW,
        )
        assert wager.stake_value == MAX_STAKE
        assert wager.odd == MAX_ODD
        assert math.isfinite(wager.profit_loss)
        assert wager.profit_loss == MAX_STAKE * (MAX_ODD - 1)

    def test_unparseable_numbers_fall_back(self):
        wager = normalize_wager({"stakeValue": "ten", "odd": "x"}, now=NOW)
        assert wager.stake_value == 0
        assert wager.odd == 1

    def test_defaults_for_missing_fields(self):
        wager = normalize_wager({}, now=NOW)
        assert wager.id
        assert wager.date == NOW
        assert wager.market == Market.LOL.value
        assert wager.league == NO_LEAGUE
        assert wager.bet_structure is BetStructure.SINGLE
        assert wager.selections == []

    def test_context_alias_for_league(self):
        wager = normalize_wager({"context": "LCK"}, now=NOW)
        assert wager.league == "LCK"

    def test_bet_detail_alias(self):
        wager = normalize_wager({"betDetail": "T1 vs Gen.G"}, now=NOW)
        assert wager.details == "T1 vs Gen.G"

    def test_bad_selection_dropped_not_the_wager(self):
        wager = normalize_wager(
            {
                "betStructure": "Combined",
                "selections": [
                    {"details": "A vs B", "label": "ML", "odd": 1.5},
                    "garbage",
                    {"details": "C vs D", "odd": "n/a"},
                    {"details": "E vs F", "odd": 0.3},
                ],
            },
            now=NOW,
        )
        assert wager is not None
        assert wager.bet_structure is BetStructure.COMBINED
        assert [s.details for s in wager.selections] == ["A vs B", "E vs F"]
        assert wager.selections[1].odd == 1.0

    def test_selections_imply_combined(self):
        wager = normalize_wager({"selections": [{"odd": 1.4}, {"odd": 1.6}]}, now=NOW)
        assert wager.bet_structure is BetStructure.COMBINED


class TestSelection:
    def test_requires_mapping_and_odd(self):
        assert normalize_selection(1) is None
        assert normalize_selection({"details": "x"}) is None
        assert normalize_selection({"odd": 2}).odd == 2.0


class TestExtractedWager:
    def test_forces_fresh_identity_and_pending(self):
        wager = normalize_extracted_wager(
            {"id": "from-image", "date": "2020-01-01", "status": "won",
             "market": "Counter-Strike 2", "odd": 2.1},
            now=NOW,
        )
        assert wager.id != "from-image"
        assert wager.date == NOW
        assert wager.status is WagerStatus.PENDING
        assert wager.market == "Counter-Strike 2"

    def test_non_object_is_rejected(self):
        assert normalize_extracted_wager("slip", now=NOW) is None


class TestWithdrawal:
    def test_normalizes_amount(self):
        wd = normalize_withdrawal({"id": "x", "amount": "25", "date": "2024-01-01T00:00:00Z"})
        assert wd.id == "x"
        assert wd.amount == 25.0

    def test_negative_amount_clamped(self):
        assert normalize_withdrawal({"amount": -3}, now=NOW).amount == 0.0

    def test_huge_amount_capped(self):
        assert normalize_withdrawal({"amount": 1e300}, now=NOW).amount == MAX_STAKE

    def test_non_object_is_rejected(self):
        assert normalize_withdrawal(7) is None


class TestRecords:
    def test_drops_non_objects_and_renames_duplicates(self):
        wagers = normalize_records(
            [{"id": "a"}, 5, {"id": "a"}, {"id": "b"}], normalize_wager, now=NOW,
        )
        ids = [w.id for w in wagers]
        assert len(wagers) == 3
        assert ids[0] == "a"
        assert ids[1] != "a"
        assert ids[2] == "b"

    def test_merge_record_replaces_alias_group(self):
        merged = merge_record({"stakeValue": 10, "league": "LCK"}, {"stake": 20})
        assert "stakeValue" not in merged
        assert merged["stake"] == 20
        assert merged["league"] == "LCK"
