"""Tests for the classification reconciler and advisor contracts."""

from __future__ import annotations

import asyncio

import pytest

from bankroll_ledger.core.enums import RiskLevel, WagerStatus
from bankroll_ledger.core.models import Ledger
from bankroll_ledger.llm.advisor import recent_resolved
from bankroll_ledger.llm.contracts import (
    ClassificationCorrection,
    decode_correction,
    decode_recommendation,
)
from bankroll_ledger.llm.errors import ClassificationError
from bankroll_ledger.llm.reconciler import ClassificationReconciler, merge_corrections

from tests.factories import T0, FakeClassifier, hours, make_wager


def _wagers(n: int):
    return [make_wager(f"w{i}", date=T0 + hours(i), details=f"A vs B {i}") for i in range(n)]


class TestReconciler:
    @pytest.mark.asyncio
    async def test_batches_of_fixed_size(self):
        classifier = FakeClassifier()
        reconciler = ClassificationReconciler(classifier, batch_size=50)
        await reconciler.reconcile(_wagers(120))
        assert [len(c) for c in classifier.calls] == [50, 50, 20]

    @pytest.mark.asyncio
    async def test_merges_only_named_wagers(self):
        wagers = _wagers(3)
        classifier = FakeClassifier({"w1": ("Counter-Strike 2", "N/A")})
        out = await ClassificationReconciler(classifier).reconcile(wagers)

        assert out[1].market == "Counter-Strike 2"
        assert out[0] == wagers[0]
        assert out[2] == wagers[2]
        # only market/league change
        assert out[1].details == wagers[1].details
        assert out[1].stake_value == wagers[1].stake_value

    @pytest.mark.asyncio
    async def test_failure_is_atomic(self):
        wagers = _wagers(120)
        classifier = FakeClassifier(
            {"w0": ("Futebol", "N/A")}, fail_on_batch=1,
        )
        with pytest.raises(ClassificationError) as exc_info:
            await ClassificationReconciler(classifier, batch_size=50).reconcile(wagers)
        assert exc_info.value.batch_index == 1
        assert exc_info.value.batch_count == 3
        assert "2/3" in str(exc_info.value)
        assert wagers[0].market == "League of Legends"
        # the run stopped at the failing batch
        assert len(classifier.calls) == 2

    @pytest.mark.asyncio
    async def test_timeout(self):
        class Slow:
            async def classify(self, batch):
                await asyncio.sleep(5)
                return []

        reconciler = ClassificationReconciler(Slow(), timeout_seconds=0.01)
        with pytest.raises(ClassificationError, match="timed out"):
            await reconciler.reconcile(_wagers(1))

    @pytest.mark.asyncio
    async def test_non_list_answer(self):
        class Weird:
            async def classify(self, batch):
                return {"id": "w0"}

        with pytest.raises(ClassificationError, match="expected a list"):
            await ClassificationReconciler(Weird()).reconcile(_wagers(1))

    @pytest.mark.asyncio
    async def test_unknown_and_malformed_corrections_ignored(self):
        class Noisy:
            async def classify(self, batch):
                return [
                    {"id": "ghost", "market": "Futebol"},
                    {"id": "w0"},
                    "junk",
                    {"id": "w0", "market": "Futebol", "league": ""},
                ]

        out = await ClassificationReconciler(Noisy()).reconcile(_wagers(2))
        assert [w.id for w in out] == ["w0", "w1"]
        assert out[0].market == "Futebol"
        assert out[0].league == "N/A"

    @pytest.mark.asyncio
    async def test_empty_input_skips_classifier(self):
        classifier = FakeClassifier()
        assert await ClassificationReconciler(classifier).reconcile([]) == []
        assert classifier.calls == []

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            ClassificationReconciler(FakeClassifier(), batch_size=0)

    def test_merge_corrections_leaves_unmatched(self):
        wagers = _wagers(2)
        fixes = {"w1": ClassificationCorrection(id="w1", market="Futebol")}
        out = merge_corrections(wagers, fixes)
        assert out[0] is wagers[0]
        assert out[1].market == "Futebol"


class TestDecoding:
    def test_decode_correction_defaults_league(self):
        fix = decode_correction({"id": "a", "market": " Futebol "})
        assert fix.market == "Futebol"
        assert fix.league == "N/A"

    @pytest.mark.parametrize("raw", [None, 3, {"market": "x"}, {"id": "a", "market": ""}])
    def test_decode_correction_rejects(self, raw):
        assert decode_correction(raw) is None

    def test_decode_recommendation_camel_case(self):
        rec = decode_recommendation({
            "recommendationTitle": "Reduzir stake",
            "suggestedUnits": "0.5",
            "analysisSummary": "Losing streak.",
            "riskAlert": {"level": "Alto", "message": "Chasing losses."},
            "strategicAdvice": "Take a break.",
        })
        assert rec.title == "Reduzir stake"
        assert rec.suggested_units == 0.5
        assert rec.risk_alert.level is RiskLevel.HIGH
        assert rec.strategic_advice == "Take a break."

    def test_decode_recommendation_snake_case_without_alert(self):
        rec = decode_recommendation({"title": "Hold", "suggested_units": -3})
        assert rec.suggested_units == 0.0
        assert rec.risk_alert is None

    def test_decode_recommendation_rejects_non_mapping(self):
        assert decode_recommendation("advice") is None


class TestRecentResolved:
    def test_last_n_oldest_first(self):
        wagers = [
            make_wager(f"w{i}", date=T0 + hours(10 - i), status=WagerStatus.WON)
            for i in range(5)
        ] + [make_wager("p", date=T0 + hours(20))]
        recent = recent_resolved(Ledger(wagers=wagers), 3)
        assert [r.date for r in recent] == [
            (T0 + hours(h)).isoformat() for h in (8, 9, 10)
        ]
        assert all(r.status == "won" for r in recent)

    def test_zero_limit(self):
        wagers = [make_wager(status=WagerStatus.WON)]
        assert recent_resolved(Ledger(wagers=wagers), 0) == []
