"""Shared fixtures for the bankroll-ledger test suite."""

from __future__ import annotations

import pytest

from bankroll_ledger.core.clock import FixedClock
from bankroll_ledger.core.config import Settings
from bankroll_ledger.core.models import Ledger
from bankroll_ledger.engine import LedgerEngine
from bankroll_ledger.storage.store import MemoryLedgerStore

from tests.factories import T0


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def settings() -> Settings:
    return Settings(unit_percentage=0.01, timezone="UTC")


@pytest.fixture
def store() -> MemoryLedgerStore:
    return MemoryLedgerStore()


@pytest.fixture
def engine(store, settings, clock) -> LedgerEngine:
    return LedgerEngine(store, settings, clock=clock)


@pytest.fixture
def empty_ledger() -> Ledger:
    return Ledger(initial_bankroll=100.0)
