"""LedgerEngine -- the single writer that owns the current ledger value.

The ledger is an immutable value that is replaced on every mutation:

1. build a candidate ledger from the current one,
2. recalculate every wager's units,
3. validate all invariants,
4. persist the candidate through the store,
5. swap it in.

A failure at any step leaves the previous value in place.

Operations that cross the process boundary (file import, classifier,
advisor, bet-slip extractor) are ``async`` and run inside a critical
section.  While one is outstanding every other mutation is rejected with
:class:`LedgerBusyError` instead of being interleaved.

Usage::

    engine = LedgerEngine(JsonFileLedgerStore(path), settings, classifier=clf)
    wager = engine.add_wager({"market": "Futebol", "stakeValue": 5, "odd": 1.9})
    engine.settle_wager(wager.id, WagerStatus.WON)
    await engine.import_file("backup.json")
    print(engine.stats().current_bankroll)
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from bankroll_ledger.core.clock import IClock, WallClock, resolve_timezone
from bankroll_ledger.core.config import Settings
from bankroll_ledger.core.enums import WagerStatus
from bankroll_ledger.core.errors import (
    ImportFileError,
    InvalidTransitionError,
    LedgerBusyError,
    LedgerIntegrityError,
    MutationRejectedError,
    WagerNotFoundError,
    WithdrawalNotFoundError,
)
from bankroll_ledger.core.ids import new_id
from bankroll_ledger.core.models import (
    BankrollHistoryPoint,
    DailyProfitPoint,
    Ledger,
    MarketPerformancePoint,
    Recommendation,
    StakeTier,
    Stats,
    Wager,
    Withdrawal,
)
from bankroll_ledger.core.file_io import atomic_write_text
from bankroll_ledger.ledger.blob import parse_ledger_text
from bankroll_ledger.ledger.export import LedgerExporter
from bankroll_ledger.ledger.normalizer import (
    MAX_STAKE,
    coerce_number,
    merge_record,
    normalize_extracted_wager,
    normalize_wager,
    parse_status,
)
from bankroll_ledger.ledger.performance import (
    available_years,
    daily_profit,
    market_performance,
)
from bankroll_ledger.ledger.projector import project_ledger
from bankroll_ledger.ledger.stats import compute_stats
from bankroll_ledger.ledger.units import recalculate_units, stake_ladder
from bankroll_ledger.ledger.validation import validate_ledger
from bankroll_ledger.llm.advisor import build_recommendation_request
from bankroll_ledger.llm.contracts import (
    IBetSlipExtractor,
    IRecommendationAdvisor,
    IWagerClassifier,
    decode_recommendation,
)
from bankroll_ledger.llm.errors import (
    ExtractionError,
    RecommendationError,
    ServiceUnavailableError,
)
from bankroll_ledger.llm.reconciler import ClassificationReconciler
from bankroll_ledger.observability.logger import get_logger, new_operation_id
from bankroll_ledger.storage.store import ILedgerStore, default_ledger

logger = get_logger(__name__)


class LedgerEngine:
    """Owns the ledger value and serializes every change to it.

    Parameters
    ----------
    store : ILedgerStore
        Where the ledger blob is loaded from and saved to.
    settings : Settings | None
        Unit percentage, time zone, batch sizes and timeouts.
    classifier, advisor, extractor :
        Optional external collaborators.  Operations that need a missing
        one raise :class:`ServiceUnavailableError`; import and bulk
        insertion skip reclassification when no classifier is configured.
    clock : IClock | None
        Source of creation timestamps.  Defaults to :class:`WallClock`.
    """

    def __init__(
        self,
        store: ILedgerStore,
        settings: Settings | None = None,
        *,
        classifier: IWagerClassifier | None = None,
        advisor: IRecommendationAdvisor | None = None,
        extractor: IBetSlipExtractor | None = None,
        clock: IClock | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._store = store
        self._clock = clock or WallClock()
        self._tz = resolve_timezone(self._settings.timezone)
        self._advisor = advisor
        self._extractor = extractor
        self._reconciler: ClassificationReconciler | None = None
        if classifier is not None:
            self._reconciler = ClassificationReconciler(
                classifier,
                batch_size=self._settings.classifier.batch_size,
                timeout_seconds=self._settings.classifier.timeout_seconds,
            )
        self._exporter = LedgerExporter()
        self._lock = asyncio.Lock()
        self._ledger = self._restore(store.load())

    # ------------------------------------------------------------------ #
    # State                                                                #
    # ------------------------------------------------------------------ #

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def busy(self) -> bool:
        """True while an external call holds the critical section."""
        return self._lock.locked()

    def _restore(self, loaded: Ledger) -> Ledger:
        """Bring a freshly loaded ledger back to a consistent state.

        A ledger that cannot be repaired is moved aside in the store and
        replaced by a default one.
        """
        unit_pct = self._settings.unit_percentage
        candidate = recalculate_units(loaded, unit_pct)
        try:
            validate_ledger(candidate, unit_pct)
        except LedgerIntegrityError as exc:
            logger.warning("ledger_restore_failed", reason=str(exc))
            self._store.preserve()
            return default_ledger(self._settings.default_initial_bankroll)
        return candidate

    # ------------------------------------------------------------------ #
    # Commit pipeline                                                      #
    # ------------------------------------------------------------------ #

    def _commit(self, operation: str, candidate: Ledger) -> Ledger:
        """Recalculate, validate, persist and swap in *candidate*."""
        unit_pct = self._settings.unit_percentage
        candidate = recalculate_units(candidate, unit_pct)
        try:
            validate_ledger(candidate, unit_pct)
        except LedgerIntegrityError as exc:
            logger.warning("mutation_rejected", operation=operation, reason=str(exc))
            raise MutationRejectedError(operation, str(exc)) from exc

        self._store.save(candidate)
        self._ledger = candidate
        logger.info(
            "ledger_committed",
            operation=operation,
            wagers=len(candidate.wagers),
            withdrawals=len(candidate.withdrawals),
        )
        return candidate

    def _mutate(self, operation: str, change: Callable[[Ledger], Ledger]) -> Ledger:
        if self._lock.locked():
            raise LedgerBusyError(
                f"Cannot {operation}: another ledger operation is in progress"
            )
        new_operation_id()
        return self._commit(operation, change(self._ledger))

    @asynccontextmanager
    async def _critical(self, operation: str) -> AsyncIterator[None]:
        """Exclusive section for operations that await external services."""
        if self._lock.locked():
            raise LedgerBusyError(
                f"Cannot {operation}: another ledger operation is in progress"
            )
        async with self._lock:
            new_operation_id()
            logger.info("operation_started", operation=operation)
            yield

    def _require_wager(self, wager_id: str) -> Wager:
        wager = self._ledger.find_wager(wager_id)
        if wager is None:
            raise WagerNotFoundError(f"No wager with id {wager_id!r}")
        return wager

    # ------------------------------------------------------------------ #
    # Wagers                                                               #
    # ------------------------------------------------------------------ #

    def add_wager(self, record: Mapping[str, Any]) -> Wager:
        """Create a Pending wager stamped with a new id and the current time."""
        now = self._clock.now()
        normalized = normalize_wager(record, now=now)
        if normalized is None:
            raise MutationRejectedError("add_wager", "record is not an object")
        wager = normalized.model_copy(update={"id": new_id(), "date": now}).with_status(
            WagerStatus.PENDING
        )
        committed = self._mutate(
            "add_wager",
            lambda led: led.model_copy(update={"wagers": [*led.wagers, wager]}),
        )
        return committed.find_wager(wager.id)

    def update_wager(self, wager_id: str, changes: Mapping[str, Any]) -> Wager:
        """Edit any field except the id and the creation timestamp."""
        existing = self._require_wager(wager_id)
        base = existing.model_dump(mode="json", by_alias=True)
        merged = merge_record(base, changes)
        merged["id"] = existing.id
        merged["date"] = existing.date
        edited = normalize_wager(merged, now=existing.date)
        if edited is None:
            raise MutationRejectedError("update_wager", "changes are not an object")

        committed = self._mutate(
            "update_wager",
            lambda led: led.model_copy(update={
                "wagers": [edited if w.id == wager_id else w for w in led.wagers],
            }),
        )
        return committed.find_wager(wager_id)

    def settle_wager(self, wager_id: str, status: WagerStatus | str) -> Wager:
        """Resolve a Pending wager as Won or Lost."""
        target = parse_status(status)
        if not target.is_resolved:
            raise InvalidTransitionError(f"Cannot settle wager as {status!r}")
        existing = self._require_wager(wager_id)
        if existing.is_resolved:
            raise InvalidTransitionError(
                f"Wager {wager_id} is already {existing.status.value}"
            )
        settled = existing.with_status(target)
        committed = self._mutate(
            "settle_wager",
            lambda led: led.model_copy(update={
                "wagers": [settled if w.id == wager_id else w for w in led.wagers],
            }),
        )
        return committed.find_wager(wager_id)

    def delete_wager(self, wager_id: str) -> None:
        self._require_wager(wager_id)
        self._mutate(
            "delete_wager",
            lambda led: led.model_copy(update={
                "wagers": [w for w in led.wagers if w.id != wager_id],
            }),
        )

    # ------------------------------------------------------------------ #
    # Withdrawals and settings                                             #
    # ------------------------------------------------------------------ #

    def add_withdrawal(self, amount: float) -> Withdrawal:
        value = coerce_number(amount)
        if value is None or not 0 <= value <= MAX_STAKE:
            raise MutationRejectedError("add_withdrawal", f"invalid amount {amount!r}")
        withdrawal = Withdrawal(id=new_id(), date=self._clock.now(), amount=value)
        self._mutate(
            "add_withdrawal",
            lambda led: led.model_copy(update={
                "withdrawals": [*led.withdrawals, withdrawal],
            }),
        )
        return withdrawal

    def delete_withdrawal(self, withdrawal_id: str) -> None:
        if not any(wd.id == withdrawal_id for wd in self._ledger.withdrawals):
            raise WithdrawalNotFoundError(f"No withdrawal with id {withdrawal_id!r}")
        self._mutate(
            "delete_withdrawal",
            lambda led: led.model_copy(update={
                "withdrawals": [wd for wd in led.withdrawals if wd.id != withdrawal_id],
            }),
        )

    def set_initial_bankroll(self, amount: float) -> None:
        value = coerce_number(amount)
        if value is None or value <= 0:
            raise MutationRejectedError(
                "set_initial_bankroll", f"initial bankroll must be positive, got {amount!r}",
            )
        self._mutate(
            "set_initial_bankroll",
            lambda led: led.model_copy(update={"initial_bankroll": value}),
        )

    def blacklist_team(self, team: str) -> None:
        """Hide *team* from the existing-teams suggestions."""
        name = team.strip()
        if not name or name in self._ledger.blacklisted_teams:
            return
        self._mutate(
            "blacklist_team",
            lambda led: led.model_copy(update={
                "blacklisted_teams": [*led.blacklisted_teams, name],
            }),
        )

    def clear(self) -> None:
        """Replace everything with an empty default ledger."""
        self._mutate(
            "clear",
            lambda _led: default_ledger(self._settings.default_initial_bankroll),
        )

    # ------------------------------------------------------------------ #
    # Operations crossing the process boundary                             #
    # ------------------------------------------------------------------ #

    async def _reclassify(self, wagers: list[Wager]) -> list[Wager]:
        if self._reconciler is None:
            logger.info("reclassification_skipped", reason="no classifier configured")
            return wagers
        return await self._reconciler.reconcile(wagers)

    async def import_text(self, text: str) -> Ledger:
        """Replace the ledger with an imported JSON document.

        The document is decoded record by record, units are recalculated
        for the imported set, the result is reclassified, and only then
        is it committed.
        """
        async with self._critical("import"):
            imported = parse_ledger_text(text, now=self._clock.now())
            imported = recalculate_units(imported, self._settings.unit_percentage)
            wagers = await self._reclassify(imported.wagers)
            return self._commit("import", imported.model_copy(update={"wagers": wagers}))

    async def import_file(self, path: str | Path) -> Ledger:
        try:
            text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ImportFileError(f"Cannot read {path}: {exc}") from exc
        return await self.import_text(text)

    async def add_extracted_wagers(
        self,
        records: list[Mapping[str, Any] | Wager],
    ) -> list[Wager]:
        """Insert bet-slip wagers and reclassify the whole resulting set."""
        async with self._critical("add_extracted_wagers"):
            now = self._clock.now()
            new_wagers: list[Wager] = []
            for raw in records:
                if isinstance(raw, Wager):
                    raw = raw.model_dump(mode="json", by_alias=True)
                wager = normalize_extracted_wager(raw, now=now)
                if wager is not None:
                    new_wagers.append(wager)
            if not new_wagers:
                raise MutationRejectedError("add_extracted_wagers", "no usable wager records")

            candidate = recalculate_units(
                self._ledger.model_copy(update={"wagers": [*self._ledger.wagers, *new_wagers]}),
                self._settings.unit_percentage,
            )
            wagers = await self._reclassify(candidate.wagers)
            committed = self._commit(
                "add_extracted_wagers", candidate.model_copy(update={"wagers": wagers}),
            )
            ids = {w.id for w in new_wagers}
            return [w for w in committed.wagers if w.id in ids]

    async def reclassify(self) -> Ledger:
        """Run the classifier over every wager."""
        if self._reconciler is None:
            raise ServiceUnavailableError("No classifier configured")
        async with self._critical("reclassify"):
            wagers = await self._reconciler.reconcile(self._ledger.wagers)
            return self._commit("reclassify", self._ledger.model_copy(update={"wagers": wagers}))

    async def scan_bet_slip(self, image: bytes, mime_type: str) -> list[Wager]:
        """Extract wager previews from a bet-slip image.  Nothing is committed."""
        if self._extractor is None:
            raise ServiceUnavailableError("No bet-slip extractor configured")
        try:
            answer = await asyncio.wait_for(
                self._extractor.extract(image, mime_type),
                timeout=self._settings.classifier.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise ExtractionError("Bet-slip extraction timed out") from exc
        except Exception as exc:
            logger.exception("extraction_failed")
            raise ExtractionError(f"Bet-slip extraction failed: {exc}") from exc
        if not isinstance(answer, list):
            raise ExtractionError("Extractor did not return a list of records")

        now = self._clock.now()
        previews = [normalize_extracted_wager(raw, now=now) for raw in answer]
        return [w for w in previews if w is not None]

    async def recommend(self) -> Recommendation:
        """Ask the advisor for coaching.  The ledger is never touched."""
        if self._advisor is None:
            raise ServiceUnavailableError("No recommendation advisor configured")
        cfg = self._settings.recommendation
        request = build_recommendation_request(
            self._ledger,
            self.stats(),
            self.market_performance(),
            recent_limit=cfg.recent_history_limit,
            daily=self.daily_profit(),
        )
        try:
            answer = await asyncio.wait_for(
                self._advisor.advise(request), timeout=cfg.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise RecommendationError("Recommendation request timed out") from exc
        except Exception as exc:
            logger.exception("recommendation_failed")
            raise RecommendationError(f"Recommendation request failed: {exc}") from exc

        recommendation = decode_recommendation(answer)
        if recommendation is None:
            raise RecommendationError("Advisor returned an unusable answer")
        return recommendation

    # ------------------------------------------------------------------ #
    # Read models                                                          #
    # ------------------------------------------------------------------ #

    def projection(self) -> list[BankrollHistoryPoint]:
        return project_ledger(self._ledger, tz=self._tz, now=self._clock.now())

    def stats(self) -> Stats:
        return compute_stats(self._ledger, self.projection())

    def _year(self, year: int | None) -> int:
        return year if year is not None else self._clock.now().astimezone(self._tz).year

    def market_performance(self, year: int | None = None) -> list[MarketPerformancePoint]:
        return market_performance(
            self._ledger.wagers,
            self._year(year),
            months=self._settings.performance.months,
            tz=self._tz,
        )

    def daily_profit(self, year: int | None = None) -> list[DailyProfitPoint]:
        return daily_profit(self._ledger.wagers, self._year(year), tz=self._tz)

    def available_years(self) -> list[int]:
        return available_years(self._ledger.wagers, self._year(None), tz=self._tz)

    def stake_ladder(self) -> list[StakeTier]:
        return stake_ladder(
            self.stats().current_bankroll,
            self._settings.unit_percentage,
            self._settings.stake_ladder,
        )

    # ------------------------------------------------------------------ #
    # Export                                                               #
    # ------------------------------------------------------------------ #

    def export_json(self) -> str:
        return self._exporter.to_json(self._ledger)

    def export_csv(self) -> str:
        return self._exporter.to_csv(self._ledger.wagers)

    def export_file(self, path: str | Path) -> Path:
        target = Path(path)
        text = self.export_csv() if target.suffix.lower() == ".csv" else self.export_json()
        atomic_write_text(target, text)
        logger.info("ledger_exported", path=str(target))
        return target
