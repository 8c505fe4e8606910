"""Classification reconciler.

Sends wagers to the external classifier in fixed-size batches and merges
the corrected ``market`` / ``league`` labels back by id.

Semantics
---------
* Batches run sequentially, each under its own timeout.
* Any failing batch aborts the whole run with :class:`ClassificationError`;
  corrections from earlier batches are discarded, nothing is merged.
* Only wagers named in the corrections change, and only their market and
  league.  The classifier may stay silent about any wager.

Usage::

    reconciler = ClassificationReconciler(classifier, batch_size=50)
    wagers = await reconciler.reconcile(ledger.wagers)
"""

from __future__ import annotations

import asyncio
import logging

from bankroll_ledger.core.models import Wager

from .contracts import (
    ClassificationCorrection,
    ClassificationRequest,
    IWagerClassifier,
    decode_correction,
)
from .errors import ClassificationError

logger = logging.getLogger(__name__)


def merge_corrections(
    wagers: list[Wager],
    corrections: dict[str, ClassificationCorrection],
) -> list[Wager]:
    """Overwrite market/league of corrected wagers; others pass through."""
    out: list[Wager] = []
    for wager in wagers:
        fix = corrections.get(wager.id)
        if fix is not None and (fix.market != wager.market or fix.league != wager.league):
            wager = wager.model_copy(update={"market": fix.market, "league": fix.league})
        out.append(wager)
    return out


class ClassificationReconciler:
    """Batch wagers through an :class:`IWagerClassifier`, all or nothing.

    Parameters
    ----------
    classifier : IWagerClassifier
        External classifier.
    batch_size : int
        Wagers per request.  Default 50.
    timeout_seconds : float
        Time limit for each batch.
    """

    def __init__(
        self,
        classifier: IWagerClassifier,
        *,
        batch_size: int = 50,
        timeout_seconds: float = 60.0,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._classifier = classifier
        self._batch_size = batch_size
        self._timeout = timeout_seconds

    def batches(self, wagers: list[Wager]) -> list[list[Wager]]:
        size = self._batch_size
        return [wagers[i:i + size] for i in range(0, len(wagers), size)]

    async def collect_corrections(
        self,
        wagers: list[Wager],
    ) -> dict[str, ClassificationCorrection]:
        """Run every batch and return the corrections keyed by wager id.

        Raises:
            ClassificationError: a batch raised, timed out or answered
                with something other than a list.
        """
        batches = self.batches(wagers)
        corrections: dict[str, ClassificationCorrection] = {}
        ignored = 0

        for idx, batch in enumerate(batches):
            requests = [ClassificationRequest.from_wager(w) for w in batch]
            try:
                answer = await asyncio.wait_for(
                    self._classifier.classify(requests), timeout=self._timeout,
                )
            except asyncio.TimeoutError as exc:
                raise ClassificationError(
                    idx, len(batches), f"timed out after {self._timeout}s",
                ) from exc
            except Exception as exc:
                raise ClassificationError(idx, len(batches), str(exc) or type(exc).__name__) from exc

            if not isinstance(answer, list):
                raise ClassificationError(
                    idx, len(batches), f"expected a list, got {type(answer).__name__}",
                )

            requested = {r.id for r in requests}
            for raw in answer:
                fix = decode_correction(raw)
                if fix is None or fix.id not in requested:
                    ignored += 1
                    continue
                corrections[fix.id] = fix

        if ignored:
            logger.warning("Ignored %d unusable classifier correction(s)", ignored)
        logger.info(
            "Classifier returned %d correction(s) for %d wager(s) in %d batch(es)",
            len(corrections), len(wagers), len(batches),
        )
        return corrections

    async def reconcile(self, wagers: list[Wager]) -> list[Wager]:
        """Reclassified copy of *wagers*; raises before merging on any failure."""
        if not wagers:
            return []
        corrections = await self.collect_corrections(wagers)
        return merge_corrections(wagers, corrections)
