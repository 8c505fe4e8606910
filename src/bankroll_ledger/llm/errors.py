"""Errors raised at the external-service boundary.

All inherit from :class:`LedgerError` via :class:`LLMError`.  Any of
them leaves the ledger in its pre-call state.
"""

from __future__ import annotations

from bankroll_ledger.core.errors import LedgerError


class LLMError(LedgerError):
    """Base for all external-service errors."""


class ServiceUnavailableError(LLMError):
    """The collaborator needed for this operation is not configured."""


class ClassificationError(LLMError):
    """A classifier batch failed; the whole multi-batch run is aborted."""

    def __init__(self, batch_index: int, batch_count: int, reason: str):
        self.batch_index = batch_index
        self.batch_count = batch_count
        self.reason = reason
        super().__init__(
            f"Classification batch {batch_index + 1}/{batch_count} failed: {reason}"
        )


class RecommendationError(LLMError):
    """The recommendation service failed or returned an unusable answer."""


class ExtractionError(LLMError):
    """Bet-slip extraction failed or returned an unusable answer."""
