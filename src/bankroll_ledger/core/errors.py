"""Custom exception hierarchy for the bankroll ledger."""


class LedgerError(Exception):
    """Base exception for all ledger errors."""


# --- Configuration ---
class ConfigError(LedgerError):
    """Invalid or missing configuration."""


# --- Validation ---
class ValidationError(LedgerError):
    """A ledger value failed validation."""


class LedgerIntegrityError(ValidationError):
    """A ledger invariant does not hold after a mutation."""


class InvalidTransitionError(ValidationError):
    """Wager status transition is not allowed (only Pending -> Won/Lost)."""


class WagerNotFoundError(ValidationError):
    """No wager with the requested id exists in the ledger."""


class WithdrawalNotFoundError(ValidationError):
    """No withdrawal with the requested id exists in the ledger."""


# --- Mutation ---
class MutationRejectedError(LedgerError):
    """A mutation was rejected; the previous ledger state is retained."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Mutation [{operation}] rejected: {reason}")


class LedgerBusyError(LedgerError):
    """Another ledger writer holds the critical section."""


# --- Import / storage ---
class ImportFileError(LedgerError):
    """Import file is unreadable or structurally invalid."""


class StorageError(LedgerError):
    """Ledger blob could not be persisted."""
