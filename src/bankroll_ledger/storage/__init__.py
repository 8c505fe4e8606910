from .store import (
    ILedgerStore,
    JsonFileLedgerStore,
    MemoryLedgerStore,
    default_ledger,
)

__all__ = ["ILedgerStore", "JsonFileLedgerStore", "MemoryLedgerStore", "default_ledger"]
