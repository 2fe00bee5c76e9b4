from .database import Database
from .ledger_store import LedgerStore, SqliteLedgerStore, StorageFailure
from .rest_store import RestLedgerStore

__all__ = [
    "Database",
    "LedgerStore",
    "RestLedgerStore",
    "SqliteLedgerStore",
    "StorageFailure",
]
