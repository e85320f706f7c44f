"""Core infrastructure: settings, errors and transaction engines."""

from .config import Settings, get_settings
from .exceptions import (
    ConfigurationError,
    DuplicateKeyError,
    InvalidTransitionError,
    MissingRowError,
    RunLedgerError,
    StoreError,
    UnknownOperationError,
)
from .factory import create_transaction_engine
from .memory import InMemoryEngine
from .transaction import KeyedStore, MonotonicClock, TransactionContext, TransactionEngine

__all__ = [
    "ConfigurationError",
    "DuplicateKeyError",
    "InMemoryEngine",
    "InvalidTransitionError",
    "KeyedStore",
    "MissingRowError",
    "MonotonicClock",
    "RunLedgerError",
    "Settings",
    "StoreError",
    "TransactionContext",
    "TransactionEngine",
    "UnknownOperationError",
    "create_transaction_engine",
    "get_settings",
]
