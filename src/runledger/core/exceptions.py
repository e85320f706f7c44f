"""Custom exceptions for the run ledger."""

from typing import Any, Dict, Optional


class RunLedgerError(Exception):
    """Base exception for all run ledger errors."""

    def __init__(
        self,
        message: str = "An error occurred",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(RunLedgerError):
    """Raised when settings do not describe a usable persistence backend."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class StoreError(RunLedgerError):
    """Raised by a keyed store when a write cannot be applied.

    These come from the transaction engine, never from operation handlers,
    and abort the surrounding transaction.
    """


class DuplicateKeyError(StoreError):
    """Raised when inserting a row whose key already exists."""

    def __init__(self, table: str, key: str):
        super().__init__(f"Row {key!r} already exists in {table}", {"table": table, "key": key})


class MissingRowError(StoreError):
    """Raised when updating a row that does not exist."""

    def __init__(self, table: str, key: str):
        super().__init__(f"Row {key!r} not found in {table}", {"table": table, "key": key})


class InvalidTransitionError(RunLedgerError):
    """Raised in strict mode when a run status change is not allowed."""

    def __init__(self, run_id: str, current: str, target: str):
        self.run_id = run_id
        self.current = current
        self.target = target
        super().__init__(
            f"Run {run_id} cannot move from {current!r} to {target!r}",
            {"run_id": run_id, "current": current, "target": target}
        )


class UnknownOperationError(RunLedgerError):
    """Raised when dispatching an operation name that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown operation: {name}", {"operation": name})
