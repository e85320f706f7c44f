"""Transaction context shared by every ledger operation.

An operation receives a TransactionContext holding the transaction timestamp
and one KeyedStore per table. Engines decide how isolation and commit work;
operations only read rows by key, compute the new row and write it back.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import AsyncContextManager, Callable, Generic, List, Optional, TypeVar

from ..schemas.records import LedgerRecord, Run, RunPayload, Template

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=LedgerRecord)


class MonotonicClock:
    """UTC wall clock that never repeats or goes backwards."""

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._last: Optional[datetime] = None

    def now(self) -> datetime:
        current = self._now()
        if self._last is not None and current <= self._last:
            current = self._last + timedelta(microseconds=1)
        self._last = current
        return current

    def now_iso(self) -> str:
        return self.now().isoformat()


class KeyedStore(ABC, Generic[RecordT]):
    """Read/write access to one table, keyed by its primary key."""

    table: str
    key_field: str

    def key_of(self, row: RecordT) -> str:
        return getattr(row, self.key_field)

    @abstractmethod
    async def find(self, key: str) -> Optional[RecordT]:
        """Return the row stored under key, or None."""

    @abstractmethod
    async def insert(self, row: RecordT) -> None:
        """Insert a new row; raises DuplicateKeyError if the key exists."""

    @abstractmethod
    async def update(self, row: RecordT) -> None:
        """Replace an existing row; raises MissingRowError if absent."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove the row stored under key. Returns whether one existed."""

    @abstractmethod
    async def scan(self) -> List[RecordT]:
        """Return every row in the table."""


@dataclass
class TransactionContext:
    """What an operation sees of its transaction."""
    timestamp: str
    templates: KeyedStore[Template]
    runs: KeyedStore[Run]
    run_payloads: KeyedStore[RunPayload]


class TransactionEngine(ABC):
    """Runs units of work atomically and in isolation.

    Leaving the transaction() block normally commits every write made through
    the context. Any exception rolls all of them back and propagates.
    """

    name = "engine"

    def __init__(self, clock: Optional[MonotonicClock] = None):
        self.clock = clock or MonotonicClock()

    @abstractmethod
    def transaction(self) -> AsyncContextManager[TransactionContext]:
        """Open a transaction and yield its context."""

    async def startup(self) -> None:
        logger.info(f"Starting {self.name} transaction engine")

    async def shutdown(self) -> None:
        logger.info(f"Stopping {self.name} transaction engine")
