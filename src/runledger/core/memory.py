"""In-memory transaction engine.

Used when no database is configured. Transactions are serialized with an
asyncio.Lock; each one writes to copies of the tables that replace the
committed tables only when the block exits without an exception.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from .exceptions import DuplicateKeyError, MissingRowError
from .transaction import KeyedStore, MonotonicClock, RecordT, TransactionContext, TransactionEngine

logger = logging.getLogger(__name__)


TEMPLATES = "templates"
RUNS = "runs"
RUN_PAYLOADS = "run_payloads"


class InMemoryStore(KeyedStore[RecordT]):
    """Keyed store over a plain dict of frozen records."""

    def __init__(self, table: str, rows: Dict[str, RecordT], key_field: str = "id"):
        self.table = table
        self.key_field = key_field
        self._rows = rows

    async def find(self, key: str) -> Optional[RecordT]:
        return self._rows.get(key)

    async def insert(self, row: RecordT) -> None:
        key = self.key_of(row)
        if key in self._rows:
            raise DuplicateKeyError(self.table, key)
        self._rows[key] = row

    async def update(self, row: RecordT) -> None:
        key = self.key_of(row)
        if key not in self._rows:
            raise MissingRowError(self.table, key)
        self._rows[key] = row

    async def delete(self, key: str) -> bool:
        return self._rows.pop(key, None) is not None

    async def scan(self) -> List[RecordT]:
        return list(self._rows.values())


class InMemoryEngine(TransactionEngine):
    """Process-local engine holding the three ledger tables in dicts."""

    name = "memory"

    def __init__(self, clock: Optional[MonotonicClock] = None):
        super().__init__(clock)
        self._tables: Dict[str, Dict[str, object]] = {
            TEMPLATES: {},
            RUNS: {},
            RUN_PAYLOADS: {},
        }
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[TransactionContext]:
        async with self._lock:
            # Records are immutable, so shallow copies isolate the writes
            working = {name: dict(rows) for name, rows in self._tables.items()}
            ctx = TransactionContext(
                timestamp=self.clock.now_iso(),
                templates=InMemoryStore(TEMPLATES, working[TEMPLATES]),
                runs=InMemoryStore(RUNS, working[RUNS]),
                run_payloads=InMemoryStore(RUN_PAYLOADS, working[RUN_PAYLOADS], key_field="run_id"),
            )
            try:
                yield ctx
            except Exception:
                logger.debug(f"Rolled back transaction at {ctx.timestamp}")
                raise
            self._tables = working
