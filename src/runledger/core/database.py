"""Database transaction engine with async SQLAlchemy."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Type

from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..models.base import Base
from ..models.ledger import RunPayloadRow, RunRow, TemplateRow
from ..schemas.records import Run, RunPayload, Template
from .config import Settings
from .exceptions import DuplicateKeyError, MissingRowError
from .transaction import KeyedStore, MonotonicClock, RecordT, TransactionContext, TransactionEngine

logger = logging.getLogger(__name__)


def _serialize_sqlite_transactions(engine: AsyncEngine) -> None:
    """Make every SQLite transaction take the write lock up front.

    The sqlite3 driver only emits BEGIN before the first write, so reads made
    earlier in a transaction would see data another transaction can still
    change. BEGIN IMMEDIATE holds the reserved lock from the first statement
    until commit, so overlapping transactions wait on each other.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine described by settings."""
    url = str(settings.DATABASE_URL)
    kwargs: Dict[str, Any] = {"echo": settings.SQL_ECHO, "future": True}
    if url.startswith("sqlite"):
        engine = create_async_engine(url, **kwargs)
        _serialize_sqlite_transactions(engine)
        return engine

    kwargs.update(
        isolation_level=settings.DATABASE_ISOLATION_LEVEL,
        pool_size=settings.MAX_CONNECTIONS_COUNT,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
    )
    return create_async_engine(url, **kwargs)


class SqlAlchemyStore(KeyedStore[RecordT]):
    """Keyed store mapping records onto one ORM table within a session."""

    def __init__(
        self,
        session: AsyncSession,
        model: Type[Base],
        record: Type[RecordT],
        key_field: str = "id",
    ):
        self.session = session
        self.model = model
        self.record = record
        self.table = model.__tablename__
        self.key_field = key_field

    async def find(self, key: str) -> Optional[RecordT]:
        obj = await self.session.get(self.model, key)
        if obj is None:
            return None
        return self.record.model_validate(obj)

    async def insert(self, row: RecordT) -> None:
        key = self.key_of(row)
        if await self.session.get(self.model, key) is not None:
            raise DuplicateKeyError(self.table, key)
        self.session.add(self.model(**row.model_dump(by_alias=True)))
        await self.session.flush()

    async def update(self, row: RecordT) -> None:
        key = self.key_of(row)
        obj = await self.session.get(self.model, key)
        if obj is None:
            raise MissingRowError(self.table, key)
        for field, value in row.model_dump(by_alias=True).items():
            setattr(obj, field, value)
        await self.session.flush()

    async def delete(self, key: str) -> bool:
        obj = await self.session.get(self.model, key)
        if obj is None:
            return False
        await self.session.delete(obj)
        await self.session.flush()
        return True

    async def scan(self) -> List[RecordT]:
        result = await self.session.execute(select(self.model))
        return [self.record.model_validate(obj) for obj in result.scalars().all()]


class SqlAlchemyEngine(TransactionEngine):
    """Runs each transaction in its own session inside session.begin()."""

    name = "database"

    def __init__(self, engine: AsyncEngine, clock: Optional[MonotonicClock] = None):
        super().__init__(clock)
        self.engine = engine
        self.session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings, clock: Optional[MonotonicClock] = None) -> "SqlAlchemyEngine":
        return cls(create_db_engine(settings), clock)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[TransactionContext]:
        async with self.session_maker() as session:
            async with session.begin():
                yield TransactionContext(
                    timestamp=self.clock.now_iso(),
                    templates=SqlAlchemyStore(session, TemplateRow, Template),
                    runs=SqlAlchemyStore(session, RunRow, Run),
                    run_payloads=SqlAlchemyStore(session, RunPayloadRow, RunPayload, key_field="run_id"),
                )

    async def startup(self) -> None:
        """Create the ledger tables; there is no migration step."""
        await super().startup()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Ledger tables ready: {', '.join(sorted(Base.metadata.tables))}")

    async def shutdown(self) -> None:
        await super().shutdown()
        await self.engine.dispose()
