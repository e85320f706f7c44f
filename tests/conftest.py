"""Pytest configuration for ledger tests."""

import pytest
import pytest_asyncio

from runledger.core.config import Settings
from runledger.core.database import SqlAlchemyEngine
from runledger.core.memory import InMemoryEngine
from runledger.services.ledger_service import LedgerService

from .helpers import ManualClock


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest_asyncio.fixture(params=["memory", "database"])
async def engine(request, clock, tmp_path):
    """Both transaction engines, started and torn down per test."""
    if request.param == "memory":
        engine = InMemoryEngine(clock)
    else:
        db_settings = Settings(
            _env_file=None,
            DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        )
        engine = SqlAlchemyEngine.from_settings(db_settings, clock)

    await engine.startup()
    yield engine
    await engine.shutdown()


@pytest.fixture
def service(engine, settings) -> LedgerService:
    return LedgerService(engine, settings)
