"""Pick the transaction engine described by settings."""

import logging
from typing import Optional

from .config import DATABASE_BACKEND, MEMORY_BACKEND, Settings, get_settings
from .exceptions import ConfigurationError
from .transaction import MonotonicClock, TransactionEngine

logger = logging.getLogger(__name__)


def create_transaction_engine(
    settings: Optional[Settings] = None,
    clock: Optional[MonotonicClock] = None,
) -> TransactionEngine:
    """Build the in-memory or database engine.

    Raises:
        ConfigurationError: unknown backend, or database backend without a URL
    """
    settings = settings or get_settings()
    backend = settings.BACKEND

    if backend == MEMORY_BACKEND:
        from .memory import InMemoryEngine

        logger.info("Using in-memory persistence")
        return InMemoryEngine(clock)

    if backend == DATABASE_BACKEND:
        if not settings.DATABASE_URL:
            raise ConfigurationError(
                "DATABASE_URL is required for the database backend",
                {"backend": backend}
            )
        from .database import SqlAlchemyEngine

        logger.info("Using database persistence")
        return SqlAlchemyEngine.from_settings(settings, clock)

    raise ConfigurationError(
        f"Unknown persistence backend: {backend}",
        {"backend": backend, "supported": [MEMORY_BACKEND, DATABASE_BACKEND]}
    )
