"""Entry point: prepare the configured persistence backend."""

import asyncio
import logging

from .core.config import Settings, get_settings
from .core.factory import create_transaction_engine
from .services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


async def init_ledger(settings: Settings) -> None:
    """Start the ledger once (creating tables if needed) and shut it down."""
    service = LedgerService(create_transaction_engine(settings), settings)
    await service.startup()
    try:
        logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} ready ({settings.BACKEND} backend)")
    finally:
        await service.shutdown()


def main():
    """CLI entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format=settings.LOG_FORMAT
    )
    asyncio.run(init_ledger(settings))


if __name__ == "__main__":
    main()
