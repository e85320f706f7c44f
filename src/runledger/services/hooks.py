"""Lifecycle hooks called by the hosting runtime. They hold no state."""

import logging
from typing import Optional

from ..core.transaction import TransactionContext

logger = logging.getLogger(__name__)


async def on_startup(ctx: TransactionContext) -> None:
    logger.debug(f"Ledger started at {ctx.timestamp}")


async def on_client_connect(ctx: TransactionContext, client_id: Optional[str] = None) -> None:
    logger.debug(f"Client connected: {client_id}")


async def on_client_disconnect(ctx: TransactionContext, client_id: Optional[str] = None) -> None:
    logger.debug(f"Client disconnected: {client_id}")
