"""Periodic sweep task started from the app lifespan."""

import asyncio
import logging

from src.shuk_marketplace.container import Marketplace

logger = logging.getLogger(__name__)


async def run_sweeper(marketplace: Marketplace, interval_seconds: float) -> None:
    """Run ``Marketplace.sweep`` forever; a failed pass is logged and retried."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await marketplace.sweep()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("Sweep pass failed", exc_info=True)
