"""
Worker entrypoint for notification retries.
Re-dispatches outbox emails that are pending, failed, or abandoned mid-send,
below the attempt ceiling.

Usage: python -m app.worker [--loop SECONDS]
"""
import argparse
import asyncio
import logging

from app import database
from app.services.notifications import DispatchSummary, flush_pending_notifications

logger = logging.getLogger(__name__)


async def flush_once(batch_size: int = 100) -> DispatchSummary:
    async with database.AsyncSessionLocal() as db:
        return await flush_pending_notifications(db, limit=batch_size)


async def worker_main(interval: float = 0, batch_size: int = 100):
    """Flush once, or forever every `interval` seconds when interval > 0."""
    while True:
        summary = await flush_once(batch_size)
        logger.info(f"Outbox flush: {summary.sent} sent, {summary.failed} failed")
        if interval <= 0:
            break
        await asyncio.sleep(interval)
    await database.engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    parser = argparse.ArgumentParser(description="Retry undelivered notification emails")
    parser.add_argument("--loop", type=float, default=0, help="Repeat every N seconds")
    parser.add_argument("--batch-size", type=int, default=100)
    args = parser.parse_args()
    asyncio.run(worker_main(args.loop, args.batch_size))
