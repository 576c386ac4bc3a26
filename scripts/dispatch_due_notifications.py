"""
Dispatch Due Notifications

Sends pending notifications whose send time has arrived. Meant to be run
by cron (or any external scheduler), e.g. every minute:

    * * * * * cd /srv/admissions && python scripts/dispatch_due_notifications.py

Usage:
    python scripts/dispatch_due_notifications.py [--limit 100]
"""

import argparse
import asyncio
import logging

from admissions.core.config import settings
from admissions.core.database import async_session_maker, close_db
from admissions.modules.notifications import service as notification_service

logger = logging.getLogger("dispatch_due_notifications")


async def dispatch(limit: int) -> dict[str, int]:
    async with async_session_maker() as db:
        counts = await notification_service.dispatch_due(db, limit=limit)
    await close_db()
    return counts


def main() -> None:
    parser = argparse.ArgumentParser(description="Send notifications that are due")
    parser.add_argument("--limit", type=int, default=notification_service.DUE_BATCH_SIZE)
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    counts = asyncio.run(dispatch(args.limit))
    logger.info(
        f"Done: {counts['sent']} sent, {counts['failed']} failed, "
        f"{counts['pending']} pending"
    )


if __name__ == "__main__":
    main()
