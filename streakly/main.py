"""Streakly — main entry point.

Starts all subsystems:
1. Database initialization
2. Habit store (restored from storage)
3. Transport (Telegram by default)
"""

import asyncio
import logging

from streakly.config import LOG_LEVEL, OWNER_USER_ID
from streakly.db import init_db
from streakly.errors import StorageError
from streakly.store import HabitStore
from streakly.transport.telegram import TelegramTransport

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)-5s %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)
# Keep polling noise out of the log
logging.getLogger("httpx").setLevel(logging.WARNING)
log = logging.getLogger("streakly")


async def main():
    """Boot sequence."""
    log.info("=" * 50)
    log.info("Streakly starting up...")
    log.info("=" * 50)

    # 1. Database
    try:
        init_db()
        log.info("Database ready")
    except StorageError as e:
        log.error("Database unavailable, habits will not be saved: %s", e)

    # 2. Store
    store = HabitStore()
    store.load()

    # 3. Transport
    transport = TelegramTransport(store)
    await transport.start()
    log.info("Transport started: %s", transport.name)

    if OWNER_USER_ID:
        await transport.send_screen(OWNER_USER_ID)

    # Keep running
    try:
        while True:
            await asyncio.sleep(3600)
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        log.info("Shutting down...")
        await transport.stop()


if __name__ == "__main__":
    asyncio.run(main())
