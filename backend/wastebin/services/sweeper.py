# wastebin/services/sweeper.py

import asyncio
import logging

from wastebin.core.errors import StorageUnavailable
from wastebin.core.lifecycle import PasteManager

logger = logging.getLogger(__name__)

MIN_SWEEP_INTERVAL = 5


def sweep_once(manager: PasteManager) -> int:
    """Delete expired pastes. Expiry is enforced on read either way."""
    try:
        return manager.sweep()
    except StorageUnavailable as exc:
        logger.warning("Sweep skipped: %s", exc)
        return 0


async def sweep_forever(manager: PasteManager, interval: int) -> None:
    while True:
        await asyncio.to_thread(sweep_once, manager)
        await asyncio.sleep(max(MIN_SWEEP_INTERVAL, interval))
