from __future__ import annotations

import asyncio
import logging

from .rooms import RoomStore

logger = logging.getLogger(__name__)


def reap_once(store: RoomStore, max_age_s: float, now: float | None = None) -> list[str]:
    evicted = store.reap(max_age_s, now=now)
    for rid in evicted:
        logger.info("cleaned up inactive room %s", rid)
    return evicted


async def reaper_loop(store: RoomStore, *, interval_s: float, max_age_s: float) -> None:
    """
    Evict stale empty rooms every `interval_s` seconds until cancelled.

    Rooms are already deleted the moment their last member leaves, so this is
    a safety net for anything that slipped past that path.
    """
    while True:
        await asyncio.sleep(interval_s)
        try:
            reap_once(store, max_age_s)
        except Exception:
            logger.exception("reaper sweep failed")
