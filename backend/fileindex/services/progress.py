"""Scan progress fan-out — every subscriber gets its own bounded queue."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fileindex.schemas.files import ScanProgress

logger = logging.getLogger(__name__)


class ProgressBroadcaster:
    """Pushes ScanProgress events to all current subscribers.

    A slow subscriber loses its oldest events rather than blocking the scan.
    """

    def __init__(self, queue_size: int = 1000):
        self._queue_size = queue_size
        self._subscribers: set[asyncio.Queue[ScanProgress]] = set()
        self.latest: ScanProgress | None = None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, progress: ScanProgress) -> None:
        self.latest = progress
        for queue in list(self._subscribers):
            if queue.full():
                try:
                    queue.get_nowait()
                except asyncio.QueueEmpty:
                    pass
            queue.put_nowait(progress)

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue[ScanProgress]]:
        queue: asyncio.Queue[ScanProgress] = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.add(queue)
        logger.debug("Progress subscriber added (%d total)", len(self._subscribers))
        try:
            yield queue
        finally:
            self._subscribers.discard(queue)
            logger.debug("Progress subscriber removed (%d left)", len(self._subscribers))
