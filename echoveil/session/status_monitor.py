"""Background polling of the server's AI availability."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from ..campaign.models import AIStatus
from ..core.serialization import utcnow

logger = logging.getLogger(__name__)


class AIStatusMonitor:
    """
    Owned, cancellable polling job for ``GET /api/ai/status``.

    The first check runs immediately on ``start()``; later checks run every
    ``interval`` seconds until ``stop()``. Use as an async context manager to
    tie the job to the lifetime of its owner.
    """

    def __init__(
        self,
        gateway,
        interval: float = 60.0,
        on_change: Optional[Callable[[AIStatus], None]] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.gateway = gateway
        self.interval = interval
        self.on_change = on_change
        self.status: Optional[AIStatus] = None
        self.last_checked: Optional[datetime] = None
        self.check_count = 0
        self._task: Optional[asyncio.Task] = None
        self._shutdown_event: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_available(self) -> bool:
        return self.status is not None and self.status.available

    async def check_now(self) -> AIStatus:
        """Poll once; ``on_change`` fires only when the status differs."""
        status = await self.gateway.ai_status()
        previous = self.status
        self.status = status
        self.last_checked = utcnow()
        self.check_count += 1
        if status != previous:
            logger.info(f"AI status changed: available={status.available} backend={status.backend}")
            if self.on_change:
                self.on_change(status)
        return status

    def start(self) -> None:
        if self.is_running:
            return
        self._shutdown_event = asyncio.Event()
        self._task = asyncio.create_task(self._monitoring_loop())
        logger.debug(f"AI status monitor started with {self.interval}s interval")

    async def stop(self) -> None:
        if self._task is None:
            return
        if self._shutdown_event is not None:
            self._shutdown_event.set()
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        logger.debug("AI status monitor stopped")

    async def _monitoring_loop(self) -> None:
        try:
            while not self._shutdown_event.is_set():
                try:
                    await self.check_now()
                except Exception as e:
                    logger.error(f"AI status check failed: {e}")

                try:
                    await asyncio.wait_for(self._shutdown_event.wait(), timeout=self.interval)
                    break  # Shutdown event was set
                except asyncio.TimeoutError:
                    continue
        except asyncio.CancelledError:
            logger.debug("AI status monitoring loop cancelled")

    async def __aenter__(self) -> "AIStatusMonitor":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
