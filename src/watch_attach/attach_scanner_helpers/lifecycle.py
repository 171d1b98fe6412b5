"""Start/stop management of the scan loop task."""

import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class ScanLifecycle:
    """Owns the scan loop task.

    Each start gets its own stop event, so a loop that was asked to stop keeps
    stopping even when a new one is started before it observed the signal.
    """

    def __init__(self, worker, stop_timeout_seconds: float = 2.0):
        self.worker = worker
        self.stop_timeout_seconds = stop_timeout_seconds
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    def start(self) -> None:
        if self.is_running():
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.worker.run_scan_loop(self._stop_event))
        logger.info("Started attach scanning (interval: %ss)", self.worker.scan_interval_seconds)

    def request_stop(self) -> None:
        """Signal the loop to finish after the current tick; never interrupts a tick."""
        if self._stop_event is not None and not self._stop_event.is_set():
            self._stop_event.set()
            logger.info("Stopping attach scanning")

    async def stop(self) -> None:
        """Signal the loop and wait for it, cancelling after the stop timeout."""
        self.request_stop()
        task, self._task = self._task, None
        if task is None or task.done():
            return
        try:
            await asyncio.wait_for(task, timeout=self.stop_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("Attach scan loop did not stop within %ss; cancelled", self.stop_timeout_seconds)
        logger.info("Attach scanning stopped")

    def is_running(self) -> bool:
        return (
            self._task is not None
            and not self._task.done()
            and self._stop_event is not None
            and not self._stop_event.is_set()
        )


__all__ = ["ScanLifecycle"]
