"""Periodic scan loop."""

import asyncio
import logging
from typing import Awaitable, Callable

import psutil

logger = logging.getLogger(__name__)


class ScanLoopWorker:
    """Runs one tick, then waits for the interval or a stop signal."""

    def __init__(self, scan_interval_seconds: float, perform_tick: Callable[[], Awaitable[None]]):
        self.scan_interval_seconds = scan_interval_seconds
        self.perform_tick = perform_tick

    async def run_scan_loop(self, stop_event: asyncio.Event) -> None:
        logger.debug("Attach scan loop started")

        while not stop_event.is_set():
            try:
                await self.perform_tick()
            except (  # policy_guard: allow-silent-handler
                psutil.Error,
                OSError,
                RuntimeError,
            ):
                logger.exception("Error in attach scan loop")

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.scan_interval_seconds)
                break
            except asyncio.TimeoutError:  # policy_guard: allow-silent-handler
                continue

        logger.debug("Attach scan loop stopped")


__all__ = ["ScanLoopWorker"]
