"""Time-bounded process snapshots for the event loop."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List

from .process_models import ProcessRecord
from .scanner import ProcessTableScanner

logger = logging.getLogger(__name__)

_PROCESS_SNAPSHOT_EXECUTOR = ThreadPoolExecutor(max_workers=1, thread_name_prefix="process-snapshot")


class SnapshotCoordinator:
    """Runs the blocking process table read off the event loop, under a timeout budget."""

    def __init__(self, scanner: ProcessTableScanner, timeout_seconds: float):
        self.scanner = scanner
        self.timeout_seconds = timeout_seconds

    async def take_snapshot(self) -> List[ProcessRecord]:
        """Return a fresh snapshot, or an empty list when the read times out."""
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(_PROCESS_SNAPSHOT_EXECUTOR, self.scanner.read_process_table)
        try:
            return await asyncio.wait_for(future, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:  # policy_guard: allow-silent-handler
            logger.warning("Process snapshot timed out after %.1fs", self.timeout_seconds)
            return []
