"""
Process directory: answers "which processes exist right now" for the reconciliation loop.

Every query returns fresh ProcessRecord values. Failures never propagate:
an unreadable process table is logged and reported as an empty list, so a
transient observation problem only costs one tick.
"""

import logging
from typing import List, Optional, Sequence

from .path_matching import contains_marker
from .process_directory_helpers import (
    ProcessRecord,
    ProcessTableScanner,
    SnapshotCoordinator,
    subtree,
)

logger = logging.getLogger(__name__)


class ProcessDirectory:
    """Stateless facade over the OS process table."""

    def __init__(
        self,
        query_timeout_seconds: float = 5.0,
        *,
        scanner: Optional[ProcessTableScanner] = None,
    ):
        self._scanner = scanner if scanner is not None else ProcessTableScanner()
        self._snapshots = SnapshotCoordinator(self._scanner, query_timeout_seconds)

    def list_processes(self, scope_pid: Optional[int] = None) -> List[ProcessRecord]:
        """
        List processes, optionally restricted to the transitive children of ``scope_pid``.

        Args:
            scope_pid: Root of the subtree to return; the root itself is excluded.

        Returns:
            ProcessRecord list; empty when nothing matches or the table cannot be read.
        """
        records = self._scanner.read_process_table()
        if scope_pid is None:
            return records
        return subtree(records, scope_pid)

    async def snapshot(self) -> List[ProcessRecord]:
        """Full process table read off the event loop, bounded by the query timeout."""
        return await self._snapshots.take_snapshot()

    @staticmethod
    def subtree(records: Sequence[ProcessRecord], scope_pid: int) -> List[ProcessRecord]:
        return subtree(records, scope_pid)

    @staticmethod
    def find_watch_processes(records: Sequence[ProcessRecord], marker: str) -> List[ProcessRecord]:
        """Processes whose command line carries the debug-build path discriminator."""
        return [record for record in records if contains_marker(record.command_line, marker)]


__all__ = ["ProcessDirectory", "ProcessRecord"]
