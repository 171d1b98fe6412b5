from __future__ import annotations

"""Dependency factory for AttachScanner."""


from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable

if TYPE_CHECKING:
    from .background_worker import ScanLoopWorker
    from .lifecycle import ScanLifecycle


@dataclass
class AttachScannerDependencies:
    """Container for the scan loop pieces of AttachScanner."""

    worker: "ScanLoopWorker"
    lifecycle: "ScanLifecycle"


class AttachScannerDependenciesFactory:
    """Factory for creating AttachScanner dependencies."""

    @staticmethod
    def create(
        scan_interval_seconds: float,
        stop_timeout_seconds: float,
        perform_tick: Callable[[], Awaitable[None]],
    ) -> AttachScannerDependencies:
        from .background_worker import ScanLoopWorker
        from .lifecycle import ScanLifecycle

        worker = ScanLoopWorker(scan_interval_seconds, perform_tick)
        lifecycle = ScanLifecycle(worker, stop_timeout_seconds)
        return AttachScannerDependencies(worker=worker, lifecycle=lifecycle)
