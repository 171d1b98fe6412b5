"""Helper modules for the attach scanner."""

from .background_worker import ScanLoopWorker
from .candidate_filter import filter_candidates
from .dependencies_factory import AttachScannerDependencies, AttachScannerDependenciesFactory
from .lifecycle import ScanLifecycle
from .reattach import ReattachChoice, reattach_prompt

__all__ = [
    "AttachScannerDependencies",
    "AttachScannerDependenciesFactory",
    "ReattachChoice",
    "ScanLifecycle",
    "ScanLoopWorker",
    "filter_candidates",
    "reattach_prompt",
]
