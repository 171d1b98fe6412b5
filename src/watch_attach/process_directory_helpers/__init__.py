"""Helper modules for ProcessDirectory."""

from .process_models import ProcessRecord
from .scanner import ProcessTableScanner
from .snapshot_coordinator import SnapshotCoordinator
from .tree import children_of, subtree

__all__ = [
    "ProcessRecord",
    "ProcessTableScanner",
    "SnapshotCoordinator",
    "children_of",
    "subtree",
]
