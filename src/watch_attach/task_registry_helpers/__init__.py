"""Helper modules for TaskRegistry."""

from .models import DebugSessionEntry, ExternalWatchProcess, WatchTask
from .project_index import ProjectIndex

__all__ = [
    "DebugSessionEntry",
    "ExternalWatchProcess",
    "ProjectIndex",
    "WatchTask",
]
