"""
Central in-memory store for the reconciliation engine.

Four stores live here: watch tasks by task id, debug sessions by pid, pids
whose debugger was disconnected on purpose, and the single adopted external
watch process. Operations are synchronous and individually atomic; callers own
the correctness of multi-step sequences such as reserve-then-populate.
"""

import logging
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .task_registry_helpers import (
    DebugSessionEntry,
    ExternalWatchProcess,
    ProjectIndex,
    WatchTask,
)

logger = logging.getLogger(__name__)


class TaskRegistry:
    """Registry of watch tasks, debug sessions, disconnects and the external process."""

    def __init__(self, *, casefold_paths: Optional[bool] = None):
        self._tasks: Dict[str, Optional[WatchTask]] = {}
        self._project_index = ProjectIndex(casefold=casefold_paths)
        self._sessions: Dict[int, DebugSessionEntry] = {}
        self._disconnected: Set[int] = set()
        self._external: Optional[ExternalWatchProcess] = None

    # Watch tasks

    def reserve(self, task_id: str) -> bool:
        """Claim a slot for ``task_id``; False when a slot already exists."""
        if task_id in self._tasks:
            return False
        self._tasks[task_id] = None
        return True

    def is_reserved(self, task_id: str) -> bool:
        return task_id in self._tasks and self._tasks[task_id] is None

    def contains(self, task_id: str) -> bool:
        return task_id in self._tasks

    def set(self, task_id: str, task: Optional[WatchTask]) -> None:
        self._project_index.discard(task_id)
        self._tasks[task_id] = task
        if task is not None:
            self._project_index.add(task.project_folder_path, task_id)

    def get(self, task_id: str) -> Optional[WatchTask]:
        return self._tasks.get(task_id)

    def remove(self, task_id: str) -> Optional[WatchTask]:
        self._project_index.discard(task_id)
        return self._tasks.pop(task_id, None)

    def values(self) -> List[WatchTask]:
        """Populated tasks only; reserved slots are skipped."""
        return [task for task in self._tasks.values() if task is not None]

    def find_by_project_path(self, executable_path: str) -> Optional[WatchTask]:
        task_id = self._project_index.lookup(executable_path)
        if task_id is None:
            return None
        return self._tasks.get(task_id)

    def find_by_session_name(self, session_name: str) -> Optional[WatchTask]:
        """Task whose project name prefixes ``session_name`` (case-insensitive, longest wins)."""
        lowered = session_name.lower()
        best: Optional[WatchTask] = None
        for task in self.values():
            name = task.project_name.lower()
            if name and lowered.startswith(name):
                if best is None or len(name) > len(best.project_name):
                    best = task
        return best

    def find_by_process_id(self, pid: int) -> Optional[WatchTask]:
        for task in self.values():
            if task.watch_process_id == pid:
                return task
        return None

    # Debug sessions

    def has_session(self, pid: int) -> bool:
        return pid in self._sessions

    def get_session(self, pid: int) -> Optional[DebugSessionEntry]:
        return self._sessions.get(pid)

    def add_session(self, pid: int, entry: DebugSessionEntry) -> bool:
        """Register ``entry``; refused when the pid already has a session or is disconnected."""
        if pid in self._sessions or pid in self._disconnected:
            return False
        self._sessions[pid] = entry
        return True

    def remove_session(self, pid: int) -> Optional[DebugSessionEntry]:
        return self._sessions.pop(pid, None)

    def sessions(self) -> List[Tuple[int, DebugSessionEntry]]:
        return list(self._sessions.items())

    def session_count(self) -> int:
        return len(self._sessions)

    def find_session(
        self, *, correlation_token: Optional[str] = None, session_name: Optional[str] = None
    ) -> Optional[DebugSessionEntry]:
        """Find a session by correlation token, falling back to the session name."""
        if correlation_token:
            for entry in self._sessions.values():
                if entry.correlation_token == correlation_token:
                    return entry
        if session_name is not None:
            for entry in self._sessions.values():
                if entry.session_name == session_name:
                    return entry
        return None

    # Disconnects

    def mark_disconnected(self, pid: int) -> None:
        """Record a deliberate disconnect; any session entry for the pid is dropped."""
        self._sessions.pop(pid, None)
        self._disconnected.add(pid)

    def is_disconnected(self, pid: int) -> bool:
        return pid in self._disconnected

    def clear_disconnected(self, pid: int) -> None:
        self._disconnected.discard(pid)

    def disconnected(self) -> Set[int]:
        return set(self._disconnected)

    # External watch process

    def set_external(self, process: ExternalWatchProcess) -> None:
        if self._external is not None and self._external != process:
            logger.info(
                "Replacing external watch process %s with %s",
                self._external.pid,
                process.pid,
            )
        self._external = process

    def get_external(self) -> Optional[ExternalWatchProcess]:
        return self._external

    def clear_external(self) -> None:
        self._external = None

    def __iter__(self) -> Iterator[WatchTask]:
        return iter(self.values())

    def dispose(self) -> None:
        """Terminate every live task and clear all stores."""
        for task in self.values():
            try:
                task.terminate()
            except (OSError, RuntimeError):  # policy_guard: allow-silent-handler
                logger.exception("Failed to terminate watch task %s during dispose", task.id)
        self._tasks.clear()
        self._project_index.clear()
        self._sessions.clear()
        self._disconnected.clear()
        self._external = None


__all__ = [
    "DebugSessionEntry",
    "ExternalWatchProcess",
    "TaskRegistry",
    "WatchTask",
]
