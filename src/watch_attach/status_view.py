"""Read-only process table for a status display, plus its four actions."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

from .path_matching import extract_executable_path
from .process_directory import ProcessDirectory, ProcessRecord
from .task_registry import ExternalWatchProcess

if TYPE_CHECKING:
    from .engine import EngineContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusRow:
    pid: int
    command_line: str
    project_name: Optional[str]
    has_session: bool
    is_external: bool
    is_disconnected: bool
    description: str = ""


def describe_process(record: ProcessRecord) -> Tuple[str, str]:
    """Picker description and detail: the project after ``watch`` and the full command line."""
    _, _, after_watch = record.command_line.partition("watch")
    project = after_watch.strip().strip("\"'").replace("\\", "/")
    return posixpath.basename(project), record.command_line


class StatusView:
    def __init__(self, engine: "EngineContext"):
        self._engine = engine

    async def rows(self) -> List[StatusRow]:
        registry = self._engine.registry
        marker = self._engine.settings.debug_path_marker
        external = registry.get_external()
        records = ProcessDirectory.find_watch_processes(await self._engine.directory.snapshot(), marker)

        rows = []
        for record in records:
            task = registry.find_by_process_id(record.pid)
            if task is None:
                executable = extract_executable_path(record.command_line, marker)
                task = registry.find_by_project_path(executable) if executable else None
            description, _ = describe_process(record)
            rows.append(
                StatusRow(
                    pid=record.pid,
                    command_line=record.command_line,
                    project_name=task.project_name if task is not None else None,
                    has_session=registry.has_session(record.pid),
                    is_external=external is not None and external.pid == record.pid,
                    is_disconnected=registry.is_disconnected(record.pid),
                    description=description,
                )
            )
        return rows

    def start_scan(self) -> None:
        self._engine.scanner.start()

    def stop_scan(self) -> None:
        self._engine.scanner.stop()

    async def attach(self, pid: int) -> bool:
        """Adopt ``pid`` as the external watch process and attach to it."""
        marker = self._engine.settings.debug_path_marker
        record = next((r for r in await self._engine.directory.snapshot() if r.pid == pid), None)
        if record is None:
            logger.info("Process %s is gone; nothing to attach", pid)
            return False
        self._engine.registry.set_external(ExternalWatchProcess(pid=record.pid, command_line=record.command_line))
        executable = extract_executable_path(record.command_line, marker)
        return await self._engine.coordinator.attach(pid, self._engine.scanner.base_configuration, executable)

    async def terminate(self, pid: int) -> bool:
        record = next((r for r in await self._engine.directory.snapshot() if r.pid == pid), None)
        command_line = record.command_line if record is not None else None
        return await self._engine.coordinator.terminate(pid, command_line)


__all__ = ["StatusRow", "StatusView", "describe_process"]
