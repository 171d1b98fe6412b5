"""Interfaces of the host components the engine drives but does not implement."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from .watch_task_launcher_helpers.task_command import TaskCommand


class ExecutionHandle(Protocol):
    """Opaque handle for a running build task."""

    task_id: str

    def terminate(self) -> None: ...


class BuildTaskRunner(Protocol):
    """Spawns watch subprocesses.

    Process-start and task-end notifications are delivered to the engine as
    TaskProcessStarted / TaskEnded events.
    """

    async def execute(self, command: "TaskCommand") -> ExecutionHandle: ...


class DebuggerFrontEnd(Protocol):
    """Host debugger.

    Session start/termination and protocol messages are delivered to the engine
    as SessionStarted / SessionTerminated / ProtocolMessage events.
    """

    async def start_debugging(self, configuration: Dict[str, Any]) -> bool: ...

    async def send_request(
        self, handle: Any, command: str, arguments: Optional[Mapping[str, Any]] = None
    ) -> None: ...


class ProjectDiscovery(Protocol):
    def find_files(self, root: Path, pattern: str) -> List[Path]: ...


class Prompts(Protocol):
    """Interactive prompts; every call eventually yields zero or one answer."""

    async def pick(self, placeholder: str, items: Sequence[str]) -> Optional[str]: ...

    async def pick_many(self, placeholder: str, items: Sequence[str]) -> List[str]: ...

    async def show_information(self, message: str) -> None: ...

    async def show_error(self, message: str, *actions: str) -> Optional[str]: ...

    async def open_launch_configuration(self, workspace_root: Path) -> None: ...


__all__ = [
    "BuildTaskRunner",
    "DebuggerFrontEnd",
    "ExecutionHandle",
    "ProjectDiscovery",
    "Prompts",
]
