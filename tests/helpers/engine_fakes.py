from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

from watch_attach.process_directory_helpers import ProcessRecord


class FakeExecution:
    def __init__(self, task_id: str):
        self.task_id = task_id
        self.terminated = 0

    def terminate(self) -> None:
        self.terminated += 1


class FakeRunner:
    """Build task runner that yields once before handing back an execution."""

    def __init__(self, *, fail: Optional[BaseException] = None):
        self.fail = fail
        self.commands: List[Any] = []
        self.executions: List[FakeExecution] = []
        self.before_return: Optional[Callable[[Any], None]] = None

    async def execute(self, command):
        self.commands.append(command)
        await asyncio.sleep(0)
        if self.fail is not None:
            raise self.fail
        execution = FakeExecution(command.task_id)
        self.executions.append(execution)
        if self.before_return is not None:
            self.before_return(command)
        return execution


class FakeFrontend:
    def __init__(self, result: bool = True):
        self.result = result
        self.error: Optional[BaseException] = None
        self.started: List[dict] = []
        self.requests: List[tuple] = []

    async def start_debugging(self, configuration) -> bool:
        self.started.append(dict(configuration))
        if self.error is not None:
            raise self.error
        return self.result

    async def send_request(self, handle, command, arguments=None) -> None:
        self.requests.append((handle, command, dict(arguments or {})))


class FakePrompts:
    def __init__(self, picks: Sequence[Optional[str]] = (), *, pick_many_result=(), error_action=None):
        self.picks = list(picks)
        self.pick_many_result = list(pick_many_result)
        self.error_action = error_action
        self.pick_gate: Optional[asyncio.Event] = None
        self.pick_calls: List[tuple] = []
        self.pick_many_calls: List[tuple] = []
        self.infos: List[str] = []
        self.errors: List[tuple] = []
        self.opened: List[Path] = []

    async def pick(self, placeholder, items):
        self.pick_calls.append((placeholder, list(items)))
        if self.pick_gate is not None:
            await self.pick_gate.wait()
        return self.picks.pop(0) if self.picks else None

    async def pick_many(self, placeholder, items):
        self.pick_many_calls.append((placeholder, list(items)))
        return list(self.pick_many_result)

    async def show_information(self, message) -> None:
        self.infos.append(message)

    async def show_error(self, message, *actions):
        self.errors.append((message, actions))
        return self.error_action

    async def open_launch_configuration(self, workspace_root) -> None:
        self.opened.append(workspace_root)


class FakeDirectory:
    """Process directory stand-in whose snapshot is whatever ``records`` holds."""

    def __init__(self, records: Sequence[ProcessRecord] = ()):
        self.records = list(records)
        self.snapshots = 0

    async def snapshot(self) -> List[ProcessRecord]:
        self.snapshots += 1
        return list(self.records)


def app_command_line(project: str = "App", root: str = "/work") -> str:
    return f"{root}/{project}/bin/Debug/net8.0/{project}"


def watch_command_line(project: str = "App", root: str = "/work") -> str:
    return f"dotnet watch --project {root}/{project}/{project}.csproj run {root}/{project}/bin/Debug"
