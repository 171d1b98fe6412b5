from pathlib import Path
from types import SimpleNamespace

import pytest

from watch_attach.debug_configuration import default_attach_configuration
from watch_attach.debug_session_coordinator import DebugSessionCoordinator
from watch_attach.debug_session_coordinator_helpers import CORRELATION_KEY, SOFT_DISCONNECT_KEY
from watch_attach.task_registry import DebugSessionEntry, ExternalWatchProcess, WatchTask
from tests.helpers.engine_fakes import FakeExecution, app_command_line

SESSION = "App - .NET Core Attach - AUTO"
EXECUTABLE = app_command_line()


class _ScannerStub:
    def __init__(self):
        self.starts = 0
        self.stops = 0

    def start(self):
        self.starts += 1

    def stop(self):
        self.stops += 1


def _add_task(registry, name="App", watch_pid=100):
    task = WatchTask(
        id=f"watch-attachWatch {name}work",
        workspace_root=Path("/work"),
        project_path=f"/work/{name}/{name}.csproj",
        project_folder_path=f"/work/{name}",
        project_name=name,
        execution=FakeExecution(name),
        watch_process_id=watch_pid,
    )
    registry.set(task.id, task)
    return task


def _coordinator(registry, frontend):
    coordinator = DebugSessionCoordinator(registry, frontend)
    coordinator.scanner = _ScannerStub()
    return coordinator


def _disconnect(**arguments):
    return {"type": "request", "command": "disconnect", "arguments": arguments}


@pytest.mark.asyncio
async def test_attach_registers_placeholder_and_starts_debugging(registry, frontend):
    _add_task(registry)
    coordinator = _coordinator(registry, frontend)

    assert await coordinator.attach(101, default_attach_configuration(), EXECUTABLE)
    entry = registry.get_session(101)
    assert entry.is_placeholder
    assert entry.session_name == SESSION

    await coordinator.wait_pending()
    assert frontend.started[0][CORRELATION_KEY] == entry.correlation_token
    assert registry.has_session(101)
    assert coordinator.scanner.starts == 1


@pytest.mark.asyncio
async def test_attach_without_owner_is_refused(registry, frontend):
    coordinator = _coordinator(registry, frontend)

    assert not await coordinator.attach(101, default_attach_configuration(), EXECUTABLE)
    assert registry.session_count() == 0
    assert coordinator.scanner.starts == 0


@pytest.mark.asyncio
async def test_attach_is_refused_for_pid_with_session(registry, frontend):
    _add_task(registry)
    registry.add_session(101, DebugSessionEntry(101, SESSION, handle="h"))
    coordinator = _coordinator(registry, frontend)

    assert not await coordinator.attach(101, default_attach_configuration(), EXECUTABLE)
    await coordinator.wait_pending()
    assert frontend.started == []


@pytest.mark.asyncio
async def test_attach_to_disconnected_tracked_pid_tears_task_down(registry, frontend):
    task = _add_task(registry)
    registry.mark_disconnected(101)
    coordinator = _coordinator(registry, frontend)

    assert not await coordinator.attach(101, default_attach_configuration(), EXECUTABLE)

    assert task.execution.terminated == 1
    assert registry.get(task.id) is None
    assert not registry.is_disconnected(101)
    assert frontend.started == []


@pytest.mark.asyncio
async def test_attach_to_disconnected_external_pid_is_refused(registry, frontend):
    registry.set_external(ExternalWatchProcess(60, app_command_line("Ext")))
    registry.mark_disconnected(60)
    coordinator = _coordinator(registry, frontend)

    assert not await coordinator.attach(60, default_attach_configuration(), app_command_line("Ext"))
    assert registry.is_disconnected(60)


@pytest.mark.asyncio
async def test_rejected_start_releases_placeholder(registry, frontend):
    _add_task(registry)
    frontend.result = False
    coordinator = _coordinator(registry, frontend)

    assert await coordinator.attach(101, default_attach_configuration(), EXECUTABLE)
    await coordinator.wait_pending()

    assert not registry.has_session(101)


@pytest.mark.asyncio
async def test_failed_start_releases_placeholder(registry, frontend, caplog):
    _add_task(registry)
    frontend.error = RuntimeError("adapter crashed")
    coordinator = _coordinator(registry, frontend)

    await coordinator.attach(101, default_attach_configuration(), EXECUTABLE)
    await coordinator.wait_pending()

    assert not registry.has_session(101)
    assert "Starting the debugger for pid 101 failed" in caplog.text


@pytest.mark.asyncio
async def test_session_started_fills_handle_by_token(registry, frontend):
    _add_task(registry)
    coordinator = _coordinator(registry, frontend)
    await coordinator.attach(101, default_attach_configuration(), EXECUTABLE)
    await coordinator.wait_pending()

    coordinator.on_session_started("renamed by host", "handle-1", frontend.started[0])

    assert registry.get_session(101).handle == "handle-1"


def test_session_started_falls_back_to_session_name(registry, frontend):
    registry.add_session(101, DebugSessionEntry(101, SESSION, correlation_token="t"))
    coordinator = _coordinator(registry, frontend)

    coordinator.on_session_started(SESSION, "handle-1", {})
    coordinator.on_session_started("someone else's session", "handle-2", None)

    assert registry.get_session(101).handle == "handle-1"


def test_genuine_disconnect_removes_task(registry, frontend):
    task = _add_task(registry)
    registry.add_session(101, DebugSessionEntry(101, SESSION, handle="h"))
    coordinator = _coordinator(registry, frontend)

    coordinator.on_protocol_message(SESSION, _disconnect(terminateDebuggee=True))

    assert not registry.has_session(101)
    assert registry.is_disconnected(101)
    assert registry.get(task.id) is None
    assert task.execution.terminated == 1
    assert coordinator.scanner.stops == 1


def test_restart_flagged_disconnect_leaves_registry_unchanged(registry, frontend):
    task = _add_task(registry)
    entry = DebugSessionEntry(101, SESSION, handle="h")
    registry.add_session(101, entry)
    coordinator = _coordinator(registry, frontend)

    coordinator.on_protocol_message(SESSION, _disconnect(restart=True))

    assert registry.get_session(101) is entry
    assert registry.disconnected() == set()
    assert registry.get(task.id) is task
    assert task.execution.terminated == 0

    coordinator.on_session_terminated(SESSION, "h")

    assert not registry.has_session(101)
    assert registry.disconnected() == set()
    assert registry.get(task.id) is task
    assert coordinator.scanner.stops == 0


def test_soft_disconnect_then_termination_is_ignored(registry, frontend):
    task = _add_task(registry)
    coordinator = _coordinator(registry, frontend)

    coordinator.on_protocol_message(SESSION, _disconnect(**{SOFT_DISCONNECT_KEY: True}))
    coordinator.on_session_terminated(SESSION)

    assert registry.get(task.id) is task
    assert registry.disconnected() == set()


@pytest.mark.asyncio
async def test_old_session_ending_after_respawn_keeps_new_placeholder(registry, frontend):
    task = _add_task(registry)
    registry.add_session(101, DebugSessionEntry(101, SESSION, handle="old"))
    coordinator = _coordinator(registry, frontend)

    await coordinator.disconnect_stale_sessions([102])
    assert await coordinator.attach(102, default_attach_configuration(), EXECUTABLE)
    coordinator.on_protocol_message(SESSION, _disconnect(**{SOFT_DISCONNECT_KEY: True}))
    coordinator.on_session_terminated(SESSION, "old")

    assert registry.has_session(102)
    assert not registry.is_disconnected(102)
    assert registry.get(task.id) is task
    assert task.execution.terminated == 0
    await coordinator.wait_pending()


def test_unknown_handle_does_not_fall_back_to_session_name(registry, frontend):
    task = _add_task(registry)
    registry.add_session(102, DebugSessionEntry(102, SESSION, correlation_token="new"))
    coordinator = _coordinator(registry, frontend)

    coordinator.on_session_terminated(SESSION, "someone else")

    assert registry.has_session(102)
    assert registry.get(task.id) is task


@pytest.mark.asyncio
async def test_session_started_for_swept_placeholder_is_soft_disconnected(registry, frontend):
    _add_task(registry)
    coordinator = _coordinator(registry, frontend)
    await coordinator.attach(101, default_attach_configuration(), EXECUTABLE)
    await coordinator.wait_pending()
    configuration = frontend.started[0]

    await coordinator.disconnect_stale_sessions([])
    coordinator.on_session_started(SESSION, "late", configuration)
    await coordinator.wait_pending()
    coordinator.on_session_terminated(SESSION, "late")

    assert frontend.requests == [("late", "disconnect", {SOFT_DISCONNECT_KEY: True})]
    assert not registry.has_session(101)
    assert not registry.is_disconnected(101)


def test_other_messages_are_ignored(registry, frontend):
    task = _add_task(registry)
    registry.add_session(101, DebugSessionEntry(101, SESSION, handle="h"))
    coordinator = _coordinator(registry, frontend)

    coordinator.on_protocol_message(SESSION, {"type": "request", "command": "continue"})
    coordinator.on_protocol_message(SESSION, {"type": "event", "event": "terminated"})

    assert registry.has_session(101)
    assert registry.get(task.id) is task


def test_unexpected_session_termination_is_genuine(registry, frontend):
    task = _add_task(registry)
    registry.add_session(101, DebugSessionEntry(101, SESSION, handle="h"))
    registry.add_session(201, DebugSessionEntry(201, "Lib - .NET Core Attach - AUTO", handle="h2"))
    coordinator = _coordinator(registry, frontend)

    coordinator.on_session_terminated(SESSION, "h")

    assert registry.is_disconnected(101)
    assert registry.get(task.id) is None
    assert coordinator.scanner.stops == 0


def test_restart_termination_keeps_new_placeholder(registry, frontend):
    _add_task(registry)
    registry.add_session(101, DebugSessionEntry(101, SESSION, handle="old"))
    registry.add_session(105, DebugSessionEntry(105, SESSION, correlation_token="new"))
    coordinator = _coordinator(registry, frontend)

    coordinator.on_protocol_message(SESSION, _disconnect(restart=True))
    coordinator.on_session_terminated(SESSION, "old")

    assert not registry.has_session(101)
    assert registry.has_session(105)


@pytest.mark.asyncio
async def test_disconnect_stale_sessions(registry, frontend):
    registry.add_session(90, DebugSessionEntry(90, "App - old", handle="h90"))
    registry.add_session(91, DebugSessionEntry(91, "App - pending"))
    registry.add_session(101, DebugSessionEntry(101, SESSION, handle="h101"))
    coordinator = _coordinator(registry, frontend)

    await coordinator.disconnect_stale_sessions([101])

    assert [pid for pid, _ in registry.sessions()] == [101]
    assert frontend.requests == [("h90", "disconnect", {SOFT_DISCONNECT_KEY: True})]


@pytest.mark.asyncio
async def test_terminate_sends_genuine_disconnect_and_removes_task(registry, frontend):
    task = _add_task(registry)
    registry.add_session(101, DebugSessionEntry(101, SESSION, handle="h"))
    coordinator = _coordinator(registry, frontend)

    assert await coordinator.terminate(101)

    assert frontend.requests == [("h", "disconnect", {})]
    assert registry.is_disconnected(101)
    assert registry.get(task.id) is None
    assert task.execution.terminated == 1
    assert coordinator.scanner.stops == 1


@pytest.mark.asyncio
async def test_terminate_finds_task_by_watch_pid_or_command_line(registry, frontend):
    app = _add_task(registry, "App", 100)
    lib = _add_task(registry, "Lib", 200)
    coordinator = _coordinator(registry, frontend)

    assert await coordinator.terminate(100)
    assert await coordinator.terminate(201, app_command_line("Lib"))
    assert not await coordinator.terminate(999)

    assert app.execution.terminated == 1
    assert lib.execution.terminated == 1
    assert registry.values() == []


@pytest.mark.asyncio
async def test_send_failure_is_logged(registry, caplog):
    async def broken_send(handle, command, arguments=None):
        raise OSError("pipe closed")

    frontend = SimpleNamespace(send_request=broken_send)
    registry.add_session(90, DebugSessionEntry(90, "App - old", handle="h90"))

    await _coordinator(registry, frontend).disconnect_stale_sessions([])

    assert not registry.has_session(90)
    assert "Failed to disconnect session" in caplog.text
