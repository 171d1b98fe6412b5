from pathlib import Path

from watch_attach.task_registry import DebugSessionEntry, ExternalWatchProcess, TaskRegistry, WatchTask
from tests.helpers.engine_fakes import FakeExecution


def _task(name="App", task_id=None, pid=None):
    task_id = task_id or f"watch-attachWatch {name}work"
    return WatchTask(
        id=task_id,
        workspace_root=Path("/work"),
        project_path=f"/work/{name}/{name}.csproj",
        project_folder_path=f"/work/{name}",
        project_name=name,
        execution=FakeExecution(task_id),
        watch_process_id=pid,
    )


def test_reserve_rejects_existing_slot(registry):
    assert registry.reserve("id")
    assert registry.is_reserved("id")
    assert not registry.reserve("id")
    assert registry.values() == []

    task = _task(task_id="id")
    registry.set("id", task)
    assert not registry.is_reserved("id")
    assert registry.contains("id")
    assert not registry.reserve("id")
    assert list(registry) == [task]


def test_find_by_project_path_uses_project_folder(registry):
    app = _task("App")
    registry.set(app.id, app)

    assert registry.find_by_project_path("/work/App/bin/Debug/net8.0/App") is app
    assert registry.find_by_project_path("/work/AppTests/bin/Debug/AppTests") is None

    registry.remove(app.id)
    assert registry.find_by_project_path("/work/App/bin/Debug/net8.0/App") is None


def test_find_by_session_name_is_case_insensitive_and_longest_wins(registry):
    app = _task("App")
    tests = _task("AppTests")
    registry.set(app.id, app)
    registry.set(tests.id, tests)

    assert registry.find_by_session_name("apptests - .NET Core Attach - AUTO") is tests
    assert registry.find_by_session_name("APP - .NET Core Attach - AUTO") is app
    assert registry.find_by_session_name("Other - x") is None


def test_find_by_process_id(registry):
    app = _task("App", pid=100)
    registry.set(app.id, app)

    assert registry.find_by_process_id(100) is app
    assert registry.find_by_process_id(101) is None


def test_session_and_disconnect_are_exclusive(registry):
    assert registry.add_session(101, DebugSessionEntry(101, "App - x", handle="h"))
    assert not registry.add_session(101, DebugSessionEntry(101, "App - y"))

    registry.mark_disconnected(101)
    assert not registry.has_session(101)
    assert registry.is_disconnected(101)
    assert not registry.add_session(101, DebugSessionEntry(101, "App - x"))

    registry.clear_disconnected(101)
    assert registry.disconnected() == set()
    assert registry.add_session(101, DebugSessionEntry(101, "App - x"))
    assert registry.session_count() == 1


def test_find_session_prefers_correlation_token(registry):
    first = DebugSessionEntry(101, "App - x", correlation_token="t1")
    second = DebugSessionEntry(102, "App - x", correlation_token="t2")
    registry.add_session(101, first)
    registry.add_session(102, second)

    assert registry.find_session(correlation_token="t2", session_name="App - x") is second
    assert registry.find_session(correlation_token="missing", session_name="App - x") is first
    assert registry.find_session(session_name="nope") is None
    assert first.is_placeholder


def test_external_slot_holds_one_entry(registry):
    registry.set_external(ExternalWatchProcess(10, "dotnet watch run"))
    registry.set_external(ExternalWatchProcess(11, "dotnet watch run"))

    assert registry.get_external() == ExternalWatchProcess(11, "dotnet watch run")
    registry.clear_external()
    assert registry.get_external() is None


def test_dispose_terminates_tasks_and_clears_everything(registry):
    app = _task("App")

    class BrokenExecution:
        def terminate(self):
            raise OSError("gone")

    broken = _task("Broken")
    broken.execution = BrokenExecution()
    registry.set(app.id, app)
    registry.set(broken.id, broken)
    registry.reserve("pending")
    registry.add_session(101, DebugSessionEntry(101, "App - x"))
    registry.mark_disconnected(102)
    registry.set_external(ExternalWatchProcess(10, "dotnet watch run"))

    registry.dispose()

    assert app.execution.terminated == 1
    assert not registry.contains("pending")
    assert registry.values() == []
    assert registry.sessions() == []
    assert registry.disconnected() == set()
    assert registry.get_external() is None
    assert TaskRegistry().find_by_project_path("/work/App/bin") is None
