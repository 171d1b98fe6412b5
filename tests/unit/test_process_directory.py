from types import SimpleNamespace

import pytest

from watch_attach.process_directory import ProcessDirectory, ProcessRecord

_RECORDS = [
    ProcessRecord(100, 1, "dotnet watch --project /work/App/App.csproj run"),
    ProcessRecord(101, 100, "/work/App/bin/Debug/net8.0/App"),
    ProcessRecord(300, 1, "/work/Other/bin/Release/Other"),
]


def _directory():
    return ProcessDirectory(scanner=SimpleNamespace(read_process_table=lambda: list(_RECORDS)))


def test_list_processes_unscoped_returns_everything():
    assert _directory().list_processes() == _RECORDS


def test_list_processes_scoped_to_subtree():
    assert _directory().list_processes(scope_pid=100) == [_RECORDS[1]]
    assert _directory().list_processes(scope_pid=999) == []


def test_find_watch_processes_filters_on_marker():
    assert ProcessDirectory.find_watch_processes(_RECORDS, "/bin/Debug") == [_RECORDS[1]]


@pytest.mark.asyncio
async def test_snapshot_reads_full_table():
    assert await _directory().snapshot() == _RECORDS
