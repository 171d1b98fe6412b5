"""Narrowing a tick's process list down to attach candidates."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ..path_matching import contains_marker, extract_executable_path, is_under_any
from ..process_directory_helpers import ProcessRecord


def filter_candidates(
    records: Iterable[ProcessRecord],
    marker: str,
    workspace_roots: Sequence[str],
    *,
    casefold: Optional[bool] = None,
) -> List[ProcessRecord]:
    """
    Keep debug-build processes running from a workspace, one per parent.

    Records are taken in order; the first record seen for a pid or a parent pid wins.
    """
    candidates: List[ProcessRecord] = []
    seen_pids = set()
    seen_parents = set()
    for record in records:
        if record.pid in seen_pids or not contains_marker(record.command_line, marker):
            continue
        executable = extract_executable_path(record.command_line, marker)
        if not executable or not is_under_any(executable, workspace_roots, casefold=casefold):
            continue
        if record.ppid in seen_parents:
            continue
        seen_pids.add(record.pid)
        seen_parents.add(record.ppid)
        candidates.append(record)
    return candidates


__all__ = ["filter_candidates"]
