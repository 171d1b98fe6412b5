"""Parent/child walks over a process snapshot."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .process_models import ProcessRecord


def children_of(records: Iterable[ProcessRecord], ppid: int) -> List[ProcessRecord]:
    """One-level parent filter, in snapshot order."""
    return [record for record in records if record.ppid == ppid]


def subtree(records: Sequence[ProcessRecord], root_pid: int) -> List[ProcessRecord]:
    """
    Return every transitive child of ``root_pid``, excluding the root itself.

    Direct children come first, followed by the descendants of each child in
    turn. Reused pids can make the parent graph cyclic, so each pid is visited once.
    """
    direct = children_of(records, root_pid)
    if not direct:
        return []

    result: List[ProcessRecord] = []
    visited = {root_pid}
    frontier = []
    for record in direct:
        if record.pid in visited:
            continue
        visited.add(record.pid)
        result.append(record)
        frontier.append(record.pid)

    while frontier:
        parent = frontier.pop(0)
        for record in children_of(records, parent):
            if record.pid in visited:
                continue
            visited.add(record.pid)
            result.append(record)
            frontier.append(record.pid)

    return result
