from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessRecord:
    """Point-in-time view of one OS process."""

    pid: int
    ppid: int
    command_line: str
