from __future__ import annotations

"""Events consumed by the engine's reconciliation queue."""


from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .attach_scanner_helpers.reattach import ReattachChoice
from .process_directory_helpers import ProcessRecord


@dataclass(frozen=True)
class SessionStarted:
    session_name: str
    handle: Any
    configuration: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionTerminated:
    session_name: str
    handle: Any = None


@dataclass(frozen=True)
class ProtocolMessage:
    """A debug adapter protocol message observed before it reaches the debuggee."""

    session_name: str
    message: Mapping[str, Any]


@dataclass(frozen=True)
class TaskProcessStarted:
    task_id: str
    process_id: int


@dataclass(frozen=True)
class TaskEnded:
    task_id: str


@dataclass(frozen=True)
class ReattachDecision:
    record: ProcessRecord
    choice: Optional[ReattachChoice]


@dataclass(frozen=True)
class ScanTick:
    pass


__all__ = [
    "ProtocolMessage",
    "ReattachDecision",
    "ScanTick",
    "SessionStarted",
    "SessionTerminated",
    "TaskEnded",
    "TaskProcessStarted",
]
