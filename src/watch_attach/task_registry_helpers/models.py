from __future__ import annotations

"""Registry record types."""


from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass
class WatchTask:
    """One outstanding watch-build invocation."""

    id: str
    workspace_root: Path
    project_path: str
    project_folder_path: str
    project_name: str
    execution: Any
    watch_process_id: Optional[int] = None

    def terminate(self) -> None:
        """Ask the build task runner to stop the underlying execution."""
        self.execution.terminate()


@dataclass
class DebugSessionEntry:
    """Debug session keyed by the pid it was attached to.

    ``handle`` stays ``None`` until the host reports the session start.
    """

    pid: int
    session_name: str
    correlation_token: Optional[str] = None
    handle: Any = None

    @property
    def is_placeholder(self) -> bool:
        return self.handle is None


@dataclass(frozen=True)
class ExternalWatchProcess:
    """Watch-style process started outside this engine and adopted with user consent."""

    pid: int
    command_line: str
