from __future__ import annotations

"""Watch task command construction."""


from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence

TASK_SOURCE = "watch-attach"
RUDE_EDIT_ENV = "DOTNET_WATCH_RESTART_ON_RUDE_EDIT"


@dataclass(frozen=True)
class WatchLaunchRequest:
    """A request to run ``watch`` for one project of a workspace.

    ``project`` may be empty (discover), a folder, a bare project file name, or
    a full path, and may contain ``${...}`` placeholders.
    """

    name: str
    workspace_root: Path
    workspace_name: str = ""
    project: str = ""
    args: Sequence[str] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    launch_profile: Optional[str] = None

    @property
    def resolved_workspace_name(self) -> str:
        return self.workspace_name or self.workspace_root.name


@dataclass(frozen=True)
class TaskCommand:
    name: str
    source: str
    workspace_name: str
    workspace_root: Path
    project_path: Path
    program: str
    args: tuple[str, ...]
    cwd: Path
    env: Mapping[str, str]

    @property
    def task_id(self) -> str:
        """Registry key: source label + task name + workspace name."""
        return f"{self.source}{self.name}{self.workspace_name}"

    @property
    def project_name(self) -> str:
        return self.project_path.stem

    @property
    def project_folder_path(self) -> str:
        return str(self.project_path.parent)


def build_task_command(
    request: WatchLaunchRequest,
    project_path: Path,
    launch_profile: Optional[str],
    *,
    program: str = "dotnet",
    restart_on_rude_edit: bool = True,
) -> TaskCommand:
    args = ["watch", "--project", str(project_path), "run"]
    if launch_profile:
        args.extend(["--launch-profile", launch_profile])
    args.extend(request.args)

    env = dict(request.env)
    if restart_on_rude_edit:
        env[RUDE_EDIT_ENV] = "true"

    return TaskCommand(
        name=f"Watch {project_path.stem}",
        source=TASK_SOURCE,
        workspace_name=request.resolved_workspace_name,
        workspace_root=request.workspace_root,
        project_path=project_path,
        program=program,
        args=tuple(args),
        cwd=request.workspace_root,
        env=env,
    )
