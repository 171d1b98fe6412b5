"""
Debug configurations for the attach and watch debugger types.

Attach configurations are templates the scanner copies for every attach.
Watch configurations are user-facing launch entries that resolve into
WatchLaunchRequest values for the launcher.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .config.settings import WatchAttachSettings
from .path_matching import is_path_under
from .watch_task_launcher_helpers import PROJECT_SUFFIX, WatchLaunchRequest, project_labels
from .watch_task_launcher_helpers.task_command import RUDE_EDIT_ENV

logger = logging.getLogger(__name__)

WATCH_CONFIGURATION_TYPE = "DotNetWatch"
WATCH_CONFIGURATION_NAME = ".NET Core Watch"
_PROJECTS_PICK_PLACEHOLDER = "Select the projects to create watch configurations for."


def default_attach_configuration(settings: Optional[WatchAttachSettings] = None) -> Dict[str, Any]:
    settings = settings or WatchAttachSettings()
    return {"type": settings.debugger_type, "request": "attach", "name": settings.attach_name}


def default_watch_configuration(project: Optional[str] = None) -> Dict[str, Any]:
    configuration: Dict[str, Any] = {
        "type": WATCH_CONFIGURATION_TYPE,
        "request": "launch",
        "name": WATCH_CONFIGURATION_NAME,
        "env": {
            "ASPNETCORE_ENVIRONMENT": "Development",
            RUDE_EDIT_ENV: "true",
        },
    }
    if project:
        configuration["project"] = f"{project}{PROJECT_SUFFIX}"
        configuration["name"] += f": {project}"
    return configuration


def resolve_watch_configuration(
    configuration: Mapping[str, Any],
    workspace_root: Path,
    workspace_name: str = "",
) -> Optional[WatchLaunchRequest]:
    """
    Turn a watch debug configuration into a launch request.

    Returns:
        The request, or None when the configuration has no ``type`` and the
        host should open the launch configuration instead.
    """
    if not configuration.get("type"):
        logger.debug("Watch configuration %r has no type", configuration.get("name"))
        return None

    env = configuration.get("env")
    resolved_env: Dict[str, str] = {}
    if env is not None:
        resolved_env = {str(key): str(value) for key, value in dict(env).items()}
        resolved_env[RUDE_EDIT_ENV] = "true"

    return WatchLaunchRequest(
        name=str(configuration.get("name") or WATCH_CONFIGURATION_NAME),
        workspace_root=workspace_root,
        workspace_name=workspace_name,
        project=str(configuration.get("project") or ""),
        args=tuple(str(arg) for arg in configuration.get("args") or ()),
        env=resolved_env,
        launch_profile=configuration.get("launchProfile"),
    )


async def provide_watch_configurations(workspace_root: Path, discovery, prompts) -> List[Dict[str, Any]]:
    """Initial watch configurations: one per picked project when the workspace has several."""
    projects = [
        path
        for path in discovery.find_files(workspace_root, f"**/*{PROJECT_SUFFIX}")
        if is_path_under(str(path), str(workspace_root))
    ]
    if len(projects) <= 1:
        return [default_watch_configuration()]

    labels = project_labels(projects)
    picked = await prompts.pick_many(_PROJECTS_PICK_PLACEHOLDER, labels)
    if not picked:
        return [default_watch_configuration()]
    by_label = dict(zip(labels, projects))
    return [default_watch_configuration(by_label[label].stem) for label in picked if label in by_label]


__all__ = [
    "WATCH_CONFIGURATION_NAME",
    "WATCH_CONFIGURATION_TYPE",
    "default_attach_configuration",
    "default_watch_configuration",
    "provide_watch_configurations",
    "resolve_watch_configuration",
]
