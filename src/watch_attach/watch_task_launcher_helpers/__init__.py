"""Helper modules for WatchTaskLauncher."""

from .launch_profiles import LaunchProfileSelection, load_launch_profiles, select_launch_profile
from .project_resolver import PROJECT_SUFFIX, ProjectResolver, project_labels
from .task_command import TaskCommand, WatchLaunchRequest, build_task_command
from .variables import expand_variables

__all__ = [
    "LaunchProfileSelection",
    "PROJECT_SUFFIX",
    "ProjectResolver",
    "TaskCommand",
    "WatchLaunchRequest",
    "build_task_command",
    "expand_variables",
    "load_launch_profiles",
    "project_labels",
    "select_launch_profile",
]
