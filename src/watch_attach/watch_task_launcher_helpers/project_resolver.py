"""Resolution of a launch request's project string to one project file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ..errors import ProjectResolutionError
from ..path_matching import is_path_under
from .task_command import WatchLaunchRequest
from .variables import expand_variables

logger = logging.getLogger(__name__)

PROJECT_SUFFIX = ".csproj"
_PROJECT_PICK_PLACEHOLDER = "Select the project to launch the watch task for."


class ProjectResolver:
    """Turns a project descriptor into a concrete project file path."""

    def __init__(self, discovery, prompts):
        self._discovery = discovery
        self._prompts = prompts

    async def resolve(self, request: WatchLaunchRequest) -> Optional[Path]:
        """
        Resolve the request's project.

        Returns:
            The project file, or None when the user dismissed the project picker.

        Raises:
            ProjectResolutionError: When no project matches or the match is not unique.
        """
        project = expand_variables(request.project or "", request.workspace_root).strip()
        if not project:
            return await self._resolve_without_project(request)

        if not project.endswith(PROJECT_SUFFIX):
            folder = Path(project)
            if not folder.is_absolute():
                folder = request.workspace_root / folder
            return self._unique(self._discovery.find_files(folder, f"**/*{PROJECT_SUFFIX}"), request)

        candidate = Path(project)
        if candidate.is_absolute() and is_path_under(str(candidate), str(request.workspace_root)):
            return candidate

        return self._unique(self._discovery.find_files(request.workspace_root, f"**/{project}"), request)

    async def _resolve_without_project(self, request: WatchLaunchRequest) -> Optional[Path]:
        found = [
            path
            for path in self._discovery.find_files(request.workspace_root, f"**/*{PROJECT_SUFFIX}")
            if is_path_under(str(path), str(request.workspace_root))
        ]
        if not found:
            raise ProjectResolutionError.not_found(request.name, "")
        if len(found) == 1:
            return found[0]

        labels = project_labels(found)
        choice = await self._prompts.pick(_PROJECT_PICK_PLACEHOLDER, labels)
        if choice is None:
            logger.info("Project selection dismissed for %s", request.name)
            return None
        return found[labels.index(choice)]

    @staticmethod
    def _unique(found: List[Path], request: WatchLaunchRequest) -> Path:
        if len(found) != 1:
            logger.debug("Project %r matched %d files", request.project, len(found))
            raise ProjectResolutionError.not_found(request.name, request.project)
        return found[0]


def project_labels(paths: List[Path]) -> List[str]:
    """Project name labels, qualified with the full path when names collide."""
    stems = [path.stem for path in paths]
    return [stem if stems.count(stem) == 1 else f"{stem} ({path})" for stem, path in zip(stems, paths)]
