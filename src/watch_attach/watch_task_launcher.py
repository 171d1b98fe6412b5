"""
Watch task launcher.

Starting a watch task is a two-step registry sequence: the slot is reserved
under an id computed from the static command before the runner is asked to
start anything, and it is populated only once the execution handle resolves.
Runner notifications that arrive in between are buffered here.
"""

import logging
from typing import Dict

from .collaborators import BuildTaskRunner, ProjectDiscovery, Prompts
from .config.settings import WatchAttachSettings
from .errors import ProjectResolutionError, TaskStartError
from .task_registry import TaskRegistry, WatchTask
from .watch_task_launcher_helpers import (
    ProjectResolver,
    TaskCommand,
    WatchLaunchRequest,
    build_task_command,
    select_launch_profile,
)

logger = logging.getLogger(__name__)

OPEN_LAUNCH_CONFIGURATION = "Open launch configuration"


class WatchTaskLauncher:
    """Starts watch-build tasks and tracks them in the registry."""

    def __init__(
        self,
        registry: TaskRegistry,
        runner: BuildTaskRunner,
        discovery: ProjectDiscovery,
        prompts: Prompts,
        settings: WatchAttachSettings,
    ):
        self._registry = registry
        self._runner = runner
        self._prompts = prompts
        self._settings = settings
        self._resolver = ProjectResolver(discovery, prompts)
        self._early_process_ids: Dict[str, int] = {}

    async def start_task(self, request: WatchLaunchRequest) -> bool:
        """Resolve the request's project and launch it; False when nothing was started."""
        try:
            project_path = await self._resolver.resolve(request)
        except ProjectResolutionError as exc:
            logger.warning("Cannot start watch task for %s: %s", request.name, exc)
            await self._report_resolution_failure(request, exc)
            return False
        if project_path is None:
            return False

        selection = await select_launch_profile(project_path, request.launch_profile, self._prompts)
        if selection.cancelled:
            logger.info("Launch profile selection dismissed for %s", project_path)
            return False

        command = build_task_command(
            request,
            project_path,
            selection.profile,
            program=self._settings.watch_program,
            restart_on_rude_edit=self._settings.restart_on_rude_edit,
        )
        return await self.launch(command)

    async def launch(self, command: TaskCommand) -> bool:
        task_id = command.task_id
        if not self._registry.reserve(task_id):
            logger.info("Watch task %s already running", task_id)
            await self._prompts.show_information(
                f"Watch task already started for the project {command.project_name}."
            )
            return False

        try:
            execution = await self._runner.execute(command)
        except (TaskStartError, OSError, RuntimeError) as exc:
            self._registry.remove(task_id)
            self._early_process_ids.pop(task_id, None)
            logger.exception("Build task runner failed to start %s", task_id)
            await self._prompts.show_error(f"Failed to start the watch task for {command.project_name}: {exc}")
            return False

        if not self._registry.is_reserved(task_id):
            # Slot released while the runner was starting (task ended or engine disposed).
            logger.info("Slot for %s released during start; terminating execution", task_id)
            self._early_process_ids.pop(task_id, None)
            execution.terminate()
            return False

        task = WatchTask(
            id=task_id,
            workspace_root=command.workspace_root,
            project_path=str(command.project_path),
            project_folder_path=command.project_folder_path,
            project_name=command.project_name,
            execution=execution,
            watch_process_id=self._early_process_ids.pop(task_id, None),
        )
        self._registry.set(task_id, task)
        logger.info("Started watch task %s for %s", task_id, command.project_path)
        return True

    def on_task_process_started(self, task_id: str, process_id: int) -> None:
        task = self._registry.get(task_id)
        if task is not None:
            task.watch_process_id = process_id
            logger.debug("Watch task %s running as pid %s", task_id, process_id)
        elif self._registry.is_reserved(task_id):
            self._early_process_ids[task_id] = process_id

    def on_task_ended(self, task_id: str) -> None:
        self._early_process_ids.pop(task_id, None)
        if self._registry.remove(task_id) is not None:
            logger.info("Watch task %s ended", task_id)

    async def _report_resolution_failure(self, request: WatchLaunchRequest, error: ProjectResolutionError) -> None:
        choice = await self._prompts.show_error(str(error), OPEN_LAUNCH_CONFIGURATION)
        if choice == OPEN_LAUNCH_CONFIGURATION:
            await self._prompts.open_launch_configuration(request.workspace_root)


__all__ = ["WatchTaskLauncher"]
