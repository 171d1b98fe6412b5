"""
Attach scanner: the periodic reconciliation tick.

Each tick takes one process snapshot, gathers the processes of tracked watch
tasks plus the adopted external watch process, narrows them to a single attach
candidate and hands it to the debug session coordinator. A respawned external
process pauses scanning until the user decides whether to follow it.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Coroutine, Dict, List, Optional, Set

from .attach_scanner_helpers import (
    AttachScannerDependenciesFactory,
    ReattachChoice,
    filter_candidates,
    reattach_prompt,
)
from .config.settings import WatchAttachSettings
from .debug_configuration import default_attach_configuration
from .events import ReattachDecision
from .path_matching import extract_executable_path
from .process_directory import ProcessDirectory, ProcessRecord
from .task_registry import ExternalWatchProcess, TaskRegistry

logger = logging.getLogger(__name__)


class ScannerState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class AttachScanner:
    """Drives the attach invariant: one debugger per logical watch process."""

    def __init__(
        self,
        registry: TaskRegistry,
        directory: ProcessDirectory,
        coordinator,
        prompts,
        settings: WatchAttachSettings,
        *,
        perform_tick: Optional[Callable[[], Awaitable[None]]] = None,
        spawn: Optional[Callable[[Coroutine[Any, Any, Any]], "asyncio.Task[Any]"]] = None,
        post: Optional[Callable[[ReattachDecision], None]] = None,
        base_configuration: Optional[Dict[str, Any]] = None,
    ):
        self._registry = registry
        self._directory = directory
        self._coordinator = coordinator
        self._prompts = prompts
        self._settings = settings
        self._spawn = spawn or asyncio.create_task
        self._post = post or self.apply_reattach_decision
        self.base_configuration = base_configuration or default_attach_configuration(settings)
        self._state = ScannerState.STOPPED
        self._always_reattach: Set[str] = set()
        self._prompt_task: Optional[asyncio.Task] = None

        deps = AttachScannerDependenciesFactory.create(
            settings.scan_interval_seconds,
            settings.stop_timeout_seconds,
            perform_tick or self.tick,
        )
        self._worker = deps.worker
        self._lifecycle = deps.lifecycle

    @property
    def state(self) -> ScannerState:
        return self._state

    def is_running(self) -> bool:
        return self._state is ScannerState.RUNNING

    def start(self) -> None:
        """Start scanning; no-op while running or while a reattach decision is pending."""
        if self._state is ScannerState.PAUSED:
            logger.debug("Attach scanner is paused; start ignored")
            return
        self._state = ScannerState.RUNNING
        self._lifecycle.start()

    def stop(self) -> None:
        """Stop scheduling ticks and forget 'always reattach' choices."""
        self._always_reattach.clear()
        if self._state is ScannerState.STOPPED:
            return
        self._state = ScannerState.STOPPED
        self._lifecycle.request_stop()

    def pause(self) -> None:
        if self._state is not ScannerState.RUNNING:
            return
        self._state = ScannerState.PAUSED
        self._lifecycle.request_stop()

    def resume(self) -> None:
        if self._state is not ScannerState.PAUSED:
            return
        self._state = ScannerState.RUNNING
        self._lifecycle.start()

    async def shutdown(self) -> None:
        """Stop and wait for the scan loop to finish."""
        self.stop()
        await self._lifecycle.stop()

    async def tick(self) -> None:
        if self._state is not ScannerState.RUNNING:
            return

        records = await self._directory.snapshot()
        tracked = self._tracked_processes(records)
        external = self._match_external(records)
        if self._state is not ScannerState.RUNNING:
            return

        pool = tracked + ([external] if external is not None else [])
        marker = self._settings.debug_path_marker
        matched = filter_candidates(pool, marker, self._workspace_roots())
        if matched:
            await self._coordinator.disconnect_stale_sessions([record.pid for record in matched])

        candidates = [record for record in matched if not self._registry.has_session(record.pid)]
        if len(candidates) != 1:
            if len(candidates) > 1:
                logger.debug("%d attach candidates this tick; waiting", len(candidates))
            return

        candidate = candidates[0]
        executable = extract_executable_path(candidate.command_line, marker)
        await self._coordinator.attach(candidate.pid, self.base_configuration, executable)

    def apply_reattach_decision(self, decision: ReattachDecision) -> None:
        """Apply the user's answer to a respawned external process prompt."""
        self._prompt_task = None
        record = decision.record
        if decision.choice in (ReattachChoice.ALWAYS, ReattachChoice.ONCE):
            if decision.choice is ReattachChoice.ALWAYS:
                self._always_reattach.add(record.command_line)
            self._registry.set_external(ExternalWatchProcess(pid=record.pid, command_line=record.command_line))
            logger.info("Following respawned watch process as pid %s", record.pid)
            self.resume()
            return

        logger.info("Not following respawned watch process %s", record.pid)
        self._registry.clear_external()
        if self._state is not ScannerState.PAUSED:
            return
        if self._registry.values():
            self.resume()
        else:
            self.stop()

    def _tracked_processes(self, records: List[ProcessRecord]) -> List[ProcessRecord]:
        tracked: List[ProcessRecord] = []
        for task in self._registry.values():
            if task.watch_process_id is not None:
                tracked.extend(ProcessDirectory.subtree(records, task.watch_process_id))
        return tracked

    def _match_external(self, records: List[ProcessRecord]) -> Optional[ProcessRecord]:
        cached = self._registry.get_external()
        if cached is None:
            return None

        same_command = [
            record
            for record in ProcessDirectory.find_watch_processes(records, self._settings.debug_path_marker)
            if record.command_line == cached.command_line
        ]
        for record in same_command:
            if record.pid == cached.pid:
                return record
        if not same_command:
            return None

        respawned = same_command[0]
        if cached.command_line in self._always_reattach:
            logger.info("Watch process respawned as pid %s; reattaching", respawned.pid)
            self._registry.set_external(ExternalWatchProcess(pid=respawned.pid, command_line=respawned.command_line))
            return respawned

        logger.info("Watch process respawned as pid %s; asking whether to reattach", respawned.pid)
        self.pause()
        self._prompt_task = self._spawn(self._ask_reattach(respawned))
        return None

    async def _ask_reattach(self, record: ProcessRecord) -> None:
        try:
            label = await self._prompts.pick(
                reattach_prompt(record.pid, record.command_line),
                [choice.value for choice in ReattachChoice],
            )
        except (OSError, RuntimeError):  # policy_guard: allow-silent-handler
            logger.exception("Reattach prompt failed; treating as dismissed")
            label = None
        self._post(ReattachDecision(record=record, choice=ReattachChoice.from_label(label)))

    def _workspace_roots(self) -> List[str]:
        roots = [str(root) for root in self._settings.workspace_roots]
        roots.extend(str(task.workspace_root) for task in self._registry.values())
        return roots


__all__ = ["AttachScanner", "ScannerState"]
