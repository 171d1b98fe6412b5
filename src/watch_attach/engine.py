"""
Engine context: builds every component once and serialises their work.

Host notifications are posted to a single queue and handled one at a time by
the reconciliation consumer. The scanner's interval loop submits each tick
through the same queue and waits for it, so a tick never overlaps an event
handler. Starting a watch task stays outside the queue because it waits on
user prompts; its registry updates are single synchronous steps.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Coroutine, Mapping, Optional, Set, Tuple

import psutil

from .attach_scanner import AttachScanner
from .collaborators import BuildTaskRunner, DebuggerFrontEnd, ProjectDiscovery, Prompts
from .config.settings import WatchAttachSettings, get_settings
from .debug_configuration import default_attach_configuration, resolve_watch_configuration
from .debug_session_coordinator import DebugSessionCoordinator
from .events import (
    ProtocolMessage,
    ReattachDecision,
    ScanTick,
    SessionStarted,
    SessionTerminated,
    TaskEnded,
    TaskProcessStarted,
)
from .process_directory import ProcessDirectory
from .project_discovery import FileSystemProjectDiscovery
from .status_view import StatusView
from .task_registry import TaskRegistry
from .watch_task_launcher import WatchTaskLauncher

logger = logging.getLogger(__name__)

_QueueItem = Tuple[Any, Optional["asyncio.Future[None]"]]


class EngineContext:
    """Owns the registry, the components and the reconciliation queue."""

    def __init__(
        self,
        runner: BuildTaskRunner,
        frontend: DebuggerFrontEnd,
        prompts: Prompts,
        *,
        discovery: Optional[ProjectDiscovery] = None,
        settings: Optional[WatchAttachSettings] = None,
        directory: Optional[ProcessDirectory] = None,
        registry: Optional[TaskRegistry] = None,
    ):
        self.settings = settings if settings is not None else get_settings()
        self.registry = registry if registry is not None else TaskRegistry()
        self.directory = (
            directory
            if directory is not None
            else ProcessDirectory(self.settings.process_query_timeout_seconds)
        )
        self.discovery = discovery if discovery is not None else FileSystemProjectDiscovery()
        self.prompts = prompts

        self._queue: "asyncio.Queue[_QueueItem]" = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None
        self._background: Set[asyncio.Task] = set()

        self.coordinator = DebugSessionCoordinator(
            self.registry,
            frontend,
            debug_path_marker=self.settings.debug_path_marker,
            spawn=self.spawn,
        )
        self.scanner = AttachScanner(
            self.registry,
            self.directory,
            self.coordinator,
            prompts,
            self.settings,
            perform_tick=self._submit_tick,
            spawn=self.spawn,
            post=self.post,
        )
        self.coordinator.scanner = self.scanner
        self.launcher = WatchTaskLauncher(self.registry, runner, self.discovery, prompts, self.settings)

    async def __aenter__(self) -> "EngineContext":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    def start(self) -> None:
        if self._consumer is None or self._consumer.done():
            self._consumer = asyncio.create_task(self._consume())
            logger.info("Engine started")

    async def dispose(self) -> None:
        """Stop scanning, stop the consumer, cancel pending work and terminate every task."""
        await self.scanner.shutdown()

        consumer, self._consumer = self._consumer, None
        if consumer is not None:
            consumer.cancel()
            await asyncio.gather(consumer, return_exceptions=True)
        self._fail_queued()

        pending = list(self._background)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._background.clear()

        self.registry.dispose()
        logger.info("Engine disposed")

    # Event intake

    def post(self, event: Any) -> None:
        """Queue a host notification for the reconciliation consumer."""
        self._queue.put_nowait((event, None))

    async def submit(self, event: Any) -> None:
        """Queue ``event`` and wait until it has been handled."""
        if self._consumer is None:
            await self._dispatch(event)
            return
        done: "asyncio.Future[None]" = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((event, done))
        await done

    def spawn(self, coroutine: Coroutine[Any, Any, Any]) -> "asyncio.Task[Any]":
        """Run ``coroutine`` in the background, holding a reference until it finishes."""
        task = asyncio.create_task(coroutine)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    # Host commands

    async def start_watch(self, configuration: Mapping[str, Any], workspace_root: Path, workspace_name: str = "") -> bool:
        """Start a watch task for a watch debug configuration."""
        request = resolve_watch_configuration(configuration, workspace_root, workspace_name)
        if request is None:
            await self.prompts.open_launch_configuration(workspace_root)
            return False
        return await self.launcher.start_task(request)

    def start_auto_attach(self, configuration: Optional[Mapping[str, Any]] = None) -> None:
        """Begin scanning with ``configuration`` as the attach template."""
        base = default_attach_configuration(self.settings)
        if configuration:
            base.update(configuration)
        self.scanner.base_configuration = base
        self.scanner.start()

    def status_view(self) -> StatusView:
        return StatusView(self)

    # Consumer

    async def _consume(self) -> None:
        while True:
            event, done = await self._queue.get()
            try:
                await self._dispatch(event)
            except (psutil.Error, OSError, RuntimeError, ValueError, TypeError, KeyError, AttributeError) as exc:
                if done is None:
                    logger.exception("Failed to handle %s", type(event).__name__)
                elif not done.done():
                    done.set_exception(exc)
            else:
                if done is not None and not done.done():
                    done.set_result(None)
            finally:
                self._queue.task_done()

    async def _dispatch(self, event: Any) -> None:
        if isinstance(event, ScanTick):
            await self.scanner.tick()
        elif isinstance(event, SessionStarted):
            self.coordinator.on_session_started(event.session_name, event.handle, event.configuration)
        elif isinstance(event, SessionTerminated):
            self.coordinator.on_session_terminated(event.session_name, event.handle)
        elif isinstance(event, ProtocolMessage):
            self.coordinator.on_protocol_message(event.session_name, event.message)
        elif isinstance(event, TaskProcessStarted):
            self.launcher.on_task_process_started(event.task_id, event.process_id)
        elif isinstance(event, TaskEnded):
            self.launcher.on_task_ended(event.task_id)
        elif isinstance(event, ReattachDecision):
            self.scanner.apply_reattach_decision(event)
        else:
            logger.warning("Ignoring unknown event %r", event)

    async def _submit_tick(self) -> None:
        await self.submit(ScanTick())

    def _fail_queued(self) -> None:
        while not self._queue.empty():
            _, done = self._queue.get_nowait()
            if done is not None and not done.done():
                done.cancel()

    def _on_background_done(self, task: "asyncio.Task[Any]") -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background task failed", exc_info=task.exception())


__all__ = ["EngineContext"]
