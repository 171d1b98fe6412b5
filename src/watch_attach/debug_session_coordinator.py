"""
Debug session coordinator.

Owns the attach/disconnect conversation with the host debugger. An attach
registers a placeholder entry for the pid right away and fires the host's
start request without waiting for it; the real session handle is filled in
later from the SessionStarted event that carries the same correlation token.
Handles of soft-disconnected sessions are remembered so their termination is
not mistaken for a deliberate stop of a newer session with the same name.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Iterable, List, Mapping, Optional, Set

from .collaborators import DebuggerFrontEnd
from .debug_session_coordinator_helpers import (
    SOFT_DISCONNECT_KEY,
    DisconnectKind,
    build_attach_configuration,
    build_session_name,
    classify_message,
    correlation_token_of,
    new_correlation_token,
)
from .path_matching import extract_executable_path
from .task_registry import DebugSessionEntry, TaskRegistry, WatchTask

logger = logging.getLogger(__name__)

DISCONNECT_COMMAND = "disconnect"

Spawn = Callable[[Coroutine[Any, Any, Any]], "asyncio.Task[Any]"]


class DebugSessionCoordinator:
    """Attaches the host debugger to pids and interprets its disconnects."""

    def __init__(
        self,
        registry: TaskRegistry,
        frontend: DebuggerFrontEnd,
        *,
        debug_path_marker: str = "/bin/Debug",
        spawn: Optional[Spawn] = None,
    ):
        self._registry = registry
        self._frontend = frontend
        self._debug_path_marker = debug_path_marker
        self._spawn = spawn or self._spawn_tracked
        self._pending: Set[asyncio.Task] = set()
        self._restarting: Set[str] = set()
        self._soft_handles: List[Any] = []
        self._released_tokens: Set[str] = set()
        self.scanner = None

    async def attach(self, pid: int, base_configuration: Mapping[str, Any], executable_path: str) -> bool:
        """
        Start a debug session for ``pid``.

        Returns:
            True when a start request was issued, False when the pid has no owner,
            is already handled, or its tracked task was torn down.
        """
        task = self._registry.find_by_project_path(executable_path)
        external = self._registry.get_external()
        if task is not None:
            owner_label = task.project_name
        elif external is not None and external.pid == pid:
            owner_label = external.command_line
        else:
            logger.debug("No owner for pid %s (%s); not attaching", pid, executable_path)
            return False

        if task is not None and self._registry.is_disconnected(pid):
            logger.info("Debugging of pid %s was stopped; terminating watch task %s", pid, task.id)
            self._registry.clear_disconnected(pid)
            self._registry.remove_session(pid)
            self._terminate_task(task)
            return False

        if self._registry.has_session(pid) or self._registry.is_disconnected(pid):
            return False

        session_name = build_session_name(owner_label, str(base_configuration.get("name", "")))
        token = new_correlation_token()
        configuration = build_attach_configuration(base_configuration, session_name, pid, token)
        entry = DebugSessionEntry(pid=pid, session_name=session_name, correlation_token=token)
        if not self._registry.add_session(pid, entry):
            return False

        logger.info("Attaching debugger to pid %s as %r", pid, session_name)
        started = self._spawn(self._frontend.start_debugging(configuration))
        started.add_done_callback(lambda finished: self._on_start_finished(finished, pid, token))
        self._start_scanner()
        return True

    async def disconnect_stale_sessions(self, matched_pids: Iterable[int]) -> None:
        """Soft-disconnect every session whose pid is no longer an attach candidate."""
        matched = set(matched_pids)
        for pid, entry in self._registry.sessions():
            if pid in matched:
                continue
            self._registry.remove_session(pid)
            logger.info("Session %r for pid %s is stale; disconnecting", entry.session_name, pid)
            if entry.handle is not None:
                self._soft_handles.append(entry.handle)
                await self._send_disconnect(entry.handle, entry.session_name, {SOFT_DISCONNECT_KEY: True})
            elif entry.correlation_token is not None:
                self._released_tokens.add(entry.correlation_token)

    async def terminate(self, pid: int, command_line: Optional[str] = None) -> bool:
        """Stop debugging ``pid`` for good and tear down the task that owns it."""
        entry = self._registry.get_session(pid)
        task = self._registry.find_by_process_id(pid)
        if task is None and entry is not None:
            task = self._registry.find_by_session_name(entry.session_name)
        if task is None and command_line:
            executable = extract_executable_path(command_line, self._debug_path_marker)
            if executable:
                task = self._registry.find_by_project_path(executable)

        if entry is None and task is None:
            logger.debug("Nothing to terminate for pid %s", pid)
            return False

        self._registry.mark_disconnected(pid)
        if entry is not None and entry.handle is not None:
            await self._send_disconnect(entry.handle, entry.session_name, None)
        if task is not None:
            self._terminate_task(task)
        self._stop_scanner_when_idle()
        return True

    def on_protocol_message(self, session_name: str, message: Mapping[str, Any]) -> None:
        kind = classify_message(message)
        if kind is DisconnectKind.NONE:
            return
        if kind is DisconnectKind.RESTART:
            logger.info("Session %r is restarting", session_name)
            self._restarting.add(session_name)
            return
        if kind is DisconnectKind.SOFT:
            logger.debug("Soft disconnect of %r", session_name)
            return
        self._disconnect_genuinely(session_name, self._find_entry(session_name))

    def on_session_terminated(self, session_name: str, handle: Any = None) -> None:
        if handle is not None and self._forget_soft_handle(handle):
            logger.debug("Session %r ended after a soft disconnect", session_name)
            return
        entry = self._find_entry(session_name, handle)
        if session_name in self._restarting:
            self._restarting.discard(session_name)
            if entry is not None:
                self._registry.remove_session(entry.pid)
            logger.info("Session %r ended for a restart", session_name)
            return
        if entry is None:
            logger.debug("Session %r already released", session_name)
            return
        self._disconnect_genuinely(session_name, entry)

    def on_session_started(self, session_name: str, handle: Any, configuration: Optional[Mapping[str, Any]] = None) -> None:
        token = correlation_token_of(configuration)
        if token is not None and token in self._released_tokens:
            self._released_tokens.discard(token)
            logger.info("Session %r started after its pid went stale; disconnecting", session_name)
            self._soft_handles.append(handle)
            self._spawn(self._send_disconnect(handle, session_name, {SOFT_DISCONNECT_KEY: True}))
            return
        entry = self._registry.find_session(correlation_token=token) if token else None
        if entry is None:
            entry = next(
                (
                    candidate
                    for _, candidate in self._registry.sessions()
                    if candidate.is_placeholder and candidate.session_name == session_name
                ),
                None,
            )
        if entry is None:
            logger.debug("Session %r was not started by this engine", session_name)
            return
        entry.handle = handle
        logger.info("Session %r started for pid %s", session_name, entry.pid)

    async def wait_pending(self) -> None:
        """Wait for outstanding start requests issued without an external spawner."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _find_entry(self, session_name: str, handle: Any = None) -> Optional[DebugSessionEntry]:
        sessions = [entry for _, entry in self._registry.sessions()]
        if handle is not None:
            return next((entry for entry in sessions if entry.handle is handle), None)
        named = [entry for entry in sessions if entry.session_name == session_name]
        live = [entry for entry in named if not entry.is_placeholder]
        if live:
            return live[0]
        return named[0] if named else None

    def _forget_soft_handle(self, handle: Any) -> bool:
        for index, soft in enumerate(self._soft_handles):
            if soft is handle:
                del self._soft_handles[index]
                return True
        return False

    def _disconnect_genuinely(self, session_name: str, entry: Optional[DebugSessionEntry]) -> None:
        if entry is not None:
            self._registry.mark_disconnected(entry.pid)
            logger.info("Debugging of pid %s stopped (%r)", entry.pid, session_name)
        task = self._registry.find_by_session_name(session_name)
        if task is not None:
            self._terminate_task(task)
        self._stop_scanner_when_idle()

    def _terminate_task(self, task: WatchTask) -> None:
        try:
            task.terminate()
        except (OSError, RuntimeError):  # policy_guard: allow-silent-handler
            logger.exception("Failed to terminate watch task %s", task.id)
        self._registry.remove(task.id)
        logger.info("Removed watch task %s", task.id)

    async def _send_disconnect(self, handle: Any, session_name: str, arguments: Optional[Mapping[str, Any]]) -> None:
        try:
            await self._frontend.send_request(handle, DISCONNECT_COMMAND, arguments)
        except (OSError, RuntimeError):  # policy_guard: allow-silent-handler
            logger.exception("Failed to disconnect session %r", session_name)

    def _on_start_finished(self, finished: "asyncio.Task[Any]", pid: int, token: str) -> None:
        if finished.cancelled():
            failure = "cancelled"
        elif finished.exception() is not None:
            logger.error("Starting the debugger for pid %s failed", pid, exc_info=finished.exception())
            failure = "error"
        elif not finished.result():
            failure = "rejected"
        else:
            return

        entry = self._registry.get_session(pid)
        if entry is not None and entry.correlation_token == token and entry.is_placeholder:
            self._registry.remove_session(pid)
        logger.warning("Debugger start for pid %s %s; placeholder released", pid, failure)

    def _spawn_tracked(self, coroutine: Coroutine[Any, Any, Any]) -> "asyncio.Task[Any]":
        task = asyncio.create_task(coroutine)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def _start_scanner(self) -> None:
        if self.scanner is not None:
            self.scanner.start()

    def _stop_scanner_when_idle(self) -> None:
        if self.scanner is not None and self._registry.session_count() == 0:
            logger.info("No debug sessions left; stopping the attach scanner")
            self.scanner.stop()


__all__ = ["DebugSessionCoordinator"]
