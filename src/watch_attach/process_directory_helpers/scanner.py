"""Process table scanning backed by psutil."""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

import psutil

from .process_models import ProcessRecord

logger = logging.getLogger(__name__)

_PROCESS_ATTRS = ["pid", "ppid", "cmdline", "name"]


class ProcessTableScanner:
    """Reads the OS process table into ProcessRecord entries."""

    def read_process_table(self) -> List[ProcessRecord]:
        logger.debug("Reading process table...")
        start_time = time.time()

        records: List[ProcessRecord] = []
        try:
            for proc in psutil.process_iter(_PROCESS_ATTRS):
                try:
                    record = self._to_record(proc.info)
                except (  # policy_guard: allow-silent-handler
                    psutil.NoSuchProcess,
                    psutil.AccessDenied,
                    psutil.ZombieProcess,
                ):
                    continue
                if record is not None:
                    records.append(record)
        except (  # policy_guard: allow-silent-handler
            psutil.Error,
            RuntimeError,
            OSError,
        ):
            logger.exception("Error while reading the process table")
            return []

        logger.debug(
            "Process table read in %.3fs, %d processes",
            time.time() - start_time,
            len(records),
        )
        return records

    @staticmethod
    def _to_record(info: dict[str, Any]) -> Optional[ProcessRecord]:
        pid = info.get("pid")
        if pid is None:
            return None
        ppid = info.get("ppid")
        return ProcessRecord(
            pid=int(pid),
            ppid=int(ppid) if ppid is not None else 0,
            command_line=format_command_line(info.get("cmdline"), info.get("name")),
        )


def format_command_line(cmdline: Any, name: Any) -> str:
    """Join an argv vector; fall back to the process name when argv is unavailable."""
    if isinstance(cmdline, (list, tuple)) and cmdline:
        return " ".join(str(arg) for arg in cmdline)
    if isinstance(cmdline, str) and cmdline:
        return cmdline
    if name is None:
        return ""
    return str(name)
