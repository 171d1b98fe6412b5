from __future__ import annotations

"""Settings consumed by the reconciliation engine."""


import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from . import ConfigurationError, env_bool, env_list, env_seconds, env_str

DEFAULT_DEBUG_PATH_MARKER = "/bin/Debug"
DEFAULT_ATTACH_NAME = ".NET Core Attach - AUTO"


@dataclass(frozen=True)
class WatchAttachSettings:
    scan_interval_seconds: float = 1.0
    debug_path_marker: str = DEFAULT_DEBUG_PATH_MARKER
    process_query_timeout_seconds: float = 5.0
    stop_timeout_seconds: float = 2.0
    debugger_type: str = "coreclr"
    attach_name: str = DEFAULT_ATTACH_NAME
    watch_program: str = "dotnet"
    restart_on_rude_edit: bool = True
    workspace_roots: tuple[Path, ...] = field(default_factory=tuple)


@lru_cache(maxsize=1)
def get_settings() -> WatchAttachSettings:
    """Build settings from ``WATCH_ATTACH_*`` environment variables."""
    defaults = WatchAttachSettings()

    scan_interval = env_seconds("WATCH_ATTACH_SCAN_INTERVAL_SECONDS", or_value=defaults.scan_interval_seconds)
    if not scan_interval:
        raise ConfigurationError.invalid_value(
            "WATCH_ATTACH_SCAN_INTERVAL_SECONDS", scan_interval, "The scan interval must be positive"
        )

    marker = env_str("WATCH_ATTACH_DEBUG_PATH_MARKER", or_value=defaults.debug_path_marker)
    roots = env_list("WATCH_ATTACH_WORKSPACE_ROOTS", or_value=(), separator=os.pathsep)

    return WatchAttachSettings(
        scan_interval_seconds=float(scan_interval),
        debug_path_marker=str(marker),
        process_query_timeout_seconds=float(
            env_seconds(
                "WATCH_ATTACH_PROCESS_QUERY_TIMEOUT_SECONDS",
                or_value=defaults.process_query_timeout_seconds,
            )
        ),
        stop_timeout_seconds=float(
            env_seconds("WATCH_ATTACH_STOP_TIMEOUT_SECONDS", or_value=defaults.stop_timeout_seconds)
        ),
        debugger_type=str(env_str("WATCH_ATTACH_DEBUGGER_TYPE", or_value=defaults.debugger_type)),
        attach_name=str(env_str("WATCH_ATTACH_ATTACH_NAME", or_value=defaults.attach_name)),
        watch_program=str(env_str("WATCH_ATTACH_WATCH_PROGRAM", or_value=defaults.watch_program)),
        restart_on_rude_edit=bool(
            env_bool("WATCH_ATTACH_RESTART_ON_RUDE_EDIT", or_value=defaults.restart_on_rude_edit)
        ),
        workspace_roots=tuple(Path(root).expanduser() for root in roots or ()),
    )


__all__ = ["WatchAttachSettings", "get_settings"]
