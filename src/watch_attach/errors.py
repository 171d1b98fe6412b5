"""Exception hierarchy for the reconciliation engine.

Exceptions accept keyword context that is stored as attributes, so handlers can
log the offending project or task without re-parsing the message.
"""

from __future__ import annotations

from typing import Any


class WatchAttachError(Exception):
    """Base exception for watch-attach errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "watch-attach error"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class ProjectResolutionError(WatchAttachError):
    """Project file could not be found or is not unique."""

    @classmethod
    def not_found(cls, configuration_name: str, project: str) -> "ProjectResolutionError":
        return cls(
            f"The debug configuration '{configuration_name}' references a project that cannot be "
            f"found or is not unique ({project}).",
            configuration_name=configuration_name,
            project=project,
        )


class LaunchProfileError(WatchAttachError):
    """Launch settings file is malformed."""


class TaskStartError(WatchAttachError):
    """Build task runner failed to start the watch task."""


__all__ = [
    "LaunchProfileError",
    "ProjectResolutionError",
    "TaskStartError",
    "WatchAttachError",
]
