"""Expansion of ``${...}`` placeholders in launch configuration values."""

from __future__ import annotations

import os
import re
from pathlib import Path

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def expand_variables(value: str, workspace_root: Path) -> str:
    """
    Expand workspace placeholders; unknown placeholders are left untouched.

    Supported: ``${workspaceFolder}``, ``${workspaceFolderBasename}``,
    ``${userHome}`` and ``${env:NAME}`` (empty when NAME is unset).
    """

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name == "workspaceFolder":
            return str(workspace_root)
        if name == "workspaceFolderBasename":
            return workspace_root.name
        if name == "userHome":
            return str(Path.home())
        if name.startswith("env:"):
            return os.environ.get(name[len("env:") :], "")
        return match.group(0)

    return _PLACEHOLDER.sub(_replace, value)
