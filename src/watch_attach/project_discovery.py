"""Filesystem-backed project discovery."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import FrozenSet, List

logger = logging.getLogger(__name__)

_BUILD_OUTPUT_DIRS: FrozenSet[str] = frozenset({"bin", "obj"})


class FileSystemProjectDiscovery:
    """Finds files under a root with ``pathlib`` globbing, ignoring build output folders."""

    def __init__(self, excluded_dirs: FrozenSet[str] = _BUILD_OUTPUT_DIRS):
        self._excluded_dirs = excluded_dirs

    def find_files(self, root: Path, pattern: str) -> List[Path]:
        if not root.is_dir():
            logger.debug("Discovery root %s does not exist", root)
            return []
        try:
            matches = [
                path
                for path in root.glob(pattern)
                if path.is_file() and not self._in_excluded_dir(path.relative_to(root))
            ]
        except OSError:  # policy_guard: allow-silent-handler
            logger.exception("Failed to search %s for %s", root, pattern)
            return []
        return sorted(matches, key=lambda path: (len(str(path)), str(path)))

    def _in_excluded_dir(self, relative: Path) -> bool:
        return any(part in self._excluded_dirs for part in relative.parts[:-1])


__all__ = ["FileSystemProjectDiscovery"]
