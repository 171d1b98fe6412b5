"""Lookup of watch tasks by normalized project folder."""

from __future__ import annotations

from typing import Dict, Optional

from ..path_matching import is_path_under, normalize_path, project_key


class ProjectIndex:
    """Maps normalized project folder keys to task ids."""

    def __init__(self, *, casefold: Optional[bool] = None):
        self._casefold = casefold
        self._keys: Dict[str, str] = {}

    def add(self, project_folder_path: str, task_id: str) -> None:
        if not project_folder_path:
            return
        self._keys[project_key(project_folder_path, casefold=self._casefold)] = task_id

    def discard(self, task_id: str) -> None:
        for key in [key for key, owner in self._keys.items() if owner == task_id]:
            del self._keys[key]

    def lookup(self, path: str) -> Optional[str]:
        """Task id whose project folder contains ``path``; the deepest folder wins."""
        normalized = normalize_path(path, casefold=self._casefold)
        best_key: Optional[str] = None
        for key in self._keys:
            if is_path_under(normalized, key, casefold=False):
                if best_key is None or len(key) > len(best_key):
                    best_key = key
        if best_key is None:
            return None
        return self._keys[best_key]

    def clear(self) -> None:
        self._keys.clear()
