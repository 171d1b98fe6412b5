"""Pure helpers for matching process command lines against project and workspace paths.

Every path comparison in the engine goes through ``normalize_path`` so quoting,
separator style and trailing separators never decide a match on their own.
"""

from __future__ import annotations

import os
import re
from typing import Iterable, Optional

_QUOTE_CHARS = "\"'"
_LAUNCHER_PREFIX = re.compile(
    r"""^\s*(?:"[^"]*dotnet(?:\.exe)?"|'[^']*dotnet(?:\.exe)?'|\S*dotnet(?:\.exe)?)\s+exec\s+""",
    re.IGNORECASE,
)
_REPEATED_SEPARATORS = re.compile(r"/{2,}")
_WHITESPACE = re.compile(r"\s")
_DEFAULT_CASEFOLD = os.name == "nt"


def strip_quotes(value: str) -> str:
    """Remove surrounding whitespace and any leading/trailing quote characters."""
    return value.strip().strip(_QUOTE_CHARS).strip()


def normalize_path(value: str, *, casefold: Optional[bool] = None) -> str:
    """
    Normalize a path-like string for prefix comparisons.

    Quotes are stripped, backslashes become forward slashes, runs of separators
    collapse (a leading ``//`` UNC marker is kept) and trailing separators are
    removed except for a bare root.
    """
    if casefold is None:
        casefold = _DEFAULT_CASEFOLD

    normalized = strip_quotes(value).replace("\\", "/")
    unc_prefix = "//" if normalized.startswith("//") else ""
    normalized = unc_prefix + _REPEATED_SEPARATORS.sub("/", normalized[len(unc_prefix) :])
    if len(normalized) > 1:
        normalized = normalized.rstrip("/") or "/"
    if casefold:
        normalized = normalized.casefold()
    return normalized


def is_path_under(path: str, root: str, *, casefold: Optional[bool] = None) -> bool:
    """Return True when ``path`` equals ``root`` or lies beneath it."""
    normalized_root = normalize_path(root, casefold=casefold)
    if not normalized_root:
        return False
    normalized_path = normalize_path(path, casefold=casefold)
    if normalized_path == normalized_root:
        return True
    if normalized_root.endswith("/"):
        return normalized_path.startswith(normalized_root)
    return normalized_path.startswith(normalized_root + "/")


def is_under_any(path: str, roots: Iterable[str], *, casefold: Optional[bool] = None) -> bool:
    return any(is_path_under(path, root, casefold=casefold) for root in roots)


def contains_marker(command_line: str, marker: str) -> bool:
    """Separator-insensitive substring check for the debug-build path discriminator."""
    if not marker:
        return False
    return marker.replace("\\", "/") in command_line.replace("\\", "/")


def strip_launcher_prefix(command_line: str) -> str:
    """Drop a leading ``dotnet exec`` (optionally quoted or fully qualified)."""
    return _LAUNCHER_PREFIX.sub("", command_line, count=1)


def extract_executable_path(command_line: str, marker: str) -> str:
    """
    Extract the executable (or entry assembly) path from a process command line.

    Quoted paths are taken verbatim. Unquoted paths may contain spaces before the
    build output folder, so the path runs up to the first whitespace after the
    debug-build marker; without the marker the first token is used.
    """
    remainder = strip_launcher_prefix(command_line).strip()
    if not remainder:
        return ""

    if remainder[0] in _QUOTE_CHARS:
        closing = remainder.find(remainder[0], 1)
        if closing == -1:
            return strip_quotes(remainder)
        return remainder[1:closing]

    comparable = remainder.replace("\\", "/")
    marker_index = comparable.find(marker.replace("\\", "/")) if marker else -1
    search_from = marker_index + len(marker) if marker_index >= 0 else 0
    match = _WHITESPACE.search(remainder, search_from)
    if match is None:
        return strip_quotes(remainder)
    return strip_quotes(remainder[: match.start()])


def project_key(project_folder_path: str, *, casefold: Optional[bool] = None) -> str:
    """Registry index key for a project folder."""
    return normalize_path(project_folder_path, casefold=casefold)


__all__ = [
    "contains_marker",
    "extract_executable_path",
    "is_path_under",
    "is_under_any",
    "normalize_path",
    "project_key",
    "strip_launcher_prefix",
    "strip_quotes",
]
