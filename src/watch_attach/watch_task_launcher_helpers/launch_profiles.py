"""Launch profile discovery from ``Properties/launchSettings.json``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import orjson

from ..errors import LaunchProfileError

logger = logging.getLogger(__name__)

LAUNCH_SETTINGS_RELATIVE = Path("Properties") / "launchSettings.json"
_RUNNABLE_COMMAND = "Project"
_PROFILE_PICK_PLACEHOLDER = "Select the launch profile to run the watch task with."


@dataclass(frozen=True)
class LaunchProfileSelection:
    profile: Optional[str]
    cancelled: bool = False


def load_launch_profiles(project_path: Path) -> List[str]:
    """
    Return runnable profile names in file order.

    Raises:
        LaunchProfileError: When the settings file exists but is not valid JSON.
    """
    settings_path = project_path.parent / LAUNCH_SETTINGS_RELATIVE
    if not settings_path.exists():
        return []

    try:
        payload = orjson.loads(settings_path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as exc:
        raise LaunchProfileError(f"Failed to read launch settings {settings_path}", path=settings_path) from exc

    profiles = payload.get("profiles") if isinstance(payload, dict) else None
    if not isinstance(profiles, dict):
        return []

    names: List[str] = []
    for name, profile in profiles.items():
        command_name = profile.get("commandName") if isinstance(profile, dict) else None
        if command_name in (None, _RUNNABLE_COMMAND):
            names.append(str(name))
    return names


async def select_launch_profile(project_path: Path, requested: Optional[str], prompts) -> LaunchProfileSelection:
    """Pick the profile to run: explicit request, the only profile, or the user's choice."""
    if requested:
        return LaunchProfileSelection(profile=requested)

    try:
        profiles = load_launch_profiles(project_path)
    except LaunchProfileError:
        logger.warning("Ignoring unreadable launch settings for %s", project_path, exc_info=True)
        return LaunchProfileSelection(profile=None)

    if not profiles:
        return LaunchProfileSelection(profile=None)
    if len(profiles) == 1:
        return LaunchProfileSelection(profile=profiles[0])

    choice = await prompts.pick(_PROFILE_PICK_PLACEHOLDER, profiles)
    if choice is None:
        return LaunchProfileSelection(profile=None, cancelled=True)
    return LaunchProfileSelection(profile=choice)
