"""User choices for a respawned external watch process."""

from enum import Enum
from typing import Optional


class ReattachChoice(str, Enum):
    ALWAYS = "Always reattach"
    ONCE = "Reattach once"
    DECLINE = "Don't reattach"

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["ReattachChoice"]:
        """Map a picker answer back to a choice; None when dismissed or unknown."""
        for choice in cls:
            if choice.value == label:
                return choice
        return None


def reattach_prompt(pid: int, command_line: str) -> str:
    return f"The watch process '{command_line}' restarted as pid {pid}. Reattach the debugger?"


__all__ = ["ReattachChoice", "reattach_prompt"]
