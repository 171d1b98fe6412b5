"""Classification of debug adapter protocol messages."""

from enum import Enum
from typing import Any, Mapping

SOFT_DISCONNECT_KEY = "watchAttachSoftDisconnect"
_DISCONNECT_COMMANDS = frozenset({"disconnect", "terminate"})


class DisconnectKind(Enum):
    NONE = "none"
    RESTART = "restart"
    SOFT = "soft"
    GENUINE = "genuine"


def classify_message(message: Mapping[str, Any]) -> DisconnectKind:
    """
    Decide what a protocol message means for the session that sent it.

    Only ``disconnect`` and ``terminate`` requests matter. A request with
    ``arguments.restart`` set is an in-place restart by the watcher; one carrying
    the soft-disconnect flag was issued by this engine. Everything else stops
    debugging for real.
    """
    if message.get("type", "request") != "request":
        return DisconnectKind.NONE
    if message.get("command") not in _DISCONNECT_COMMANDS:
        return DisconnectKind.NONE

    arguments = message.get("arguments")
    if not isinstance(arguments, Mapping):
        arguments = {}
    if arguments.get("restart") is True:
        return DisconnectKind.RESTART
    if arguments.get(SOFT_DISCONNECT_KEY) is True:
        return DisconnectKind.SOFT
    return DisconnectKind.GENUINE


__all__ = ["DisconnectKind", "SOFT_DISCONNECT_KEY", "classify_message"]
