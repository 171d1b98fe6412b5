"""Helper modules for DebugSessionCoordinator."""

from .protocol import SOFT_DISCONNECT_KEY, DisconnectKind, classify_message
from .session_naming import (
    CORRELATION_KEY,
    build_attach_configuration,
    build_session_name,
    correlation_token_of,
    new_correlation_token,
)

__all__ = [
    "CORRELATION_KEY",
    "DisconnectKind",
    "SOFT_DISCONNECT_KEY",
    "build_attach_configuration",
    "build_session_name",
    "classify_message",
    "correlation_token_of",
    "new_correlation_token",
]
