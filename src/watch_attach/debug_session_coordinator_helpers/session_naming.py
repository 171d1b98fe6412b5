"""Session names and correlation tokens for attach configurations."""

import uuid
from typing import Any, Dict, Mapping, Optional

CORRELATION_KEY = "watchAttachCorrelationId"


def build_session_name(owner_label: str, base_name: str) -> str:
    return f"{owner_label} - {base_name}"


def new_correlation_token() -> str:
    return uuid.uuid4().hex


def build_attach_configuration(
    base_configuration: Mapping[str, Any], session_name: str, pid: int, token: str
) -> Dict[str, Any]:
    configuration = dict(base_configuration)
    configuration["name"] = session_name
    configuration["processId"] = pid
    configuration[CORRELATION_KEY] = token
    return configuration


def correlation_token_of(configuration: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not configuration:
        return None
    token = configuration.get(CORRELATION_KEY)
    return str(token) if token else None


__all__ = [
    "CORRELATION_KEY",
    "build_attach_configuration",
    "build_session_name",
    "correlation_token_of",
    "new_correlation_token",
]
