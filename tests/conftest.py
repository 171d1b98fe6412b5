"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from watch_attach.config import runtime
from watch_attach.config.settings import WatchAttachSettings, get_settings
from watch_attach.task_registry import TaskRegistry
from tests.helpers.engine_fakes import FakeFrontend, FakePrompts, FakeRunner


@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch, tmp_path):
    """Keep developer .env files and cached settings out of every test."""
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", (tmp_path / "missing.env",))
    runtime.reset_default_values()
    get_settings.cache_clear()
    yield
    runtime.reset_default_values()
    get_settings.cache_clear()


@pytest.fixture
def settings() -> WatchAttachSettings:
    return WatchAttachSettings(
        scan_interval_seconds=0.01,
        stop_timeout_seconds=0.5,
        workspace_roots=(Path("/work"),),
    )


@pytest.fixture
def registry() -> TaskRegistry:
    return TaskRegistry(casefold_paths=False)


@pytest.fixture
def prompts() -> FakePrompts:
    return FakePrompts()


@pytest.fixture
def frontend() -> FakeFrontend:
    return FakeFrontend()


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()
