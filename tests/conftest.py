"""Shared test fixtures."""

from __future__ import annotations

import pytest

from helpers import ScriptedTerminal, SteppedAccountant
from reclaim.core.action_log import ActionLog
from reclaim.core.engine import ReclaimEngine
from reclaim.core.registry import StepRegistry
from reclaim.settings import Settings


@pytest.fixture(autouse=True)
def isolate_env(tmp_path_factory, monkeypatch):
    """Point XDG directories and the shared settings at a temp home.

    The home lives outside ``tmp_path`` so scans rooted there only see what
    the test itself creates.
    """
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    monkeypatch.setattr(Settings, "_instance", Settings(home / ".config" / "reclaim" / "settings.json"))
    return home


@pytest.fixture
def settings():
    return Settings.instance()


@pytest.fixture
def action_log(tmp_path):
    return ActionLog(tmp_path / "logs" / "actions.log")


@pytest.fixture
def make_engine(action_log, settings):
    """Build an engine around the given steps, answers and space samples."""

    def _make(steps=(), answers=(), samples=None):
        registry = StepRegistry()
        for step in steps:
            registry.register(step)
        terminal = ScriptedTerminal(answers)
        return ReclaimEngine(registry, terminal, action_log, settings, SteppedAccountant(samples))

    return _make
