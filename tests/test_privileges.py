"""Tests for privilege escalation helpers."""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from reclaim.core.errors import PreconditionFailure
from reclaim.core.privileges import PrivilegeError, as_root, ensure_sudo, sudo_available


@pytest.fixture
def as_user(monkeypatch):
    monkeypatch.setattr("reclaim.core.privileges.os.geteuid", lambda: 1000)


@pytest.fixture
def as_superuser(monkeypatch):
    monkeypatch.setattr("reclaim.core.privileges.os.geteuid", lambda: 0)


class TestSudoAvailable:
    def test_available(self, monkeypatch):
        monkeypatch.setattr("shutil.which", lambda name: "/usr/bin/sudo" if name == "sudo" else None)
        assert sudo_available() is True

    def test_not_available(self, monkeypatch):
        monkeypatch.setattr("shutil.which", lambda name: None)
        assert sudo_available() is False


class TestAsRoot:
    def test_prefixes_sudo(self, as_user):
        assert as_root(["rm", "-rf", "x"]) == ["sudo", "rm", "-rf", "x"]

    def test_root_runs_directly(self, as_superuser):
        assert as_root(["rm", "-rf", "x"]) == ["rm", "-rf", "x"]


class TestEnsureSudo:
    def test_root_needs_nothing(self, as_superuser):
        with patch("reclaim.core.privileges.subprocess.run") as mock_run:
            ensure_sudo()
        mock_run.assert_not_called()

    def test_missing_sudo(self, as_user, monkeypatch):
        monkeypatch.setattr("shutil.which", lambda name: None)
        with pytest.raises(PrivilegeError, match="sudo is not installed"):
            ensure_sudo()

    def test_refused(self, as_user, monkeypatch):
        monkeypatch.setattr("shutil.which", lambda name: "/usr/bin/sudo")
        with patch("reclaim.core.privileges.subprocess.run", return_value=subprocess.CompletedProcess([], 1)):
            with pytest.raises(PrivilegeError, match="requires sudo"):
                ensure_sudo()

    def test_validated(self, as_user, monkeypatch):
        monkeypatch.setattr("shutil.which", lambda name: "/usr/bin/sudo")
        with patch("reclaim.core.privileges.subprocess.run", return_value=subprocess.CompletedProcess([], 0)) as mock_run:
            ensure_sudo()
        mock_run.assert_called_once_with(["sudo", "-v"])

    def test_is_a_precondition_failure(self):
        assert issubclass(PrivilegeError, PreconditionFailure)
