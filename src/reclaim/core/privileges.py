"""Privilege escalation via sudo for root-requiring steps."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess

from reclaim.core.errors import PreconditionFailure

log = logging.getLogger(__name__)


class PrivilegeError(PreconditionFailure):
    """Raised when privilege escalation is unavailable or refused."""


def is_root() -> bool:
    """Check if the current process is running as root."""
    return os.geteuid() == 0


def sudo_available() -> bool:
    """Check if sudo is available on the system."""
    return shutil.which("sudo") is not None


def as_root(cmd: list[str]) -> list[str]:
    """Prefix *cmd* with sudo unless we already are root."""
    if is_root():
        return list(cmd)
    return ["sudo", *cmd]


def ensure_sudo() -> None:
    """Validate (and cache) sudo credentials once per session.

    Raises:
        PrivilegeError: sudo is missing or the user could not authenticate.
    """
    if is_root():
        return
    if not sudo_available():
        raise PrivilegeError("sudo is not installed; run reclaim as root instead")
    # Not captured: sudo prompts for the password on the terminal.
    proc = subprocess.run(["sudo", "-v"])
    if proc.returncode != 0:
        raise PrivilegeError("This tool requires sudo privileges")
    log.debug("sudo credentials validated")
