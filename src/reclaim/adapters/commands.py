"""Blocking invocation of external command-line tools."""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from reclaim.core.errors import ExecutionFailure, PreconditionFailure
from reclaim.core.privileges import as_root

log = logging.getLogger(__name__)


def run(
    cmd: Sequence[str],
    *,
    privileged: bool = False,
    check: bool = False,
) -> subprocess.CompletedProcess[str]:
    """Run *cmd* to completion and capture its text output.

    Raises:
        PreconditionFailure: the executable does not exist.
        ExecutionFailure: ``check`` is set and the command exited non-zero.
    """
    argv = as_root(list(cmd)) if privileged else list(cmd)
    log.debug("Running: %s", " ".join(argv))
    try:
        return subprocess.run(argv, capture_output=True, text=True, check=check)
    except FileNotFoundError as exc:
        raise PreconditionFailure(f"{argv[0]} is not installed") from exc
    except subprocess.CalledProcessError as exc:
        raise ExecutionFailure(_describe_failure(cmd, exc)) from exc


def _describe_failure(cmd: Sequence[str], exc: subprocess.CalledProcessError) -> str:
    message = f"{' '.join(cmd)} failed (exit {exc.returncode})"
    lines = (exc.stderr or exc.stdout or "").strip().splitlines()
    if lines:
        message += f": {lines[-1]}"
    return message


def output_lines(cmd: Sequence[str], *, privileged: bool = False) -> list[str]:
    """Non-empty stdout lines of *cmd*; a non-zero exit yields none."""
    proc = run(cmd, privileged=privileged)
    if proc.returncode != 0:
        log.debug("%s exited with %d: %s", cmd[0], proc.returncode, proc.stderr.strip())
        return []
    return [line for line in proc.stdout.splitlines() if line.strip()]
