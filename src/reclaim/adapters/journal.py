"""journalctl adapter."""

from __future__ import annotations

import logging
import re

from reclaim.adapters.commands import run
from reclaim.core.errors import ExecutionFailure, ValidationError

log = logging.getLogger(__name__)

VACUUM_SPEC_RE = re.compile(r"^[0-9]+[a-zA-Z]+$")
_USAGE_RE = re.compile(r"take up\s+([\d.]+)\s*([KMGTPE]?)", re.IGNORECASE)
_BINARY_UNITS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4, "P": 1024**5, "E": 1024**6}


def parse_disk_usage(output: str) -> int | None:
    """Bytes from ``Archived and active journals take up 1.2G in the file system.``"""
    match = _USAGE_RE.search(output)
    if match is None:
        return None
    number, unit = match.groups()
    return int(float(number) * _BINARY_UNITS[unit.upper()])


def disk_usage() -> int | None:
    proc = run(["journalctl", "--disk-usage"], privileged=True)
    return parse_disk_usage(proc.stdout + proc.stderr)


def validate_vacuum_spec(spec: str) -> str:
    """Accept values such as ``2weeks``, ``7d`` or ``500M``."""
    spec = spec.strip()
    if not VACUUM_SPEC_RE.match(spec):
        raise ValidationError(f"{spec!r} is not a number followed by a unit, e.g. 2weeks or 500M")
    return spec


def vacuum(spec: str) -> str:
    """Vacuum by time, falling back to size. Returns which one worked.

    Raises:
        ValidationError: *spec* is malformed.
        ExecutionFailure: journalctl rejected both interpretations.
    """
    spec = validate_vacuum_spec(spec)
    try:
        run(["journalctl", f"--vacuum-time={spec}"], privileged=True, check=True)
        return "time"
    except ExecutionFailure:
        log.debug("Vacuum by time failed for %s, trying size", spec)
    try:
        run(["journalctl", f"--vacuum-size={spec}"], privileged=True, check=True)
    except ExecutionFailure as exc:
        raise ExecutionFailure(f"journalctl could not vacuum with {spec!r}") from exc
    return "size"
