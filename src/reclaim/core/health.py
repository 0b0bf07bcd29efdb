"""Startup health check run before any cleanup."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from reclaim.core.scanner import ResourceClass, scan_resource
from reclaim.core.space import SpaceAccountant
from reclaim.terminal import Severity
from reclaim.utils import bytes_to_human

log = logging.getLogger(__name__)

_MEMINFO = Path("/proc/meminfo")
_OS_RELEASE = Path("/etc/os-release")
_LOG_DIR = Path("/var/log")

DISK_CRITICAL_PERCENT = 95
DISK_WARNING_PERCENT = 85
MEMORY_CRITICAL_MB = 500
MEMORY_WARNING_MB = 1000
LARGE_LOG_BYTES = 100 * 1024 * 1024
TESTED_RELEASE = ("ubuntu", "24.04")


@dataclass(slots=True, frozen=True)
class HealthIssue:
    severity: Severity
    message: str


@dataclass(slots=True)
class HealthReport:
    """Issues make the user confirm before continuing; notes are informational."""

    issues: list[HealthIssue] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    @property
    def critical(self) -> bool:
        return any(i.severity is Severity.ERROR for i in self.issues)


def available_memory_mb(meminfo: Path = _MEMINFO) -> int | None:
    try:
        for line in meminfo.read_text().splitlines():
            if line.startswith("MemAvailable:"):
                return int(line.split()[1]) // 1024
    except (OSError, ValueError, IndexError):
        log.debug("Cannot read %s", meminfo)
    return None


def os_release(path: Path = _OS_RELEASE) -> dict[str, str]:
    info: dict[str, str] = {}
    try:
        for line in path.read_text().splitlines():
            key, sep, value = line.partition("=")
            if sep:
                info[key.strip()] = value.strip().strip('"')
    except OSError:
        log.debug("Cannot read %s", path)
    return info


def _is_large(path: Path) -> bool:
    try:
        return path.lstat().st_size > LARGE_LOG_BYTES
    except OSError:
        return False


def large_logs(log_dir: Path = _LOG_DIR) -> list[tuple[Path, int]]:
    catalog = scan_resource(
        ResourceClass(
            name="large logs",
            roots=(log_dir,),
            match=_is_large,
            kinds=frozenset({"file"}),
            max_depth=4,
            order="size",
        )
    )
    return [(item.path, item.size_bytes) for item in catalog.items if item.path is not None]


def check_health(accountant: SpaceAccountant) -> HealthReport:
    from reclaim.adapters.apt import busy_package_managers

    report = HealthReport()

    for usage in accountant.mounts():
        if usage.percent > DISK_CRITICAL_PERCENT:
            report.issues.append(
                HealthIssue(Severity.ERROR, f"CRITICAL: {usage.path} is {usage.percent}% full")
            )
        elif usage.percent > DISK_WARNING_PERCENT:
            report.issues.append(HealthIssue(Severity.WARNING, f"{usage.path} is {usage.percent}% full"))

    memory = available_memory_mb(_MEMINFO)
    if memory is None:
        report.notes.append("Available memory could not be determined")
    elif memory < MEMORY_CRITICAL_MB:
        report.issues.append(HealthIssue(Severity.ERROR, f"CRITICAL: only {memory} MB of memory available"))
    elif memory < MEMORY_WARNING_MB:
        report.issues.append(HealthIssue(Severity.WARNING, f"Low memory: {memory} MB available"))

    busy = busy_package_managers()
    if busy:
        report.issues.append(
            HealthIssue(Severity.WARNING, f"Package manager already running: {', '.join(busy)}")
        )

    for path, size in large_logs(_LOG_DIR):
        report.notes.append(f"Large log file: {path} ({bytes_to_human(size)})")

    release = os_release(_OS_RELEASE)
    distro = (release.get("ID", ""), release.get("VERSION_ID", ""))
    if distro != TESTED_RELEASE:
        detected = release.get("PRETTY_NAME") or "unknown distribution"
        report.notes.append(f"Tested on Ubuntu {TESTED_RELEASE[1]}; detected {detected}")

    return report
