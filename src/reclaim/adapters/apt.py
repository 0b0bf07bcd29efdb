"""dpkg / apt-get adapter.

The only module that knows the textual output of dpkg-query, apt-get
and deborphan.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from reclaim.adapters.commands import output_lines, run
from reclaim.utils import has_command

log = logging.getLogger(__name__)

_STATUS_FORMAT = "${db:Status-Abbrev}\t${Package}\t${Version}\t${Installed-Size}\n"
_KERNEL_IMAGE_RE = re.compile(r"^linux-image-(?:unsigned-)?(\d[\w.+~-]*)$")
_REMOVAL_RE = re.compile(r"^(?:Remv|Purg)\s+(\S+)")
_FLAVOUR_RE = re.compile(r"-[a-z][a-z0-9]*$")

PACKAGE_MANAGERS = ("apt", "apt-get", "aptitude", "dpkg", "unattended-upgr")


@dataclass(slots=True, frozen=True)
class InstalledPackage:
    """One row of the dpkg status database.

    ``size_bytes`` is None when dpkg does not record an installed size.
    """

    name: str
    status: str
    version: str
    size_bytes: int | None

    @property
    def installed(self) -> bool:
        return self.status == "ii"

    @property
    def residual(self) -> bool:
        return self.status == "rc"


def parse_package_status(output: str) -> list[InstalledPackage]:
    packages: list[InstalledPackage] = []
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) < 4 or not parts[1]:
            continue
        size_kb = parts[3].strip()
        packages.append(
            InstalledPackage(
                name=parts[1].strip(),
                status=parts[0].strip(),
                version=parts[2].strip(),
                size_bytes=int(size_kb) * 1024 if size_kb.isdigit() else None,
            )
        )
    return packages


def installed_packages() -> dict[str, InstalledPackage]:
    """Every package dpkg knows about, keyed by name."""
    proc = run(["dpkg-query", "-W", "-f", _STATUS_FORMAT])
    return {p.name: p for p in parse_package_status(proc.stdout)}


def kernel_version(package: str) -> str | None:
    """``linux-image-6.8.0-45-generic`` -> ``6.8.0-45-generic``."""
    match = _KERNEL_IMAGE_RE.match(package)
    return match.group(1) if match else None


def strip_flavour(version: str) -> str:
    """``6.8.0-45-generic`` -> ``6.8.0-45``."""
    return _FLAVOUR_RE.sub("", version)


def kernel_family(version: str, installed: set[str] | dict[str, InstalledPackage]) -> list[str]:
    """Installed packages belonging to one kernel version."""
    names = [
        f"linux-image-{version}",
        f"linux-image-unsigned-{version}",
        f"linux-image-extra-{version}",
        f"linux-modules-{version}",
        f"linux-modules-extra-{version}",
        f"linux-headers-{version}",
    ]
    base = strip_flavour(version)
    if base != version:
        names.append(f"linux-headers-{base}")
    return [name for name in names if name in installed]


def parse_removals(output: str) -> list[str]:
    """Package names from the ``Remv``/``Purg`` lines of an ``apt-get -s`` run."""
    names = []
    for line in output.splitlines():
        match = _REMOVAL_RE.match(line)
        if match:
            names.append(match.group(1))
    return names


def autoremove_candidates() -> list[str]:
    """Dry run of autoremove; nothing is changed."""
    return parse_removals(run(["apt-get", "-s", "autoremove"]).stdout)


def simulate(action: str, packages: list[str]) -> list[str]:
    """Every package ``apt-get -s <action>`` would take away; nothing is changed.

    The result includes *packages* themselves plus anything apt-get would
    remove along with them (reverse dependencies, metapackages).

    Raises:
        ExecutionFailure: apt-get refuses the request.
    """
    if action not in ("remove", "purge"):
        raise ValueError(f"cannot simulate apt-get {action}")
    return parse_removals(run(["apt-get", "-s", action, *packages], check=True).stdout)


def remove(packages: list[str]) -> None:
    run(["apt-get", "remove", "-y", *packages], privileged=True, check=True)


def purge(packages: list[str]) -> None:
    run(["apt-get", "purge", "-y", *packages], privileged=True, check=True)


def autoremove() -> None:
    run(["apt-get", "autoremove", "-y"], privileged=True, check=True)


def orphans() -> list[str]:
    """Libraries no installed package depends on, as reported by deborphan."""
    return [line.strip() for line in output_lines(["deborphan"])]


def busy_package_managers() -> list[str]:
    """Names of package manager processes currently running."""
    if not has_command("pgrep"):
        return []
    return [name for name in PACKAGE_MANAGERS if output_lines(["pgrep", "-x", name])]
