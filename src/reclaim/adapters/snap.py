"""Snap adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from reclaim.adapters.commands import output_lines, run

log = logging.getLogger(__name__)

SNAPS_DIR = Path("/var/lib/snapd/snaps")


@dataclass(slots=True, frozen=True)
class SnapRevision:
    name: str
    revision: str

    @property
    def file(self) -> Path:
        return SNAPS_DIR / f"{self.name}_{self.revision}.snap"


def parse_disabled(output: str) -> list[SnapRevision]:
    """Disabled revisions from ``snap list --all``; the header row is skipped."""
    revisions = []
    for line in output.splitlines()[1:]:
        parts = line.split()
        if len(parts) >= 6 and "disabled" in parts[-1].split(","):
            revisions.append(SnapRevision(parts[0], parts[2]))
    return revisions


def disabled_revisions() -> list[SnapRevision]:
    return parse_disabled("\n".join(output_lines(["snap", "list", "--all"])))


def remove_revision(rev: SnapRevision) -> None:
    run(["snap", "remove", rev.name, f"--revision={rev.revision}"], privileged=True, check=True)
