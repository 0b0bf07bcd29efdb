"""Step to delete systemd coredumps."""

from __future__ import annotations

from pathlib import Path

from reclaim.core.scanner import ResourceClass
from reclaim.models.step import SYSTEM, ResourceScanStep

_COREDUMP_DIR = Path("/var/lib/systemd/coredump")


class CoredumpsStep(ResourceScanStep):
    """Deletes crash dumps collected by systemd-coredump."""

    id = "coredumps"
    name = "System Coredumps"
    description = "Deletes crash dumps in /var/lib/systemd/coredump. Only useful when debugging a crash."
    category = "system"
    group = SYSTEM
    requires_root = True
    sort_order = 25
    item_noun = "coredump"
    display_limit = 10
    empty_message = "No coredump files found."

    @property
    def _resource(self) -> ResourceClass:
        return ResourceClass(
            name=self.name,
            roots=(_COREDUMP_DIR,),
            kinds=frozenset({"file"}),
            label=lambda p: p.name,
            skip_empty=False,
        )
