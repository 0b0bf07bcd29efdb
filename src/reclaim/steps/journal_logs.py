"""Step to vacuum systemd journal logs."""

from __future__ import annotations

import logging

from reclaim.adapters import journal
from reclaim.core.errors import ValidationError
from reclaim.core.executor import execute_batch
from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.outcome import BatchResult
from reclaim.models.step import SYSTEM, CleanupStep
from reclaim.terminal import Severity
from reclaim.utils import bytes_to_human, has_command

log = logging.getLogger(__name__)


class JournalLogsStep(CleanupStep):
    """Shrinks the systemd journal with ``journalctl --vacuum-*``.

    The user chooses how much to keep, either as an age (``2weeks``) or
    as a size (``500M``).  Time is tried first, then size.
    """

    id = "journal_logs"
    name = "Journal Logs"
    description = "Vacuums old systemd journal entries down to a chosen age or size."
    category = "system"
    group = SYSTEM
    requires_root = True
    sort_order = 20
    item_noun = "journal"
    empty_message = "Journal size could not be determined."

    @property
    def unavailable_reason(self) -> str | None:
        if not has_command("journalctl"):
            return "journalctl not found"
        return None

    def scan(self) -> Catalog:
        catalog = Catalog(self.id, self.name)
        size = journal.disk_usage()
        if size is not None:
            catalog.add(
                CatalogItem(
                    identifier="systemd-journal",
                    label=f"Archived and active journals ({bytes_to_human(size)})",
                    size_bytes=size,
                )
            )
        return catalog

    def _ask_spec(self, engine) -> str | None:
        while True:
            raw = engine.terminal.ask("Enter vacuum time or size (e.g. 2weeks, 500M), or press Enter to skip")
            if not raw.strip():
                return None
            try:
                return journal.validate_vacuum_spec(raw)
            except ValidationError as exc:
                engine.terminal.error(f"Invalid input: {exc}")

    def run(self, engine) -> BatchResult | None:
        before = journal.disk_usage()
        if before is not None:
            engine.terminal.info(f"Journal logs currently use {bytes_to_human(before)}")

        spec = self._ask_spec(engine)
        if spec is None:
            engine.notify(Severity.INFO, "Journal vacuum skipped")
            return None
        engine.record(f"Journal vacuum option set to: {spec}")

        if not engine.confirm(f"Vacuum journal logs to {spec}?"):
            engine.notify(Severity.INFO, f"{self.name} cancelled by user")
            return None

        modes: list[str] = []

        def vacuum(item: CatalogItem) -> None:
            modes.append(journal.vacuum(spec))

        result = execute_batch([CatalogItem(identifier=f"vacuum:{spec}", label=spec)], vacuum)
        if result.failed:
            engine.notify(Severity.ERROR, f"Failed to vacuum journal logs with {spec!r}: {result.outcomes[0].error}")
            return result

        after = journal.disk_usage()
        if before is not None and after is not None:
            result.bytes_reclaimed = max(0, before - after)
        engine.notify(
            Severity.SUCCESS,
            f"Journal logs vacuumed to {spec} ({modes[0]}-based), "
            f"{bytes_to_human(result.bytes_reclaimed)} reclaimed",
        )
        return result
