"""Step orchestration: scan, select, confirm, execute, account, log."""

from __future__ import annotations

import logging

from reclaim.core.action_log import ActionLog
from reclaim.core.confirm import ConfirmationGate, TwoTierGate
from reclaim.core.errors import PreconditionFailure, ReclaimError, RetentionViolation
from reclaim.core.executor import execute_batch
from reclaim.core.health import HealthReport, check_health
from reclaim.core.registry import StepRegistry
from reclaim.core.selection import parse_selection
from reclaim.core.space import SpaceAccountant
from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.outcome import ActionOutcome, BatchResult, StepReport
from reclaim.models.space import SpaceDelta, SpaceSample
from reclaim.models.step import CleanupStep
from reclaim.settings import Settings
from reclaim.terminal import Severity, Terminal
from reclaim.utils import bytes_to_human, plural

log = logging.getLogger(__name__)

_MB = 1024 * 1024


class ReclaimEngine:
    """Runs cleanup steps one at a time against the user's answers."""

    def __init__(
        self,
        registry: StepRegistry,
        terminal: Terminal,
        action_log: ActionLog,
        settings: Settings | None = None,
        accountant: SpaceAccountant | None = None,
    ) -> None:
        self.registry = registry
        self.terminal = terminal
        self.action_log = action_log
        self.settings = settings or Settings.instance()
        self.accountant = accountant or SpaceAccountant(self.settings.get("space.path", "/"))

    # ── messages ────────────────────────────────────────────────────────

    def record(self, message: str) -> None:
        self.action_log.append(message)

    def notify(self, severity: Severity, message: str) -> None:
        """Show a coloured line and record it in the action log."""
        self.terminal.notify(severity, message)
        match severity:
            case Severity.WARNING | Severity.ERROR:
                self.record(f"{severity.name}: {message}")
            case _:
                self.record(message)

    def confirm(self, question: str, warning: str | None = None) -> bool:
        return ConfirmationGate(question, warning=warning).ask(self.terminal)

    # ── step lifecycle ──────────────────────────────────────────────────

    def skip_reason(self, step: CleanupStep) -> str | None:
        """Why *step* cannot run right now, or None."""
        if step.id in (self.settings.get("steps.disabled") or []):
            return "disabled in settings"
        try:
            return step.unavailable_reason
        except Exception:
            log.exception("Error checking availability for step '%s'", step.id)
            return "availability check failed"

    def run_step(self, step: CleanupStep | str) -> StepReport:
        """Run one step end to end and report the space it freed.

        Precondition failures skip the step, retention violations abort it,
        and unexpected crashes are logged; none of them end the session.
        """
        if isinstance(step, str):
            found = self.registry.get(step)
            if found is None:
                self.notify(Severity.ERROR, f"Unknown step: {step}")
                return StepReport(step_id=step, error="unknown step")
            step = found

        report = StepReport(step_id=step.id)
        self.terminal.heading(step.name)

        reason = self.skip_reason(step)
        if reason:
            report.skipped_reason = reason
            self.notify(Severity.INFO, f"{step.name} skipped: {reason}")
            return report

        if step.preamble and not self.confirm(
            "Do you understand the risks and want to continue?", warning=step.preamble
        ):
            report.skipped_reason = "cancelled by user"
            self.notify(Severity.INFO, f"{step.name} cancelled by user")
            return report

        self.record(f"{step.name} started")
        before = self.sample_space()
        try:
            report.batch = step.run(self)
        except PreconditionFailure as exc:
            report.skipped_reason = str(exc)
            self.notify(Severity.WARNING, f"{step.name} skipped: {exc}")
            return report
        except RetentionViolation as exc:
            report.error = str(exc)
            self.notify(Severity.ERROR, f"{step.name} aborted: {exc}")
            return report
        except ReclaimError as exc:
            report.error = str(exc)
            self.notify(Severity.ERROR, f"{step.name} failed: {exc}")
            return report
        except Exception as exc:
            log.exception("Step '%s' crashed", step.id)
            report.error = str(exc) or exc.__class__.__name__
            self.notify(Severity.ERROR, f"{step.name} crashed: {report.error}")
            return report

        report.delta = self.measure(before)
        if report.delta is not None:
            self.report_space(report.delta)
        self.record(f"{step.name} completed")
        return report

    def run_all(self) -> list[StepReport]:
        """Run every standard step in order with a cumulative space report."""
        self.record("Running all standard steps")
        before = self.sample_space()
        reports = [self.run_step(step) for step in self.registry.standard()]
        total = self.measure(before)

        self.terminal.heading("Summary")
        ran = sum(1 for r in reports if r.ran)
        self.terminal.info(f"{plural(ran, 'step')} ran, {len(reports) - ran} skipped or failed.")
        if total is not None:
            self.report_space(total, prefix="Total ")
        skipped = self.registry.advanced()
        if skipped:
            names = ", ".join(s.name for s in skipped)
            self.notify(Severity.INFO, f"Advanced steps were not run: {names}. Run them individually.")
        return reports

    def sample_space(self) -> SpaceSample | None:
        """Free space now, or None when it cannot be measured."""
        try:
            return self.accountant.sample()
        except OSError as exc:
            self.notify(Severity.WARNING, f"Cannot measure free space on {self.accountant.path}: {exc}")
            return None

    def measure(self, before: SpaceSample | None) -> SpaceDelta | None:
        if before is None:
            return None
        after = self.sample_space()
        return None if after is None else self.accountant.delta(before, after)

    def report_space(self, delta: SpaceDelta, prefix: str = "") -> None:
        message = SpaceAccountant.describe(delta)
        if delta.significant:
            self.notify(Severity.SUCCESS, f"{prefix}{message}")
        else:
            self.notify(Severity.INFO, message)

    # ── standard catalog flow ───────────────────────────────────────────

    def reclaim(self, step: CleanupStep) -> BatchResult | None:
        """Scan, display, select, confirm and remove for one step."""
        catalog = step.scan()
        if not catalog.removable_items:
            for note in catalog.notes:
                self.terminal.info(note)
            self.notify(Severity.SUCCESS, f"{step.name}: {step.empty_message}")
            return None

        self.show_catalog(step, catalog)
        items = self.choose(step, catalog)
        if not items:
            return None

        step.validate_batch(items)
        whole = len(items) == len(catalog.removable_items)
        if not self.confirm_batch(step, items, whole_catalog=whole):
            return None
        return self.execute(step, items)

    def show_catalog(self, step: CleanupStep, catalog: Catalog) -> None:
        for note in catalog.notes:
            self.terminal.info(note)
        for warning in catalog.warnings:
            self.terminal.warning(warning)

        limit = None if step.selectable else step.display_limit
        shown = catalog.items if limit is None else catalog.items[:limit]
        width = len(str(len(catalog)))
        for index, item in enumerate(shown, 1):
            prefix = f"  [{index:>{width}}] " if step.selectable else "  "
            self.terminal.echo(f"{prefix}{item.label}  ({bytes_to_human(item.size_bytes)})", fg=_item_color(item))
            for note in item.notes:
                self.terminal.echo(f"{' ' * len(prefix)}{note}", fg=_item_color(item))
        if len(catalog) > len(shown):
            self.terminal.echo(f"  ... and {len(catalog) - len(shown)} more")

        self.terminal.echo(
            f"Total: {bytes_to_human(catalog.total_bytes)} in {plural(len(catalog), step.item_noun)}",
            bold=True,
        )

    def choose(self, step: CleanupStep, catalog: Catalog) -> list[CatalogItem]:
        """All removable items, or the user's pick for selectable steps."""
        if not step.selectable:
            return catalog.removable_items

        answer = self.terminal.ask("Remove [a]ll, [s]elect specific, or [n]one?").strip().lower()
        match answer:
            case "a" | "all":
                return catalog.removable_items
            case "s" | "select":
                return self.select(step, catalog)
            case "n" | "none" | "":
                self.notify(Severity.INFO, f"{step.name}: nothing selected, skipped")
                return []
            case _:
                self.notify(Severity.WARNING, f"{step.name}: invalid option {answer!r}, skipped")
                return []

    def select(self, step: CleanupStep, catalog: Catalog) -> list[CatalogItem]:
        count = len(catalog)
        raw = self.terminal.ask(f"Enter numbers to remove, comma-separated (1-{count})")
        if not raw.strip():
            self.notify(Severity.INFO, f"{step.name}: no selection made, skipped")
            return []

        selection = parse_selection(raw, count)
        if selection.rejected:
            shown = ", ".join(repr(token) for token in selection.rejected)
            self.notify(Severity.WARNING, f"Invalid entries: {shown}. Valid range is 1-{count}")

        items = []
        for item in catalog.pick(selection.indices):
            if item.removable:
                items.append(item)
            else:
                self.terminal.warning(f"{item.label} cannot be removed, ignored")
        if not items:
            self.notify(Severity.WARNING, f"{step.name}: no valid items selected")
            return []

        self.terminal.echo("Selected:")
        for item in items:
            self.terminal.echo(f"  {item.label}  ({bytes_to_human(item.size_bytes)})")
        return items

    def threshold_bytes(self, step: CleanupStep, whole_catalog: bool = False) -> int | None:
        """Batch size above which a second confirmation is required.

        Steps with their own threshold key always use it; removing a whole
        catalog falls back to ``confirm.large_threshold_mb``.
        """
        key = step.large_threshold_key
        if key is None and whole_catalog:
            key = "confirm.large_threshold_mb"
        if key is None:
            return None
        return self.settings.get_int(key, 1024) * _MB

    def confirm_batch(self, step: CleanupStep, items: list[CatalogItem], whole_catalog: bool = False) -> bool:
        critical = [i for i in items if i.has_tag("critical")]
        if critical:
            names = ", ".join(i.label for i in critical)
            self.terminal.error(f"Critical items selected: {names}. Removing them may break running software.")

        total = sum(i.size_bytes for i in items)
        gate = TwoTierGate(
            step.confirm_question(items),
            total,
            self.threshold_bytes(step, whole_catalog),
            step.large_warning(total),
        )
        if gate.ask(self.terminal):
            return True

        tier = " at the second confirmation" if gate.rejected_tier == 2 else ""
        self.notify(Severity.INFO, f"{step.name} cancelled by user{tier}")
        return False

    def execute(self, step: CleanupStep, items: list[CatalogItem]) -> BatchResult:
        def on_outcome(item: CatalogItem, outcome: ActionOutcome) -> None:
            if outcome.success:
                self.terminal.success(f"  ✓ {item.label}")
                self.record(f"Removed {item.identifier} ({bytes_to_human(item.size_bytes)})")
            else:
                self.terminal.error(f"  ✗ {item.label}: {outcome.error}")
                self.record(f"ERROR: failed to remove {item.identifier}: {outcome.error}")

        result = execute_batch(items, step.remove, on_outcome)
        step.after_batch(result, self)

        summary = (
            f"{step.name}: removed {result.succeeded}/{plural(result.attempted, step.item_noun)}, "
            f"about {bytes_to_human(result.bytes_reclaimed)} reclaimed"
        )
        if result.failed:
            self.notify(Severity.WARNING, f"{summary}; {result.failed} failed")
        else:
            self.notify(Severity.SUCCESS, summary)
        return result

    # ── session helpers ─────────────────────────────────────────────────

    def preview(self) -> list[tuple[CleanupStep, Catalog | None, str]]:
        """Read-only scan of every step: ``(step, catalog or None, status)``."""
        results: list[tuple[CleanupStep, Catalog | None, str]] = []
        for step in self.registry.ordered():
            reason = self.skip_reason(step)
            if reason:
                results.append((step, None, reason))
                continue
            try:
                results.append((step, step.scan(), ""))
            except PreconditionFailure as exc:
                results.append((step, None, str(exc)))
            except Exception:
                log.exception("Step '%s' failed during scan", step.id)
                results.append((step, None, "error during scan"))
        return results

    def health_check(self) -> bool:
        """Print the health report; False when the user declines to go on."""
        report = check_health(self.accountant)
        self.show_health(report)
        if not report.issues:
            return True
        if self.confirm("Continue anyway?"):
            self.record("User chose to continue despite health issues")
            return True
        self.record("User aborted after health check")
        return False

    def show_health(self, report: HealthReport) -> None:
        self.terminal.heading("System health check")
        for issue in report.issues:
            self.notify(issue.severity, issue.message)
        for note in report.notes:
            self.terminal.info(note)
        if not report.issues:
            self.notify(Severity.SUCCESS, "System health check passed")


def _item_color(item: CatalogItem) -> str | None:
    if item.has_tag("critical"):
        return "red"
    if item.has_tag("caution"):
        return "yellow"
    return None
