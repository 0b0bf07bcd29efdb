"""CLI interface for reclaim."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from reclaim.core.action_log import ActionLog
from reclaim.core.engine import ReclaimEngine
from reclaim.core.health import check_health
from reclaim.core.privileges import PrivilegeError, ensure_sudo
from reclaim.core.registry import StepRegistry
from reclaim.core.step_loader import load_steps
from reclaim.models.step import CleanupStep
from reclaim.settings import Settings, parse_value
from reclaim.terminal import Severity, Terminal
from reclaim.utils import bytes_to_human

log = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_engine(ctx: click.Context) -> ReclaimEngine:
    settings: Settings = ctx.obj["settings"]
    log_file = ctx.obj.get("log_file") or settings.get("log.file")
    registry = StepRegistry()
    load_steps(registry)
    return ReclaimEngine(registry, Terminal(), ActionLog(Path(log_file).expanduser()), settings)


def _require_sudo(engine: ReclaimEngine, steps: list[CleanupStep]) -> None:
    if not any(step.requires_root for step in steps):
        return
    try:
        ensure_sudo()
    except PrivilegeError as exc:
        engine.notify(Severity.ERROR, str(exc))
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Action log location")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="Settings file")
@click.pass_context
def main(ctx: click.Context, verbose: int, log_file: str | None, config_path: str | None) -> None:
    """reclaim: interactive, confirmation-gated disk space reclamation.

    Without a command, opens the interactive menu.
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = Settings.load(Path(config_path) if config_path else None)
    ctx.obj["log_file"] = log_file
    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


# ── menu ─────────────────────────────────────────────────────────────────

def _print_header(engine: ReclaimEngine) -> None:
    terminal = engine.terminal
    terminal.echo()
    terminal.echo("reclaim · disk space reclamation", fg="green", bold=True)
    for usage in engine.accountant.mounts():
        color = "red" if usage.percent > 90 else "yellow" if usage.percent > 75 else "green"
        terminal.echo(
            f"  {usage.path:6s} {click.style(f'{usage.percent:3d}%', fg=color)} used, "
            f"{bytes_to_human(usage.free)} free"
        )
    terminal.separator()


def _print_menu(engine: ReclaimEngine, steps: list[CleanupStep]) -> None:
    terminal = engine.terminal
    current_group = None
    for number, step in enumerate(steps, 1):
        if step.group is not None and step.group != current_group:
            current_group = step.group
            terminal.echo(current_group.name, fg="blue", bold=True)
        root_tag = click.style(" [root]", fg="yellow") if step.requires_root else ""
        terminal.echo(f"  {number:2d}) {step.name}{root_tag}")
    terminal.echo("Utilities", fg="blue", bold=True)
    terminal.echo("   a) Run all standard steps")
    terminal.echo("   l) View action log")
    terminal.echo("   c) Clear action log")
    terminal.echo("   h) Health check")
    terminal.echo("   q) Quit")


def _show_log(engine: ReclaimEngine) -> None:
    text = engine.action_log.read_text()
    if not text:
        engine.terminal.info(f"Action log {engine.action_log.path} is empty.")
        return
    engine.terminal.pager(text)


def _clear_log(engine: ReclaimEngine) -> None:
    if not engine.action_log.exists:
        engine.terminal.info("There is no action log to clear.")
        return
    if not engine.confirm(f"Clear the action log at {engine.action_log.path}?"):
        engine.terminal.info("Action log kept.")
        return
    engine.action_log.clear()
    engine.record("Log file cleared by user")
    engine.terminal.success("Action log cleared.")


@main.command()
@click.option("--skip-health", is_flag=True, help="Do not run the startup health check")
@click.pass_context
def menu(ctx: click.Context, skip_health: bool = False) -> None:
    """Open the interactive menu."""
    engine = _build_engine(ctx)
    steps = engine.registry.ordered()
    _require_sudo(engine, steps)
    engine.record("Session started")

    if not skip_health and not engine.health_check():
        engine.record("Session ended")
        return

    while True:
        _print_header(engine)
        _print_menu(engine, steps)
        choice = engine.terminal.ask("Choose an option").strip().lower()
        match choice:
            case "q" | "quit":
                break
            case "a":
                engine.run_all()
            case "l":
                _show_log(engine)
            case "c":
                _clear_log(engine)
            case "h":
                engine.health_check()
            case _ if choice.isdigit() and 1 <= int(choice) <= len(steps):
                engine.run_step(steps[int(choice) - 1])
            case _:
                engine.terminal.warning(f"Invalid option: {choice!r}")

    engine.record("Session ended")
    engine.terminal.info("Bye.")


# ── list ─────────────────────────────────────────────────────────────────

@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool) -> None:
    """List cleanup steps and whether they can run here."""
    engine = _build_engine(ctx)
    steps = engine.registry.ordered()

    if as_json:
        data = [
            {
                "id": s.id,
                "name": s.name,
                "description": s.description,
                "category": s.category,
                "requires_root": s.requires_root,
                "risk_level": s.risk_level,
                "advanced": s.advanced,
                "unavailable_reason": engine.skip_reason(s),
            }
            for s in steps
        ]
        click.echo(json.dumps(data, indent=2))
        return

    for step in steps:
        reason = engine.skip_reason(step)
        status = click.style("available", fg="green") if reason is None else click.style(reason, fg="bright_black")
        root_tag = click.style(" [root]", fg="yellow") if step.requires_root else ""
        risk_tag = ""
        if step.risk_level == "moderate":
            risk_tag = click.style(" [moderate risk]", fg="yellow")
        elif step.risk_level == "aggressive":
            risk_tag = click.style(" [aggressive]", fg="red")
        advanced_tag = click.style(" [advanced]", fg="magenta") if step.advanced else ""
        click.echo(f"  {click.style(step.id, fg='cyan', bold=True):30s}  {step.name}{root_tag}{risk_tag}{advanced_tag}")
        click.echo(f"      {step.description}")
        click.echo(f"      {status}")


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.pass_context
def scan(ctx: click.Context) -> None:
    """Preview what every step would remove (never deletes)."""
    engine = _build_engine(ctx)
    total = 0
    for step, catalog, status in engine.preview():
        if catalog is None:
            click.echo(f"  {click.style('✗', fg='bright_black')} {step.name:30s} — {click.style(status, fg='bright_black')}")
        elif catalog:
            total += catalog.total_bytes
            click.echo(
                f"  {click.style('✓', fg='green')} {step.name:30s} — "
                f"{click.style(bytes_to_human(catalog.total_bytes), fg='green', bold=True)} ({len(catalog):,} items)"
            )
        else:
            click.echo(f"  {click.style('·', fg='bright_black')} {step.name:30s} — nothing to clean")

    click.echo(f"\nTotal reclaimable: {click.style(bytes_to_human(total), fg='green', bold=True)}\n")


# ── run ──────────────────────────────────────────────────────────────────

@main.command()
@click.argument("step_ids", nargs=-1)
@click.option("--all", "run_all", is_flag=True, help="Run every standard (non-advanced) step")
@click.option("--skip-health", is_flag=True, help="Do not run the health check first")
@click.pass_context
def run(ctx: click.Context, step_ids: tuple[str, ...], run_all: bool, skip_health: bool) -> None:
    """Run the given steps interactively, one after another."""
    if not step_ids and not run_all:
        raise click.UsageError("Give at least one STEP_ID or --all")

    engine = _build_engine(ctx)
    if run_all:
        steps = engine.registry.standard()
    else:
        steps = [s for s in (engine.registry.get(sid) for sid in step_ids) if s is not None]
    _require_sudo(engine, steps)
    if not skip_health and not engine.health_check():
        sys.exit(1)

    if run_all:
        engine.run_all()
        return

    failed = False
    for step_id in step_ids:
        report = engine.run_step(step_id)
        failed = failed or bool(report.error)
    if failed:
        sys.exit(1)


# ── health ───────────────────────────────────────────────────────────────

@main.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Run the system health check."""
    engine = _build_engine(ctx)
    report = check_health(engine.accountant)
    engine.show_health(report)
    if report.critical:
        sys.exit(1)


# ── log ──────────────────────────────────────────────────────────────────

@main.group("log")
def log_group() -> None:
    """Action log commands."""


@log_group.command("show")
@click.pass_context
def log_show(ctx: click.Context) -> None:
    """Page through the action log."""
    _show_log(_build_engine(ctx))


@log_group.command("clear")
@click.pass_context
def log_clear(ctx: click.Context) -> None:
    """Truncate the action log after confirmation."""
    _clear_log(_build_engine(ctx))


# ── config ───────────────────────────────────────────────────────────────

@main.group()
def config() -> None:
    """Settings commands."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the effective settings."""
    settings: Settings = ctx.obj["settings"]
    click.echo(f"# {settings.path}")
    click.echo(json.dumps(settings.effective(), indent=2))


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Store KEY=VALUE (VALUE is parsed as JSON when possible)."""
    settings: Settings = ctx.obj["settings"]
    settings.set(key, parse_value(value))
    click.echo(f"{key} = {json.dumps(settings.get(key))}")
