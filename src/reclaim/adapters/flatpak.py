"""Flatpak adapter."""

from __future__ import annotations

import logging
import re

from reclaim.adapters.commands import output_lines, run

log = logging.getLogger(__name__)

_ROW_RE = re.compile(r"^\s*\d+\.\s+(\S+)\s+(\S+)")


def parse_unused(output: str) -> list[str]:
    """Refs (``id//branch``) from the numbered table of a dry-run uninstall."""
    refs = []
    for line in output.splitlines():
        match = _ROW_RE.match(line)
        if match:
            app_id, branch = match.groups()
            refs.append(f"{app_id}//{branch}")
    return refs


def unused_refs() -> list[str]:
    lines = output_lines(["flatpak", "uninstall", "--unused", "--dry-run", "--noninteractive"])
    return parse_unused("\n".join(lines))


def uninstall(ref: str) -> None:
    run(["flatpak", "uninstall", "-y", "--noninteractive", ref], check=True)
