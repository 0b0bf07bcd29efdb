"""Coloured line-oriented terminal I/O."""

from __future__ import annotations

from enum import Enum

import click


class Severity(Enum):
    INFO = "blue"
    SUCCESS = "green"
    WARNING = "yellow"
    ERROR = "red"

    @property
    def color(self) -> str:
        return self.value


class Terminal:
    """All prompts and output of an interactive session go through here."""

    def echo(self, text: str = "", *, fg: str | None = None, bold: bool = False) -> None:
        click.echo(click.style(text, fg=fg, bold=bold) if fg or bold else text)

    def ask(self, prompt: str, default: str = "") -> str:
        return click.prompt(prompt, default=default, show_default=False)

    def notify(self, severity: Severity, message: str) -> None:
        self.echo(message, fg=severity.color)

    def info(self, message: str) -> None:
        self.notify(Severity.INFO, message)

    def success(self, message: str) -> None:
        self.notify(Severity.SUCCESS, message)

    def warning(self, message: str) -> None:
        self.notify(Severity.WARNING, message)

    def error(self, message: str) -> None:
        self.notify(Severity.ERROR, message)

    def heading(self, title: str) -> None:
        self.echo()
        self.echo(title, fg="green", bold=True)
        self.separator()

    def separator(self) -> None:
        self.echo("─" * 50, fg="bright_black")

    def pager(self, text: str) -> None:
        click.echo_via_pager(text)
