"""
Terminal adapters — click-based prompts and progress output.

All output goes to stderr so ``--json`` output on stdout stays clean.
"""

from __future__ import annotations

import click

from appctl.adapters.base import Progress, Prompter
from appctl.core.errors import ConfirmationError


class ClickPrompter(Prompter):
    """Prompts via ``click.confirm`` / ``click.prompt``."""

    def confirm(self, message: str, help: str = "", final_message: str | None = None) -> bool:
        if help:
            click.secho(f"   {help}", fg="bright_black", err=True)
        try:
            answer = click.confirm(message, default=False, err=True)
        except (click.Abort, EOFError) as e:
            raise ConfirmationError(f"prompt interrupted: {message}") from e
        if answer and final_message:
            click.secho(f"   → {final_message}", err=True)
        return answer

    def select(self, message: str, help: str, options: list[str]) -> str:
        if not options:
            raise ConfirmationError("no options to select from")
        if help:
            click.secho(f"   {help}", fg="bright_black", err=True)
        for idx, option in enumerate(options, start=1):
            click.echo(f"   {idx}. {option}", err=True)
        try:
            choice = click.prompt(
                message,
                type=click.IntRange(1, len(options)),
                err=True,
            )
        except (click.Abort, EOFError) as e:
            raise ConfirmationError(f"prompt interrupted: {message}") from e
        return options[choice - 1]


class Spinner(Progress):
    """Line-based progress: one line on start, one on stop."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def start(self, label: str) -> None:
        if not self.quiet:
            click.secho(f"⏳ {label}", fg="cyan", err=True)

    def stop(self, label: str) -> None:
        if label.startswith("✗"):
            click.secho(label, fg="red", err=True)
        elif not self.quiet:
            click.secho(label, fg="green", err=True)
