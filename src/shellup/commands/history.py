"""shellup check-history command - Test the history redaction filter."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from shellup.cli import ShellupContext


@click.command("check-history")
@click.argument("line")
@click.pass_obj
def check_history(ctx: ShellupContext, line: str) -> None:
    """Show whether LINE would be saved to history.

    Exits 0 when the line is recorded and 1 when it is redacted.
    """
    from shellup.config import ShellupConfig
    from shellup.history import should_record_history

    config = ctx.config or ShellupConfig()
    if should_record_history(line, config.history.redact_patterns):
        click.echo("recorded")
        return
    click.echo("redacted")
    raise SystemExit(1)


__all__ = ["check_history"]
