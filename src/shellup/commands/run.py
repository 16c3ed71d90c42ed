"""shellup run command - Start the shell."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from shellup.cli import ShellupContext


@click.command()
@click.option(
    "--profile",
    "profile_entry",
    type=click.Path(path_type=Path),
    default=None,
    help="Profile entry (file or directory, symlinks are followed)",
)
@click.option(
    "--interactive/--no-interactive",
    default=None,
    help="Force interactive mode on or off (default: detect a terminal)",
)
@click.option(
    "-c",
    "--command",
    "command",
    default=None,
    help="Run a single command without starting the interactive loop",
)
@click.pass_obj
def run(
    ctx: ShellupContext,
    profile_entry: Path | None,
    interactive: bool | None,
    command: str | None,
) -> None:
    """Start the shell.

    The profile loads in two phases: everything needed for the first prompt
    runs immediately; line editing, the prompt theme, completions and tool
    integrations load once the prompt is on screen.

    \b
    Examples:
        shellup run
        shellup run --profile ~/.config/shellup/profile.py
        echo 'gbr' | shellup run
        shellup run -c 'kctx staging'
    """
    import io

    from shellup.config import ShellupConfig
    from shellup.session import start_shell

    config = ctx.config or ShellupConfig()

    if command is not None:
        status = start_shell(
            config,
            profile_entry=profile_entry,
            interactive=False,
            clock=ctx.clock,
            script=io.StringIO(command),
        )
    else:
        status = start_shell(
            config,
            profile_entry=profile_entry,
            interactive=interactive,
            clock=ctx.clock,
        )
    sys.exit(status)


__all__ = ["run"]
