"""Shell session bootstrap: wire the host, the scheduler and the built-in tasks."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from shellup.config import ShellupConfig
from shellup.host.ptk import PromptToolkitHost
from shellup.scheduler import Scheduler, StartupClock, register_builtin_tasks


def create_session(
    config: ShellupConfig,
    profile_entry: Path | None = None,
    interactive: bool | None = None,
    clock: StartupClock | None = None,
) -> tuple[PromptToolkitHost, Scheduler]:
    """Build a host and a scheduler with the built-in deferred tasks queued."""
    host = PromptToolkitHost(config.history.file, interactive=interactive)
    scheduler = Scheduler(host, config, clock=clock, profile_entry=profile_entry)
    register_builtin_tasks(scheduler)
    return host, scheduler


def start_shell(
    config: ShellupConfig,
    profile_entry: Path | None = None,
    interactive: bool | None = None,
    clock: StartupClock | None = None,
    script: TextIO | None = None,
) -> int:
    """Boot and run a shell session.

    The synchronous phase runs first and its errors propagate. In an
    interactive session the deferred phase is scheduled on the first idle
    point; otherwise commands are read from ``script`` (default: stdin) with
    no prompt and no deferred work.

    Returns:
        Exit status of the last command
    """
    host, scheduler = create_session(config, profile_entry, interactive, clock)
    scheduler.run_synchronous_phase()

    if scheduler.enter_interactive_mode():
        return host.run()
    return host.run_lines(script if script is not None else sys.stdin)
