"""shellup CLI - interactive shell and profile tooling."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from shellup import __version__
from shellup.commands.lazy import LazyGroup
from shellup.scheduler.models import StartupClock

if TYPE_CHECKING:
    from shellup.config import ShellupConfig
    from shellup.logging import Verbosity

# Started at import time: the closest point to process entry we control
PROCESS_CLOCK = StartupClock()


class ShellupContext:
    """Shared context for CLI commands."""

    def __init__(self) -> None:
        self.config: ShellupConfig | None = None
        self.config_path: Path | None = None
        self.verbosity: Verbosity = "normal"
        self.debug: bool = False
        self.clock: StartupClock = PROCESS_CLOCK


pass_context = click.make_pass_decorator(ShellupContext, ensure=True)


# Define lazy subcommands: name -> (module_path, attribute_name)
LAZY_COMMANDS: dict[str, tuple[str, str]] = {
    "run": ("shellup.commands.run", "run"),
    "tools": ("shellup.commands.tools", "tools"),
    "branches": ("shellup.commands.branches", "branches"),
    "config": ("shellup.commands.config_cmd", "config"),
    "check-history": ("shellup.commands.history", "check_history"),
}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS, invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help="Show deferred-phase diagnostics")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output")
@click.option("--debug", is_flag=True, help="Show full tracebacks on errors")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.version_option(version=__version__, prog_name="shellup")
@pass_context
@click.pass_context
def cli(
    click_ctx: click.Context,
    ctx: ShellupContext,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config: Path | None,
) -> None:
    """shellup - a fast-starting Python shell profile.

    \b
    Commands:
      run            Start the interactive shell (default)
      tools          Show which optional external tools were found
      branches       Classify local git branches; clean up safe ones
      config         Print the default configuration file
      check-history  Test a line against the history redaction filter

    Use 'shellup <command> --help' for details.
    """
    # Lazy import for faster startup
    from shellup.config import ShellupConfig
    from shellup.errors import ConfigError
    from shellup.logging import print_error, setup_logging

    ctx.debug = debug
    ctx.config_path = config

    try:
        ctx.config = ShellupConfig.load(config)
    except ConfigError as e:
        if not quiet:
            print_error(f"Failed to load configuration: {e.message}")
        ctx.config = ShellupConfig()

    if quiet:
        ctx.verbosity = "quiet"
    elif verbose or ctx.config.verbose:
        ctx.verbosity = "verbose"
    else:
        ctx.verbosity = "normal"

    setup_logging(ctx.verbosity)

    if click_ctx.invoked_subcommand is None:
        run_cmd = click_ctx.command.get_command(click_ctx, "run")  # type: ignore[attr-defined]
        click_ctx.invoke(run_cmd)


def main() -> None:
    """Entry point for the CLI."""
    import sys

    debug_mode = "--debug" in sys.argv

    try:
        cli()
    except click.ClickException:
        # Let Click handle its own exceptions
        raise
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        from shellup.errors import ExitCode, ProfileError, ShellupError
        from shellup.logging import print_error, print_info

        if isinstance(e, ProfileError):
            print_error(f"Profile not loaded: {e.message}")
            if e.path:
                print_info(f"  path: {e.path}")
            print_info("")
            print_info("Set SHELLUP_PROFILE to the profile location, or fix the helper file.")
        elif isinstance(e, ShellupError):
            print_error(e.message)
        else:
            print_error(f"Error: {e}")

        if debug_mode:
            print_info("")
            print_info("Full traceback (--debug mode):")
            import traceback

            traceback.print_exc()
        else:
            print_info("")
            print_info("Run with --debug for full traceback.")

        code = e.exit_code if isinstance(e, ShellupError) else ExitCode.FATAL_ERROR
        sys.exit(int(code))


if __name__ == "__main__":
    main()
