"""shellup config command - Show or write configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from shellup.cli import ShellupContext


@click.command()
@click.option("--write", is_flag=True, help="Write the default file to ~/.config/shellup/config.toml")
@click.option("--force", is_flag=True, help="With --write, overwrite an existing file")
@click.option("--effective", is_flag=True, help="Print the loaded configuration as JSON")
@click.pass_obj
def config(ctx: ShellupContext, write: bool, force: bool, effective: bool) -> None:
    """Print the default configuration file.

    \b
    Examples:
        shellup config > ~/.config/shellup/config.toml
        shellup config --write
        SHELLUP_PROMPT__ENGINE=starship shellup config --effective
    """
    from shellup.config import ShellupConfig, get_default_config_toml
    from shellup.logging import print_error, print_success
    from shellup.paths import get_config_path

    if effective:
        loaded = ctx.config or ShellupConfig()
        click.echo(loaded.model_dump_json(indent=2))
        return

    content = get_default_config_toml()
    if not write:
        click.echo(content, nl=False)
        return

    target = get_config_path()
    if target.exists() and not force:
        print_error(f"{target} already exists (use --force to overwrite)")
        raise SystemExit(1)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)
    print_success(f"Wrote {target}")


__all__ = ["config"]
