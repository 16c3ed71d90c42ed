"""shellup tools command - Report optional external tools."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from shellup.cli import ShellupContext

# Tool -> feature it enables
OPTIONAL_TOOLS: dict[str, str] = {
    "git": "branch switch and cleanup (gsw, gbr, gclean)",
    "fzf": "interactive pickers",
    "oh-my-posh": "themed prompt",
    "starship": "themed prompt",
    "kubectl": "kctx/kns and completion",
    "docker": "dps/dsh/dprune and completion",
    "az": "Azure CLI completion",
    "dotnet": "dotnet completion",
    "zoxide": "z/zi directory jumping",
    "mise": "per-directory tool versions",
}


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def tools(ctx: ShellupContext, as_json: bool) -> None:
    """Show which optional external tools are on PATH.

    Missing tools only disable the features that need them.
    """
    from rich.table import Table

    from shellup.logging import console
    from shellup.tools import ToolProbe

    probe = ToolProbe()
    status = {name: probe.capability(name) for name in OPTIONAL_TOOLS}
    infos = probe.known()

    if as_json:
        click.echo(
            json.dumps(
                {
                    info.name: {
                        "status": status[info.name].value,
                        "path": info.path,
                        "feature": OPTIONAL_TOOLS[info.name],
                    }
                    for info in infos
                },
                indent=2,
            )
        )
        return

    table = Table(title="Optional Tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Status")
    table.add_column("Enables")
    table.add_column("Path", style="dim")

    for info in infos:
        color = "green" if status[info.name] else "yellow"
        label = f"[{color}]{status[info.name].value}[/{color}]"
        table.add_row(info.name, label, OPTIONAL_TOOLS[info.name], info.path or "-")

    console.print(table)


__all__ = ["tools"]
