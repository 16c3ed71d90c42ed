"""shellup branches command - Branch safety report and cleanup."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from shellup.cli import ShellupContext


@click.command()
@click.option(
    "--path",
    "-p",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Repository path (default: current directory)",
)
@click.option("--cleanup", is_flag=True, help="Delete branches that are safe to delete")
@click.option("--dry-run", "-n", is_flag=True, help="With --cleanup, only show what would be deleted")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def branches(ctx: ShellupContext, path: Path, cleanup: bool, dry_run: bool, as_json: bool) -> None:
    """Classify local branches by whether they can be deleted.

    A branch is safe to delete when it has no commits its upstream lacks.
    Branches without a (resolvable) upstream are never deleted.

    \b
    Examples:
        shellup branches
        shellup branches --cleanup --dry-run
    """
    from shellup.errors import GitError
    from shellup.functions.git import branch_table
    from shellup.gitutils import cleanup_branches, list_branches
    from shellup.logging import console, print_error, print_info, print_success, print_warning

    try:
        if cleanup:
            deleted = cleanup_branches(cwd=path, dry_run=dry_run)
            if as_json:
                click.echo(json.dumps({"dry_run": dry_run, "branches": deleted}))
            elif not deleted:
                print_info("No branches to clean up")
            elif dry_run:
                print_warning(f"Would delete: {', '.join(deleted)}")
            else:
                print_success(f"Deleted: {', '.join(deleted)}")
            return

        statuses = list_branches(cwd=path)
    except GitError as e:
        print_error(e.message)
        raise SystemExit(int(e.exit_code))

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "name": b.name,
                        "upstream": b.upstream,
                        "ahead": b.ahead,
                        "behind": b.behind,
                        "current": b.is_current,
                        "safety": b.safety.value,
                    }
                    for b in statuses
                ],
                indent=2,
            )
        )
        return

    console.print(branch_table(statuses))


__all__ = ["branches"]
