"""Git convenience functions: fuzzy branch switch and branch cleanup."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from shellup.errors import GitError, ToolError
from shellup.fuzzy import pick
from shellup.gitutils import (
    BranchSafety,
    BranchStatus,
    branch_names,
    cleanup_branches,
    list_branches,
    supports_switch,
    switch_branch,
)
from shellup.logging import console, print_error, print_info, print_success, print_warning

if TYPE_CHECKING:
    from shellup.context import SessionContext
    from shellup.functions import FunctionRegistry

_SAFETY_STYLE = {
    BranchSafety.SAFE_TO_DELETE: "green",
    BranchSafety.NOT_SAFE: "red",
    BranchSafety.INDETERMINATE: "yellow",
}


def branch_table(branches: list[BranchStatus]) -> Table:
    """Build a table of branches with their delete-safety classification."""
    table = Table(title="Local Branches")
    table.add_column("Branch", style="cyan")
    table.add_column("Upstream")
    table.add_column("Ahead", justify="right")
    table.add_column("Behind", justify="right")
    table.add_column("Safety")

    for b in branches:
        name = f"* {b.name}" if b.is_current else b.name
        upstream = b.upstream or "-"
        if b.upstream_gone:
            upstream = f"{upstream} (gone)"
        safety = b.safety
        table.add_row(
            name,
            upstream,
            "-" if b.ahead is None else str(b.ahead),
            "-" if b.behind is None else str(b.behind),
            f"[{_SAFETY_STYLE[safety]}]{safety.value}[/]",
        )
    return table


def git_switch(ctx: SessionContext, args: list[str]) -> int:
    """Switch branch; pick one with fzf when no name is given."""
    if not ctx.probe.has("git"):
        print_error("git not found on PATH")
        return 1
    try:
        if args:
            target: str | None = args[0]
        else:
            target = pick(branch_names(include_remote=True), ctx.probe, prompt="branch")
            if target is None:
                return 0
        switch_branch(target, use_switch=supports_switch())
    except ToolError as e:
        print_error(e.message)
        return 1
    return 0


def git_branches(ctx: SessionContext, args: list[str]) -> int:
    """Show local branches with ahead/behind counts."""
    try:
        branches = list_branches()
    except GitError as e:
        print_error(e.message)
        return 1
    console.print(branch_table(branches))
    return 0


def git_cleanup(ctx: SessionContext, args: list[str]) -> int:
    """Delete local branches with no unpushed commits (--dry-run to preview)."""
    dry_run = "--dry-run" in args or "-n" in args
    try:
        deleted = cleanup_branches(dry_run=dry_run)
    except GitError as e:
        print_error(e.message)
        return 1

    if not deleted:
        print_info("No branches to clean up")
    elif dry_run:
        print_warning(f"Would delete: {', '.join(deleted)}")
    else:
        print_success(f"Deleted: {', '.join(deleted)}")
    return 0


def register(registry: FunctionRegistry) -> None:
    registry.register("gsw", git_switch)
    registry.register("gbr", git_branches)
    registry.register("gclean", git_cleanup)
