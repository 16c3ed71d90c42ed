"""zoxide directory jumping (registered by the deferred phase when present)."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from shellup.errors import ToolError
from shellup.logging import print_error

if TYPE_CHECKING:
    from shellup.context import SessionContext

ZOXIDE = "zoxide"


def z(ctx: SessionContext, args: list[str]) -> int:
    """Jump to a frecent directory matching the keywords."""
    if not args:
        target: Path | str = Path.home()
    elif args == ["-"]:
        target = ctx.host.previous_dir or Path.cwd()
    elif len(args) == 1 and Path(args[0]).expanduser().is_dir():
        target = args[0]
    else:
        try:
            target = ctx.probe.output([ZOXIDE, "query", "--exclude", str(Path.cwd()), "--", *args])
        except ToolError as e:
            print_error(f"z: {e.message}")
            return 1
    try:
        ctx.host.change_directory(target)
    except OSError as e:
        print_error(f"z: {e}")
        return 1
    return 0


def zi(ctx: SessionContext, args: list[str]) -> int:
    """Pick a directory interactively with zoxide."""
    info = ctx.probe.probe(ZOXIDE)
    if info.path is None:
        print_error("zoxide not found on PATH")
        return 1
    result = subprocess.run(
        [info.path, "query", "--interactive", "--", *args],
        stdout=subprocess.PIPE,
        text=True,
    )
    target = result.stdout.strip()
    if result.returncode != 0 or not target:
        return 0
    try:
        ctx.host.change_directory(target)
    except OSError as e:
        print_error(f"zi: {e}")
        return 1
    return 0


def install(ctx: SessionContext) -> None:
    """Define z/zi and record every directory change in zoxide's database."""

    def zoxide_add(new_dir: Path) -> None:
        ctx.probe.run([ZOXIDE, "add", "--", str(new_dir)], timeout=2.0)

    ctx.host.functions.register("z", z)
    ctx.host.functions.register("zi", zi)
    ctx.host.add_directory_hook(zoxide_add)
