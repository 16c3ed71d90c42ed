"""Directory navigation and profile management functions.

These are defined during the synchronous phase so they work before any
deferred startup work has finished.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from shellup.logging import print_error
from shellup.paths import get_config_path

if TYPE_CHECKING:
    from shellup.context import SessionContext
    from shellup.functions import FunctionRegistry


def _go(ctx: SessionContext, target: Path | str) -> int:
    try:
        ctx.host.change_directory(target)
    except OSError as e:
        print_error(f"cd: {e.strerror or e}: {target}")
        return 1
    return 0


def up_one(ctx: SessionContext, args: list[str]) -> int:
    """Go up one directory."""
    return _go(ctx, "..")


def up_two(ctx: SessionContext, args: list[str]) -> int:
    """Go up two directories."""
    return _go(ctx, Path("..") / "..")


def up_three(ctx: SessionContext, args: list[str]) -> int:
    """Go up three directories."""
    return _go(ctx, Path("..") / ".." / "..")


def home(ctx: SessionContext, args: list[str]) -> int:
    """Go to the home directory."""
    return _go(ctx, Path.home())


def back(ctx: SessionContext, args: list[str]) -> int:
    """Go back to the previous directory."""
    if ctx.host.previous_dir is None:
        print_error("cd: no previous directory")
        return 1
    return _go(ctx, ctx.host.previous_dir)


def reload_profile(ctx: SessionContext, args: list[str]) -> int:
    """Restart the shell with a freshly loaded profile."""
    sys.stdout.flush()
    sys.stderr.flush()
    # Replaces the current process; only returns on failure
    try:
        os.execv(sys.executable, [sys.executable, "-m", "shellup", *sys.argv[1:]])
    except OSError as e:
        print_error(f"reload-profile: {e}")
    return 1


def profile_files(ctx: SessionContext) -> list[Path]:
    """Files edit-profile opens: the profile entry (if a file) and the config."""
    files: list[Path] = []
    if ctx.profile_entry.is_file():
        files.append(ctx.profile_entry)
    files.append(get_config_path())
    return files


def edit_profile(ctx: SessionContext, args: list[str]) -> int:
    """Open the profile and config in $EDITOR."""
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vi"
    files = [Path(a) for a in args] or profile_files(ctx)
    for path in files:
        path.parent.mkdir(parents=True, exist_ok=True)
    try:
        return subprocess.call([*shlex.split(editor), *map(str, files)])
    except OSError as e:
        print_error(f"edit-profile: cannot start {editor}: {e}")
        return 1


def register(registry: FunctionRegistry) -> None:
    registry.register("..", up_one)
    registry.register("...", up_two)
    registry.register("....", up_three)
    registry.register("~", home)
    registry.register("-", back)
    registry.register("reload-profile", reload_profile)
    registry.register("edit-profile", edit_profile)


# Names guaranteed to exist once the synchronous phase has run
NAVIGATION_FUNCTIONS = ("..", "...", "....", "~", "-", "reload-profile", "edit-profile")
