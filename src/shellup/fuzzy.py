"""Selection through the fzf fuzzy finder."""

from __future__ import annotations

import subprocess
from typing import Iterable

from shellup.errors import ToolError, ToolNotFoundError
from shellup.tools import ToolProbe

FZF = "fzf"

# fzf exit codes: 1 = no match, 130 = interrupted (Esc / Ctrl-C)
_CANCELLED = (1, 130)


def pick(
    candidates: Iterable[str],
    probe: ToolProbe,
    prompt: str | None = None,
    query: str | None = None,
) -> str | None:
    """Let the user choose one line with fzf.

    Candidate lines are written to fzf's stdin; the selected line is read back
    from its stdout. fzf draws its UI on the terminal itself, so stderr is left
    attached.

    Args:
        candidates: Lines to choose from
        probe: Session tool probe
        prompt: Optional fzf prompt label
        query: Optional initial query

    Returns:
        The chosen line, or None if the user cancelled or there was nothing
        to choose from

    Raises:
        ToolNotFoundError: If fzf is not on PATH
        ToolError: If fzf fails for any other reason
    """
    items = [c for c in candidates if c]
    if not items:
        return None

    info = probe.probe(FZF)
    if info.path is None:
        raise ToolNotFoundError(FZF)

    args = [info.path, "--height=40%", "--reverse"]
    if prompt:
        args.append(f"--prompt={prompt}> ")
    if query:
        args.append(f"--query={query}")

    try:
        result = subprocess.run(
            args,
            input="\n".join(items),
            stdout=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        raise ToolError(f"Failed to run fzf: {e}", tool=FZF) from e

    if result.returncode in _CANCELLED:
        return None
    if result.returncode != 0:
        raise ToolError(f"fzf exited with {result.returncode}", tool=FZF, returncode=result.returncode)

    choice = result.stdout.strip()
    return choice or None
