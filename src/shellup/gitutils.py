"""Git utilities for branch switching and local branch cleanup."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from shellup.errors import GitError

logger = logging.getLogger(__name__)

# Branches cleanup never deletes, even when fully merged upstream
PROTECTED_BRANCHES = frozenset({"main", "master", "develop"})

# `git <cmd> -h` exits 129 after printing usage when the subcommand exists
_USAGE_EXIT = 129

_FIELD_SEP = "\x1f"


class BranchSafety(Enum):
    """Whether a local branch can be deleted without losing commits."""

    SAFE_TO_DELETE = "safe"
    NOT_SAFE = "not_safe"
    INDETERMINATE = "indeterminate"  # No upstream, or upstream unresolvable

    @property
    def is_safe(self) -> bool:
        # Indeterminate is treated as unsafe
        return self is BranchSafety.SAFE_TO_DELETE


def classify_branch(ahead: int, behind: int, has_upstream: bool = True) -> BranchSafety:
    """Classify a branch from its ahead/behind counts against its upstream.

    ``behind`` never affects the outcome: a branch that is only behind has no
    commits of its own to lose.
    """
    if not has_upstream:
        return BranchSafety.INDETERMINATE
    if ahead == 0:
        return BranchSafety.SAFE_TO_DELETE
    return BranchSafety.NOT_SAFE


@dataclass
class BranchStatus:
    """A local branch and its relationship to its upstream."""

    name: str
    upstream: str | None = None
    ahead: int | None = None
    behind: int | None = None
    is_current: bool = False
    upstream_gone: bool = False

    @property
    def safety(self) -> BranchSafety:
        if self.upstream is None or self.upstream_gone or self.ahead is None:
            return BranchSafety.INDETERMINATE
        return classify_branch(self.ahead, self.behind or 0)

    @property
    def is_protected(self) -> bool:
        return self.name in PROTECTED_BRANCHES


def run_git(args: list[str], cwd: Path | None = None, timeout: float | None = 30.0) -> str:
    """Run a git command and return output."""
    try:
        result = subprocess.run(
            ["git"] + args,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
        )
        return result.stdout.strip()
    except subprocess.CalledProcessError as e:
        raise GitError(
            f"Git command failed: git {' '.join(args)}\n{e.stderr}",
            returncode=e.returncode,
        )
    except subprocess.TimeoutExpired:
        raise GitError(f"Git command timed out: git {' '.join(args)}")
    except FileNotFoundError:
        raise GitError("git not found on PATH")


def ahead_behind(branch: str, upstream: str, cwd: Path | None = None) -> tuple[int, int]:
    """Count commits unique to ``branch`` (ahead) and to ``upstream`` (behind)."""
    out = run_git(["rev-list", "--left-right", "--count", f"{branch}...{upstream}"], cwd=cwd)
    left, right = out.split()
    return int(left), int(right)


def list_branches(cwd: Path | None = None) -> list[BranchStatus]:
    """List local branches with upstream tracking information.

    Ahead/behind counts are left as None when the branch has no upstream or
    the upstream ref cannot be resolved.
    """
    fmt = _FIELD_SEP.join(["%(refname:short)", "%(upstream:short)", "%(upstream:track)", "%(HEAD)"])
    out = run_git(["for-each-ref", f"--format={fmt}", "refs/heads"], cwd=cwd)

    branches: list[BranchStatus] = []
    for line in out.splitlines():
        if not line.strip():
            continue
        name, upstream, track, head = (line.split(_FIELD_SEP) + ["", "", ""])[:4]
        status = BranchStatus(
            name=name,
            upstream=upstream or None,
            is_current=head.strip() == "*",
            upstream_gone="gone" in track,
        )
        if status.upstream and not status.upstream_gone:
            try:
                status.ahead, status.behind = ahead_behind(name, status.upstream, cwd=cwd)
            except (GitError, ValueError) as e:
                logger.debug(f"Cannot compare {name} with {status.upstream}: {e}")
        branches.append(status)
    return branches


def deletable_branches(branches: list[BranchStatus]) -> list[BranchStatus]:
    """Filter to branches cleanup may delete."""
    return [
        b for b in branches if b.safety.is_safe and not b.is_current and not b.is_protected
    ]


def cleanup_branches(cwd: Path | None = None, dry_run: bool = False) -> list[str]:
    """Delete local branches that have nothing unpushed.

    Args:
        cwd: Directory inside the repository
        dry_run: Report without deleting

    Returns:
        Names of the branches deleted (or that would be deleted)
    """
    try:
        run_git(["fetch", "--prune", "--quiet"], cwd=cwd, timeout=60.0)
    except GitError as e:
        # Offline or no remote: classify against the refs already present
        logger.debug(f"git fetch --prune failed: {e}")
    targets = deletable_branches(list_branches(cwd=cwd))

    deleted: list[str] = []
    for branch in targets:
        if not dry_run:
            # -D: the branch is verified to be contained in its upstream,
            # which -d would not accept unless it is also merged into HEAD
            run_git(["branch", "-D", branch.name], cwd=cwd)
            logger.info(f"Deleted {branch.name}")
        deleted.append(branch.name)
    return deleted


def supports_switch(cwd: Path | None = None) -> bool:
    """Probe whether this git has the ``switch`` subcommand.

    Uses the exit code of ``git switch -h``: 129 (usage) or 0 means the
    subcommand exists; an unknown command exits 1.
    """
    try:
        result = subprocess.run(
            ["git", "switch", "-h"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=5.0,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode in (0, _USAGE_EXIT)


def switch_branch(name: str, cwd: Path | None = None, use_switch: bool | None = None) -> None:
    """Check out a branch, preferring ``git switch`` when available."""
    if use_switch is None:
        use_switch = supports_switch(cwd)
    if use_switch:
        run_git(["switch", name], cwd=cwd)
    else:
        run_git(["checkout", name], cwd=cwd)


def branch_names(cwd: Path | None = None, include_remote: bool = False) -> list[str]:
    """List branch names for pickers (remote branches without the remote prefix)."""
    names = run_git(["for-each-ref", "--format=%(refname:short)", "refs/heads"], cwd=cwd).splitlines()
    if include_remote:
        # origin/feature -> feature; `git switch feature` creates the tracking branch
        out = run_git(["for-each-ref", "--format=%(refname:lstrip=3)", "refs/remotes"], cwd=cwd)
        names.extend(n for n in out.splitlines() if n != "HEAD")
    return list(dict.fromkeys(n.strip() for n in names if n.strip()))
