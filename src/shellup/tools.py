"""Capability detection and process calls for external tools.

Every optional feature asks a single session-wide ``ToolProbe`` whether its
executable is present. Lookups are memoized, so PATH is searched at most once
per tool per session.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from shellup.errors import ToolError, ToolNotFoundError

logger = logging.getLogger(__name__)

# Default timeout for short informational calls (version checks, listings)
DEFAULT_TIMEOUT = 5.0


class Capability(Enum):
    """Whether an external tool is available in this session."""

    PRESENT = "present"
    ABSENT = "absent"

    def __bool__(self) -> bool:
        return self is Capability.PRESENT


@dataclass(frozen=True)
class ToolInfo:
    """Result of probing PATH for one executable."""

    name: str
    path: str | None

    @property
    def capability(self) -> Capability:
        return Capability.PRESENT if self.path else Capability.ABSENT


class ToolProbe:
    """Memoized PATH lookups plus subprocess helpers.

    One instance is owned by the scheduler and shared by every leaf utility,
    completer, and deferred task in the session.
    """

    def __init__(self) -> None:
        self._cache: dict[str, ToolInfo] = {}

    def probe(self, name: str) -> ToolInfo:
        """Look up an executable, caching the answer for the session."""
        info = self._cache.get(name)
        if info is None:
            info = ToolInfo(name=name, path=shutil.which(name))
            self._cache[name] = info
            logger.debug(f"Probed {name}: {info.capability.value}")
        return info

    def capability(self, name: str) -> Capability:
        return self.probe(name).capability

    def has(self, name: str) -> bool:
        """True if the executable is resolvable on PATH."""
        return self.probe(name).path is not None

    def forget(self, name: str | None = None) -> None:
        """Drop cached lookups (after an auto-install, for example)."""
        if name is None:
            self._cache.clear()
        else:
            self._cache.pop(name, None)

    def known(self) -> list[ToolInfo]:
        """All tools probed so far, sorted by name."""
        return sorted(self._cache.values(), key=lambda info: info.name)

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        input: str | None = None,
        check: bool = True,
        env: dict[str, str] | None = None,
        cwd: str | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run an external tool and capture its output.

        Args:
            args: Command and arguments; ``args[0]`` is probed first
            timeout: Seconds before the call is abandoned
            input: Text fed to stdin
            check: Raise on non-zero exit
            env: Full environment for the child (default: inherit)
            cwd: Working directory for the child

        Returns:
            The completed process with text stdout/stderr

        Raises:
            ToolNotFoundError: If the executable is not on PATH
            ToolError: On timeout, or on non-zero exit when ``check`` is set
        """
        name = args[0]
        info = self.probe(name)
        if info.path is None:
            raise ToolNotFoundError(name)

        try:
            result = subprocess.run(
                [info.path, *args[1:]],
                capture_output=True,
                text=True,
                input=input,
                timeout=timeout,
                env=env,
                cwd=cwd,
            )
        except subprocess.TimeoutExpired as e:
            raise ToolError(f"{name} timed out after {timeout}s", tool=name) from e
        except OSError as e:
            raise ToolError(f"Failed to run {name}: {e}", tool=name) from e

        if check and result.returncode != 0:
            raise ToolError(
                f"{name} exited with {result.returncode}: {result.stderr.strip()}",
                tool=name,
                returncode=result.returncode,
            )
        return result

    def output(self, args: Sequence[str], **kwargs: object) -> str:
        """Run a tool and return its stripped stdout."""
        return self.run(args, **kwargs).stdout.strip()  # type: ignore[arg-type]

    def lines(self, args: Sequence[str], **kwargs: object) -> list[str]:
        """Run a tool and return its non-empty stdout lines."""
        out = self.output(args, **kwargs)
        return [line.strip() for line in out.splitlines() if line.strip()]


__all__ = ["Capability", "ToolInfo", "ToolProbe", "DEFAULT_TIMEOUT"]
