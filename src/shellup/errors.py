"""Error handling framework for shellup."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """shellup exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1  # Bad config file or env override (user fixable)
    PROFILE_ERROR = 2  # Profile could not be loaded
    FATAL_ERROR = 3  # Unexpected crash
    GIT_ERROR = 4  # Git operation failed
    TOOL_ERROR = 5  # External tool missing or failed


class ShellupError(Exception):
    """Base exception for shellup errors."""

    exit_code: ExitCode = ExitCode.FATAL_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "exit_code": self.exit_code,
            **self.context,
        }


class ConfigError(ShellupError):
    """Configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class ProfileError(ShellupError):
    """Synchronous-phase failure: the profile cannot finish loading."""

    exit_code = ExitCode.PROFILE_ERROR

    def __init__(self, message: str, path: str | None = None, **context: Any) -> None:
        super().__init__(message, path=path, **context)
        self.path = path


class ToolError(ShellupError):
    """An external tool failed (non-zero exit, timeout, bad output)."""

    exit_code = ExitCode.TOOL_ERROR

    def __init__(self, message: str, tool: str, returncode: int | None = None, **context: Any):
        super().__init__(message, tool=tool, returncode=returncode, **context)
        self.tool = tool
        self.returncode = returncode


class ToolNotFoundError(ToolError):
    """An optional external tool is not on PATH."""

    def __init__(self, tool: str):
        super().__init__(f"{tool} not found on PATH", tool=tool)


class GitError(ToolError):
    """Error during git operations."""

    exit_code = ExitCode.GIT_ERROR

    def __init__(self, message: str, returncode: int | None = None, **context: Any):
        super().__init__(message, tool="git", returncode=returncode, **context)
