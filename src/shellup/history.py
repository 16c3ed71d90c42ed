"""Command history with a secret-redaction deny-list.

This is a convenience filter, not a security boundary: it only keeps the most
obvious credential-bearing lines out of the persistent history file.
"""

from __future__ import annotations

from typing import Iterable

from prompt_toolkit.history import FileHistory

DEFAULT_REDACTION_PATTERNS: tuple[str, ...] = (
    "password",
    "secret",
    "token",
    "apikey",
    "connectionstring",
)


def should_record_history(
    line: str,
    patterns: Iterable[str] = DEFAULT_REDACTION_PATTERNS,
) -> bool:
    """Decide whether a command line may be saved to history.

    Returns False iff any pattern occurs in the line as a case-insensitive
    substring.

    Examples:
        should_record_history("git status")                      # True
        should_record_history("export GITHUB_TOKEN=abc")         # False
    """
    lowered = line.casefold()
    return not any(p.casefold() in lowered for p in patterns if p)


class RedactingFileHistory(FileHistory):
    """prompt_toolkit file history that drops redacted lines.

    Filters with the default deny-list from the first line on; the
    line-editing startup task may replace it with the configured one.
    """

    def __init__(
        self,
        filename: str,
        patterns: Iterable[str] = DEFAULT_REDACTION_PATTERNS,
    ) -> None:
        super().__init__(filename)
        self.patterns: tuple[str, ...] = tuple(patterns)

    def set_patterns(self, patterns: Iterable[str]) -> None:
        self.patterns = tuple(patterns)

    def append_string(self, string: str) -> None:
        # Rejected lines are kept out of both the session and the file
        if not should_record_history(string, self.patterns):
            return
        super().append_string(string)
