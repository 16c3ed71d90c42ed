"""prompt_toolkit completers backed by external CLIs.

Every external completer refuses to run for a current word shorter than
``min_chars`` and bounds the child process with a timeout, so a slow or broken
tool can never stall typing.
"""

from __future__ import annotations

import logging
import os
import shlex
import tempfile
from abc import abstractmethod
from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import CompleteEvent, Completer, Completion, PathCompleter
from prompt_toolkit.document import Document

from shellup.errors import ToolError
from shellup.functions import FunctionRegistry
from shellup.tools import ToolProbe

logger = logging.getLogger(__name__)


def split_command_line(line: str) -> list[str]:
    """Split a partial command line into words.

    A trailing space yields an empty final word (the word being started).
    Unbalanced quotes fall back to whitespace splitting.
    """
    try:
        words = shlex.split(line)
    except ValueError:
        words = line.split()
    if not line or line[-1].isspace():
        words.append("")
    return words


class ToolCompleter(Completer):
    """Base class: guards, timeout, and error absorption for one tool."""

    tool: str = ""
    match_prefix = True

    def __init__(self, probe: ToolProbe, min_chars: int = 1, timeout: float = 1.5) -> None:
        self.probe = probe
        self.min_chars = max(1, min_chars)
        self.timeout = timeout

    @abstractmethod
    def candidates(self, line: str, point: int) -> list[tuple[str, str]]:
        """Return (completion, description) pairs for ``line`` at ``point``."""

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        word = document.get_word_before_cursor(WORD=True)
        if len(word) < self.min_chars:
            return

        line = document.text_before_cursor
        try:
            results = self.candidates(line, len(line))
        except ToolError as e:
            logger.debug(f"{self.tool} completion failed: {e}")
            return

        for text, meta in results:
            if not self.match_prefix or text.startswith(word):
                yield Completion(text, start_position=-len(word), display_meta=meta or None)


class DotnetCompleter(ToolCompleter):
    """``dotnet complete --position N "<line>"``."""

    tool = "dotnet"

    def candidates(self, line: str, point: int) -> list[tuple[str, str]]:
        out = self.probe.lines(
            [self.tool, "complete", "--position", str(point), line],
            timeout=self.timeout,
        )
        return [(c, "") for c in out]


class ArgcompleteCompleter(ToolCompleter):
    """argcomplete protocol (Azure CLI and other argparse-based tools).

    The tool is run with ``_ARGCOMPLETE=1`` and writes candidates to the file
    named by ``_ARGCOMPLETE_STDOUT_FILENAME``, one per line.
    """

    def __init__(
        self, probe: ToolProbe, tool: str = "az", min_chars: int = 1, timeout: float = 1.5
    ) -> None:
        super().__init__(probe, min_chars=min_chars, timeout=timeout)
        self.tool = tool

    def candidates(self, line: str, point: int) -> list[tuple[str, str]]:
        fd, out_path = tempfile.mkstemp(prefix="shellup-argcomplete-")
        os.close(fd)
        env = {
            **os.environ,
            "ARGCOMPLETE_USE_TEMPFILES": "1",
            "_ARGCOMPLETE_STDOUT_FILENAME": out_path,
            "COMP_LINE": line,
            "COMP_POINT": str(point),
            "_ARGCOMPLETE": "1",
            "_ARGCOMPLETE_SUPPRESS_SPACE": "0",
            "_ARGCOMPLETE_IFS": "\n",
            "_ARGCOMPLETE_SHELL": "bash",
        }
        try:
            self.probe.run([self.tool], timeout=self.timeout, env=env, check=False)
            text = Path(out_path).read_text(encoding="utf-8", errors="replace")
        finally:
            Path(out_path).unlink(missing_ok=True)
        return [(c.strip(), "") for c in text.splitlines() if c.strip()]


class CobraCompleter(ToolCompleter):
    """Cobra ``__complete`` protocol (kubectl, docker, helm...).

    Output is one ``completion<TAB>description`` per line followed by a
    ``:<directive>`` line.
    """

    def __init__(
        self, probe: ToolProbe, tool: str, min_chars: int = 1, timeout: float = 1.5
    ) -> None:
        super().__init__(probe, min_chars=min_chars, timeout=timeout)
        self.tool = tool

    def candidates(self, line: str, point: int) -> list[tuple[str, str]]:
        words = split_command_line(line[:point])
        out = self.probe.run(
            [self.tool, "__complete", *words[1:]],
            timeout=self.timeout,
            check=False,
        ).stdout

        results: list[tuple[str, str]] = []
        for raw in out.splitlines():
            if not raw or raw.startswith(":"):
                continue
            text, _, meta = raw.partition("\t")
            results.append((text, meta))
        return results


class ZoxideCompleter(ToolCompleter):
    """Directories from zoxide's database for ``z``."""

    tool = "zoxide"
    # Results are full paths that replace the typed keyword
    match_prefix = False

    def candidates(self, line: str, point: int) -> list[tuple[str, str]]:
        words = split_command_line(line[:point])
        keywords = [w for w in words[1:] if w]
        dirs = self.probe.lines([self.tool, "query", "--list", "--", *keywords], timeout=self.timeout)
        return [(d, "") for d in dirs]


class DispatchCompleter(Completer):
    """Route completion by the command word.

    The first word completes shell function names; arguments go to the
    completer registered for the command, or to path completion.
    """

    def __init__(self, functions: FunctionRegistry) -> None:
        self.functions = functions
        self.completers: dict[str, Completer] = {}
        self._paths = PathCompleter(expanduser=True)

    def add(self, command: str, completer: Completer) -> None:
        self.completers[command] = completer

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        before = document.text_before_cursor
        words = split_command_line(before)

        if len(words) <= 1:
            prefix = words[0] if words else ""
            for name in self.functions.names():
                if name.startswith(prefix):
                    yield Completion(name, start_position=-len(prefix))
            return

        completer = self.completers.get(words[0])
        if completer is not None:
            yield from completer.get_completions(document, complete_event)
            return

        word = document.get_word_before_cursor(WORD=True)
        yield from self._paths.get_completions(Document(word, len(word)), complete_event)
