"""Prompt renderers: the cheap placeholder and external prompt engines."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from shellup.errors import ToolError, ToolNotFoundError
from shellup.tools import ToolProbe

logger = logging.getLogger(__name__)

LOADING_MARKER = "…"


@dataclass
class PromptContext:
    """What a prompt renderer may show."""

    cwd: Path = field(default_factory=Path.cwd)
    last_status: int = 0
    elevated: bool = False
    columns: int = 80


PromptRenderer = Callable[[PromptContext], str]


def short_cwd(cwd: Path, home: Path | None = None) -> str:
    """Abbreviate the home directory to ``~``."""
    home = home or Path.home()
    try:
        rel = cwd.relative_to(home)
    except ValueError:
        return str(cwd)
    return "~" if str(rel) == "." else f"~{os.sep}{rel}"


def placeholder_prompt(context: PromptContext) -> str:
    """Render the loading prompt. String formatting only, no I/O."""
    symbol = "#" if context.elevated else ">"
    status = "" if context.last_status == 0 else f"[{context.last_status}] "
    return f"{LOADING_MARKER} {status}{short_cwd(context.cwd)} {symbol} "


def plain_prompt(context: PromptContext) -> str:
    """Final prompt used when no prompt engine is available."""
    return placeholder_prompt(context).removeprefix(f"{LOADING_MARKER} ")


class PromptEngine(ABC):
    """An external prompt engine that prints a rendered prompt.

    Subclasses describe how to validate the binary and which arguments render
    the primary prompt. Renders return ANSI text.
    """

    name: str = ""

    def __init__(self, probe: ToolProbe, theme: str | None = None, timeout: float = 2.0) -> None:
        self.probe = probe
        self.theme = str(Path(theme).expanduser()) if theme else None
        self.timeout = timeout

    @property
    def available(self) -> bool:
        return self.probe.has(self.name)

    def version_args(self) -> list[str]:
        return [self.name, "--version"]

    @abstractmethod
    def render_args(self, context: PromptContext) -> list[str]:
        """Command line that prints the primary prompt for ``context``."""

    def initialize(self) -> PromptRenderer:
        """Validate the engine and return a renderer bound to it.

        Raises:
            ToolNotFoundError: If the engine is not on PATH
            ToolError: If the engine fails its version check or the theme
                file is missing
        """
        if not self.available:
            raise ToolNotFoundError(self.name)
        if self.theme and not Path(self.theme).is_file():
            raise ToolError(f"Theme file not found: {self.theme}", tool=self.name)

        version = self.probe.output(self.version_args(), timeout=self.timeout)
        logger.debug(f"{self.name} {version} initialized")
        return self.render

    def render_env(self) -> dict[str, str] | None:
        return None

    def render(self, context: PromptContext) -> str:
        try:
            return self.probe.output(
                self.render_args(context),
                timeout=self.timeout,
                cwd=str(context.cwd),
                env=self.render_env(),
            ) + " "
        except ToolError as e:
            # A broken render must not leave the user without a prompt
            logger.debug(f"{self.name} render failed: {e}")
            return placeholder_prompt(context).replace(LOADING_MARKER, "!", 1)


class OhMyPoshEngine(PromptEngine):
    name = "oh-my-posh"

    def version_args(self) -> list[str]:
        return [self.name, "version"]

    def render_args(self, context: PromptContext) -> list[str]:
        args = [
            self.name,
            "print",
            "primary",
            f"--pwd={context.cwd}",
            f"--status={context.last_status}",
            f"--terminal-width={context.columns}",
        ]
        if self.theme:
            args.append(f"--config={self.theme}")
        return args


class StarshipEngine(PromptEngine):
    name = "starship"

    def render_args(self, context: PromptContext) -> list[str]:
        return [
            self.name,
            "prompt",
            f"--path={context.cwd}",
            f"--status={context.last_status}",
            f"--terminal-width={context.columns}",
        ]

    def render_env(self) -> dict[str, str] | None:
        if not self.theme:
            return None
        return {**os.environ, "STARSHIP_CONFIG": self.theme}


ENGINES: dict[str, type[PromptEngine]] = {
    OhMyPoshEngine.name: OhMyPoshEngine,
    StarshipEngine.name: StarshipEngine,
}


def create_engine(
    name: str, probe: ToolProbe, theme: str | None = None, timeout: float = 2.0
) -> PromptEngine | None:
    """Build the configured engine, or None when the prompt is disabled."""
    engine_cls = ENGINES.get(name)
    if engine_cls is None:
        return None
    return engine_cls(probe, theme=theme, timeout=timeout)
