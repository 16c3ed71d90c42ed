"""Host interface: the embedding shell the scheduler drives.

The scheduler never talks to a particular line editor. It needs a host that
can tell whether a user is attached, run a callback at its next idle point,
swap the prompt renderer, redraw, and accept line-editing/completion settings.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from prompt_toolkit.completion import Completer
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.lexers import Lexer

from shellup.functions import FunctionRegistry
from shellup.prompt import PromptRenderer
from shellup.scheduler.models import IdleSubscription, PromptState

if TYPE_CHECKING:
    from shellup.context import SessionContext

logger = logging.getLogger(__name__)

DirectoryHook = Callable[[Path], None]


@dataclass
class LineEditingOptions:
    """Advanced line-editing settings installed by the deferred phase."""

    key_bindings: KeyBindings | None = None
    lexer: Lexer | None = None
    predict_from_history: bool = True
    history_search: bool = True
    redact_patterns: list[str] = field(default_factory=list)


class Host(ABC):
    """An interactive shell the startup scheduler can drive."""

    def __init__(self) -> None:
        self.functions = FunctionRegistry()
        self.directory_hooks: list[DirectoryHook] = []
        self.prompt_state = PromptState.NONE
        self.previous_dir: Path | None = None
        self.context: SessionContext | None = None

    @abstractmethod
    def is_interactive(self) -> bool:
        """True when a user is attached to a terminal."""

    @abstractmethod
    def register_idle(self, callback: Callable[[], object]) -> IdleSubscription:
        """Arrange for ``callback`` to run at the host's next idle point.

        Hosts may invoke the callback more than once before
        :meth:`unregister_idle` takes effect.
        """

    @abstractmethod
    def unregister_idle(self, subscription: IdleSubscription) -> None:
        """Stop delivering idle callbacks for ``subscription``."""

    @abstractmethod
    def install_prompt(self, renderer: PromptRenderer, state: PromptState) -> None:
        """Replace the prompt renderer."""

    @abstractmethod
    def redraw(self) -> None:
        """Re-render the current prompt line without waiting for input."""

    @abstractmethod
    def configure_line_editing(self, options: LineEditingOptions) -> None:
        """Apply key bindings, token colors, history filter and prediction."""

    @abstractmethod
    def add_completer(self, command: str, completer: Completer) -> None:
        """Use ``completer`` for arguments of ``command``."""

    def add_directory_hook(self, hook: DirectoryHook) -> None:
        """Run ``hook(new_dir)`` after every directory change."""
        self.directory_hooks.append(hook)

    def change_directory(self, path: Path | str) -> Path:
        """chdir, remember the previous directory, and run directory hooks.

        Raises:
            OSError: If the directory cannot be entered
        """
        target = Path(path).expanduser()
        current = Path.cwd()
        os.chdir(target)
        self.previous_dir = current
        new_dir = Path.cwd()
        for hook in list(self.directory_hooks):
            try:
                hook(new_dir)
            except Exception as e:
                logger.debug(f"Directory hook {getattr(hook, '__name__', hook)} failed: {e}")
        return new_dir
