"""prompt_toolkit-based interactive shell host."""

from __future__ import annotations

import asyncio
import logging
import shlex
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, Iterable

from prompt_toolkit import PromptSession
from prompt_toolkit.application import Application
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import Completer
from prompt_toolkit.formatted_text import ANSI

from shellup.completion import DispatchCompleter
from shellup.errors import ShellupError
from shellup.history import DEFAULT_REDACTION_PATTERNS, RedactingFileHistory
from shellup.host.base import Host, LineEditingOptions
from shellup.logging import print_error
from shellup.prompt import PromptContext, PromptRenderer, placeholder_prompt
from shellup.scheduler.models import IdleSubscription, PromptState

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit")


# =============================================================================
# Host
# =============================================================================


class PromptToolkitHost(Host):
    """Interactive shell loop on a prompt_toolkit ``PromptSession``.

    The idle hook is the application's ``after_render`` event: every render
    schedules the subscribed callback on the event loop, so it runs right
    after the prompt has been painted and before the next key is read. It may
    therefore fire more than once until it is unregistered.
    """

    def __init__(self, history_file: str | Path, interactive: bool | None = None) -> None:
        super().__init__()
        self._interactive = interactive
        self.history_file = Path(history_file).expanduser()
        self.history: RedactingFileHistory | None = None
        self.completer = DispatchCompleter(self.functions)
        self.last_status = 0

        self._session: PromptSession[str] | None = None
        self._renderer: PromptRenderer = placeholder_prompt
        self._rendered: str | None = None
        self._idle_handlers: dict[int, Callable[[Application[str]], None]] = {}

    @property
    def session(self) -> PromptSession[str]:
        """The prompt session, created on first use (interactive only)."""
        if self._session is None:
            self.history_file.parent.mkdir(parents=True, exist_ok=True)
            patterns = (
                self.context.config.history.redact_patterns
                if self.context is not None
                else DEFAULT_REDACTION_PATTERNS
            )
            self.history = RedactingFileHistory(str(self.history_file), patterns)
            self._session = PromptSession(
                message=self._message,
                history=self.history,
                completer=self.completer,
                complete_while_typing=False,
                enable_history_search=False,
            )
        return self._session

    # =========================================================================
    # Host interface
    # =========================================================================

    def is_interactive(self) -> bool:
        if self._interactive is not None:
            return self._interactive
        return sys.stdin.isatty() and sys.stdout.isatty()

    def register_idle(self, callback: Callable[[], object]) -> IdleSubscription:
        subscription = IdleSubscription(callback=callback)

        def on_render(app: Application[str]) -> None:
            self._schedule(subscription)

        self._idle_handlers[subscription.id] = on_render
        self.session.app.after_render += on_render
        return subscription

    def unregister_idle(self, subscription: IdleSubscription) -> None:
        subscription.active = False
        handler = self._idle_handlers.pop(subscription.id, None)
        if handler is not None and self._session is not None:
            self._session.app.after_render -= handler

    def _schedule(self, subscription: IdleSubscription) -> None:
        if not subscription.active:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._fire(subscription)
            return
        loop.call_soon(self._fire, subscription)

    def _fire(self, subscription: IdleSubscription) -> None:
        if subscription.active:
            subscription.callback()

    def install_prompt(self, renderer: PromptRenderer, state: PromptState) -> None:
        self._renderer = renderer
        self._rendered = None
        self.prompt_state = state

    def redraw(self) -> None:
        self._rendered = None
        if self._session is not None and self._session.app.is_running:
            self._session.app.invalidate()

    def configure_line_editing(self, options: LineEditingOptions) -> None:
        session = self.session
        if options.key_bindings is not None:
            session.key_bindings = options.key_bindings
        if options.lexer is not None:
            session.lexer = options.lexer
        session.auto_suggest = AutoSuggestFromHistory() if options.predict_from_history else None
        session.enable_history_search = options.history_search
        if self.history is not None:
            self.history.set_patterns(options.redact_patterns)

    def add_completer(self, command: str, completer: Completer) -> None:
        self.completer.add(command, completer)

    # =========================================================================
    # Prompt rendering
    # =========================================================================

    def prompt_context(self) -> PromptContext:
        return PromptContext(
            cwd=Path.cwd(),
            last_status=self.last_status,
            elevated=bool(self.context and self.context.elevated),
            columns=shutil.get_terminal_size().columns,
        )

    def _message(self) -> ANSI:
        # Rendered once per input line; the message callable runs on every
        # keystroke redraw.
        if self._rendered is None:
            self._rendered = self._renderer(self.prompt_context())
        return ANSI(self._rendered)

    # =========================================================================
    # Command execution
    # =========================================================================

    def run(self) -> int:
        """Read and execute commands until exit or EOF."""
        while True:
            self._rendered = None
            try:
                line = self.session.prompt()
            except KeyboardInterrupt:
                continue
            except EOFError:
                break

            line = line.strip()
            if not line:
                continue
            words = line.split()
            if words[0] in EXIT_COMMANDS:
                return int(words[1]) if len(words) > 1 and words[1].isdigit() else self.last_status
            self.last_status = self.execute(line)

        return self.last_status

    def run_lines(self, lines: Iterable[str]) -> int:
        """Execute commands non-interactively (stdin is not a terminal)."""
        for raw in lines:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            words = line.split()
            if words[0] in EXIT_COMMANDS:
                return int(words[1]) if len(words) > 1 and words[1].isdigit() else self.last_status
            self.last_status = self.execute(line)
        return self.last_status

    def execute(self, line: str) -> int:
        """Run one command line: functions, then builtins, then the system shell."""
        try:
            words = shlex.split(line)
        except ValueError as e:
            print_error(f"parse error: {e}")
            return 2
        if not words:
            return 0

        name, args = words[0], words[1:]
        function = self.functions.get(name)
        if function is not None:
            try:
                return function.func(self.context, args) or 0  # type: ignore[arg-type]
            except ShellupError as e:
                print_error(e.message)
                return int(e.exit_code)
            except Exception as e:
                logger.debug(f"{name} crashed", exc_info=True)
                print_error(f"{name}: {e}")
                return 1

        if name == "cd":
            return self._cd(args)

        try:
            return subprocess.call(line, shell=True)
        except KeyboardInterrupt:
            return 130

    def _cd(self, args: list[str]) -> int:
        if not args:
            target: Path | str = Path.home()
        elif args[0] == "-":
            if self.previous_dir is None:
                print_error("cd: no previous directory")
                return 1
            target = self.previous_dir
        else:
            target = args[0]
        try:
            self.change_directory(target)
        except OSError as e:
            print_error(f"cd: {e.strerror or e}: {target}")
            return 1
        return 0
