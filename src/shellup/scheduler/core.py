"""Two-phase startup scheduler.

Startup is split into a synchronous fast path that must finish before the
first prompt, and a deferred path that runs once, from the host's idle
callback, after the first prompt has been painted. A placeholder prompt covers
the gap and is swapped for the themed prompt when deferred work completes.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
import os
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, TextIO

from shellup.config import ShellupConfig
from shellup.context import SessionContext
from shellup.errors import ProfileError, ToolError
from shellup.functions import BUILTIN_MODULES
from shellup.paths import default_profile_entry, get_functions_dir, resolve_install_root
from shellup.prompt import PromptEngine, PromptRenderer, create_engine, placeholder_prompt, plain_prompt
from shellup.scheduler.models import (
    BootPhase,
    DeferredTask,
    IdleSubscription,
    PromptState,
    StartupClock,
    TaskOutcome,
)
from shellup.tools import ToolProbe

if TYPE_CHECKING:
    from shellup.host.base import Host

logger = logging.getLogger(__name__)

# Environment variables that opt external CLIs out of telemetry
TELEMETRY_OPTOUT_ENV = {
    "DOTNET_CLI_TELEMETRY_OPTOUT": "1",
    "POWERSHELL_TELEMETRY_OPTOUT": "1",
    "AZURE_CORE_COLLECT_TELEMETRY": "0",
}


def configure_encoding(streams: tuple[TextIO, ...] | None = None) -> None:
    """Default child processes and our own stdio to UTF-8."""
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    for stream in streams if streams is not None else (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is None:
            continue
        try:
            reconfigure(encoding="utf-8", errors="replace")
        except (ValueError, OSError) as e:
            logger.debug(f"Cannot reconfigure {stream!r}: {e}")


def is_elevated() -> bool:
    """True when running as root (POSIX) or as an administrator (Windows)."""
    geteuid = getattr(os, "geteuid", None)
    if geteuid is not None:
        return geteuid() == 0
    try:
        import ctypes

        return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
    except (AttributeError, OSError):
        return False


class Scheduler:
    """Orchestrates synchronous and deferred startup for one shell session.

    The scheduler owns the boot phase, the prompt state, the idle subscription,
    the deferred task queue and the session context. Nothing here is
    module-global, so every property can be exercised against a fake host.

    Attributes:
        host: Shell host being configured
        config: Loaded configuration
        probe: Session-wide memoized tool lookups
        clock: Startup timer (diagnostics only)
        context: Session context handed to shell functions
        phase: Current boot phase
        prompt_state: Which prompt the scheduler last installed
        subscription: Pending idle subscription, None once consumed
        tasks: Deferred tasks in registration order
        outcomes: Per-task results of the deferred phase
    """

    def __init__(
        self,
        host: Host,
        config: ShellupConfig | None = None,
        probe: ToolProbe | None = None,
        clock: StartupClock | None = None,
        profile_entry: Path | str | None = None,
    ) -> None:
        self.host = host
        self.config = config or ShellupConfig()
        self.probe = probe or ToolProbe()
        self.clock = clock or StartupClock()

        entry = profile_entry or self.config.profile or default_profile_entry()
        self.context = SessionContext(
            config=self.config,
            probe=self.probe,
            host=host,
            profile_entry=Path(entry).expanduser(),
        )
        host.context = self.context

        self.phase = BootPhase.SYNCHRONOUS
        self.prompt_state = PromptState.NONE
        self.subscription: IdleSubscription | None = None
        self.tasks: list[DeferredTask] = []
        self.outcomes: list[TaskOutcome] = []

        self._deferred_started = False
        self._themed_renderer: PromptRenderer | None = None
        self._engine: PromptEngine | None = None
        self._engine_built = False

    # =========================================================================
    # Task registration
    # =========================================================================

    def add_deferred_task(self, label: str, callback: Callable[[], object]) -> DeferredTask:
        """Queue work for the deferred phase (FIFO)."""
        task = DeferredTask(label=label, callback=callback)
        self.tasks.append(task)
        return task

    def deferred(self, label: str) -> Callable[[Callable[[], object]], Callable[[], object]]:
        """Decorator form of :meth:`add_deferred_task`."""

        def decorator(func: Callable[[], object]) -> Callable[[], object]:
            self.add_deferred_task(label, func)
            return func

        return decorator

    @property
    def engine(self) -> PromptEngine | None:
        """The configured prompt engine (None when disabled)."""
        if not self._engine_built:
            prompt_cfg = self.config.prompt
            self._engine = create_engine(
                prompt_cfg.engine,
                self.probe,
                theme=prompt_cfg.theme,
                timeout=prompt_cfg.render_timeout_seconds,
            )
            self._engine_built = True
        return self._engine

    def set_themed_renderer(self, renderer: PromptRenderer) -> None:
        """Record the renderer installed when the deferred phase completes."""
        self._themed_renderer = renderer

    # =========================================================================
    # Synchronous phase
    # =========================================================================

    def run_synchronous_phase(self) -> None:
        """Fast-path startup that must finish before the first prompt.

        No external processes are started here.

        Raises:
            ProfileError: If the profile root cannot be resolved or a helper
                file fails to load
        """
        configure_encoding()

        self.context.elevated = is_elevated()
        if self.config.telemetry_optout:
            for key, value in TELEMETRY_OPTOUT_ENV.items():
                os.environ.setdefault(key, value)

        root = resolve_install_root(self.context.profile_entry)
        self.context.install_root = root
        logger.debug(f"Profile root: {root}")

        self._source_builtin_functions()
        self._source_helper_files(get_functions_dir(root))

        elapsed = self.clock.checkpoint("synchronous")
        logger.debug(f"Synchronous phase done in {elapsed:.1f}ms ({len(self.host.functions)} functions)")

    def _source_builtin_functions(self) -> None:
        for module_name in BUILTIN_MODULES:
            module = importlib.import_module(module_name)
            module.register(self.host.functions)

    def _source_helper_files(self, functions_dir: Path) -> None:
        """Load ``*.py`` helper files; each may define ``register(registry)``."""
        if not functions_dir.is_dir():
            return

        for path in sorted(functions_dir.glob("*.py")):
            if path.name.startswith("_"):
                continue
            module_name = f"shellup_profile_{path.stem}"
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise ProfileError(f"Cannot load helper file: {path}", path=str(path))
            module = importlib.util.module_from_spec(spec)
            try:
                spec.loader.exec_module(module)
                register = getattr(module, "register", None)
                if register is not None:
                    register(self.host.functions)
            except Exception as e:
                raise ProfileError(f"Helper file {path.name} failed: {e}", path=str(path)) from e
            logger.debug(f"Sourced {path}")

    # =========================================================================
    # Interactive entry
    # =========================================================================

    def enter_interactive_mode(self) -> bool:
        """Install the first prompt and schedule the deferred phase.

        A non-interactive session leaves scheduler state untouched: no prompt
        is installed and no idle callback is registered.

        Returns:
            True if the deferred phase was scheduled
        """
        if not self.host.is_interactive():
            logger.debug("Non-interactive session, deferred phase not scheduled")
            return False
        if self.subscription is not None or self._deferred_started:
            return True

        if not self._try_early_theme():
            self.host.install_prompt(placeholder_prompt, PromptState.PLACEHOLDER)
            self.prompt_state = PromptState.PLACEHOLDER

        self.subscription = self.host.register_idle(self.run_deferred_phase)
        self.phase = BootPhase.DEFERRED
        self.clock.checkpoint("interactive")
        return True

    def _try_early_theme(self) -> bool:
        """Initialize the prompt engine now if it is already on PATH."""
        engine = self.engine
        if engine is None or not self.config.prompt.early_init or not engine.available:
            return False
        try:
            renderer = engine.initialize()
        except ToolError as e:
            logger.debug(f"Early prompt init failed, using placeholder: {e}")
            return False

        self._themed_renderer = renderer
        self.host.install_prompt(renderer, PromptState.THEMED)
        self.prompt_state = PromptState.THEMED
        logger.debug(f"Early prompt init ({engine.name}) at {self.clock.checkpoint('early-prompt'):.1f}ms")
        return True

    # =========================================================================
    # Deferred phase
    # =========================================================================

    def run_deferred_phase(self) -> None:
        """Run deferred tasks once, then restore the final prompt.

        Safe to call repeatedly: idle callbacks may fire more than once before
        unregistration is observed, and only the first call does any work.
        """
        if self._deferred_started:
            return
        self._deferred_started = True

        self.clock.checkpoint("deferred-start")
        try:
            for task in list(self.tasks):
                self.outcomes.append(self._run_task(task))
        finally:
            self._finish_deferred()

    def _run_task(self, task: DeferredTask) -> TaskOutcome:
        started = time.perf_counter()
        try:
            task.callback()
        except Exception as e:
            elapsed = (time.perf_counter() - started) * 1000.0
            logger.debug(f"Deferred task {task.label} failed: {e}", exc_info=True)
            return TaskOutcome(label=task.label, ok=False, elapsed_ms=elapsed, error=str(e))

        elapsed = (time.perf_counter() - started) * 1000.0
        logger.debug(f"Deferred task {task.label}: {elapsed:.1f}ms")
        return TaskOutcome(label=task.label, ok=True, elapsed_ms=elapsed)

    def _finish_deferred(self) -> None:
        if self.subscription is not None:
            self.host.unregister_idle(self.subscription)
            self.subscription = None

        if self.prompt_state is not PromptState.THEMED:
            renderer = self._themed_renderer or plain_prompt
            self.host.install_prompt(renderer, PromptState.THEMED)
            self.prompt_state = PromptState.THEMED

        self.host.redraw()
        self.phase = BootPhase.COMPLETE

        total = self.clock.stop()
        failed = [o.label for o in self.outcomes if not o.ok]
        suffix = f", failed: {', '.join(failed)}" if failed else ""
        logger.info(f"Startup complete in {total:.1f}ms ({len(self.outcomes)} deferred tasks{suffix})")
