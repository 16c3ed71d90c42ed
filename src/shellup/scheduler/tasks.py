"""Built-in deferred startup tasks.

Each task checks for its tool first and returns quietly when it is missing;
anything that still goes wrong is absorbed and logged by the scheduler.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from shellup.completion import ArgcompleteCompleter, CobraCompleter, DotnetCompleter, ZoxideCompleter
from shellup.integrations import EnvFileLoader, apply_mise_env
from shellup.scheduler.models import PromptState

if TYPE_CHECKING:
    from prompt_toolkit.completion import Completer

    from shellup.scheduler.core import Scheduler

logger = logging.getLogger(__name__)

INSTALL_TIMEOUT = 300.0


def setup_line_editing(scheduler: Scheduler) -> None:
    """Key bindings, token colors, history filter and history prediction."""
    from prompt_toolkit.lexers import PygmentsLexer
    from pygments.lexers.shell import BashLexer

    from shellup.host.base import LineEditingOptions
    from shellup.keybindings import build_key_bindings

    history = scheduler.config.history
    scheduler.host.configure_line_editing(
        LineEditingOptions(
            key_bindings=build_key_bindings(),
            lexer=PygmentsLexer(BashLexer),
            predict_from_history=history.prediction,
            history_search=True,
            redact_patterns=list(history.redact_patterns),
        )
    )


def setup_prompt_theme(scheduler: Scheduler) -> None:
    """Initialize the prompt engine unless the early path already did."""
    if scheduler.prompt_state is PromptState.THEMED:
        return
    engine = scheduler.engine
    if engine is None:
        return

    prompt_cfg = scheduler.config.prompt
    if not engine.available and prompt_cfg.auto_install:
        logger.debug(f"Installing {engine.name}: {prompt_cfg.install_command}")
        subprocess.run(
            prompt_cfg.install_command,
            shell=True,
            check=True,
            timeout=INSTALL_TIMEOUT,
            capture_output=True,
        )
        scheduler.probe.forget(engine.name)

    if not engine.available:
        logger.debug(f"{engine.name} not found, keeping the plain prompt")
        return
    scheduler.set_themed_renderer(engine.initialize())


def external_completers(scheduler: Scheduler) -> dict[str, Completer]:
    """Completers for enabled tools that are present on PATH."""
    cfg = scheduler.config.completions
    probe = scheduler.probe
    opts = {"min_chars": cfg.min_chars, "timeout": cfg.timeout_seconds}

    candidates: dict[str, tuple[bool, Completer]] = {
        "dotnet": (cfg.dotnet, DotnetCompleter(probe, **opts)),
        "az": (cfg.az, ArgcompleteCompleter(probe, "az", **opts)),
        "kubectl": (cfg.kubectl, CobraCompleter(probe, "kubectl", **opts)),
        "docker": (cfg.docker, CobraCompleter(probe, "docker", **opts)),
    }
    enabled: dict[str, Completer] = {}
    for tool, (wanted, completer) in candidates.items():
        if not wanted:
            continue
        if not probe.has(tool):
            logger.debug(f"{tool} not found, completion skipped")
            continue
        enabled[tool] = completer
    return enabled


def setup_completers(scheduler: Scheduler) -> None:
    for tool, completer in external_completers(scheduler).items():
        scheduler.host.add_completer(tool, completer)


def setup_zoxide(scheduler: Scheduler) -> None:
    from shellup.functions import zoxide

    cfg = scheduler.config
    if not cfg.integrations.zoxide or not scheduler.probe.has(zoxide.ZOXIDE):
        return
    zoxide.install(scheduler.context)
    scheduler.host.add_completer(
        "z",
        ZoxideCompleter(
            scheduler.probe,
            min_chars=cfg.completions.min_chars,
            timeout=cfg.completions.timeout_seconds,
        ),
    )


def setup_mise(scheduler: Scheduler) -> None:
    if not scheduler.config.integrations.mise or not scheduler.probe.has("mise"):
        return

    def mise_hook(directory: Path) -> None:
        apply_mise_env(scheduler.probe, directory)

    mise_hook(Path.cwd())
    scheduler.host.add_directory_hook(mise_hook)


def setup_dotenv(scheduler: Scheduler) -> None:
    if not scheduler.config.integrations.dotenv:
        return
    loader = EnvFileLoader()
    loader(Path.cwd())
    scheduler.host.add_directory_hook(loader)


BUILTIN_TASKS = (
    ("line-editing", setup_line_editing),
    ("prompt-theme", setup_prompt_theme),
    ("completers", setup_completers),
    ("zoxide", setup_zoxide),
    ("mise", setup_mise),
    ("dotenv", setup_dotenv),
)


def register_builtin_tasks(scheduler: Scheduler) -> None:
    """Queue the built-in deferred tasks in their standard order."""
    for label, setup in BUILTIN_TASKS:
        scheduler.add_deferred_task(label, lambda setup=setup: setup(scheduler))
