"""Two-phase startup scheduling: synchronous fast path, idle-deferred rest."""

from shellup.scheduler.core import Scheduler, configure_encoding, is_elevated
from shellup.scheduler.models import (
    BootPhase,
    DeferredTask,
    IdleSubscription,
    PromptState,
    StartupClock,
    TaskOutcome,
)
from shellup.scheduler.tasks import BUILTIN_TASKS, register_builtin_tasks

__all__ = [
    "BUILTIN_TASKS",
    "BootPhase",
    "DeferredTask",
    "IdleSubscription",
    "PromptState",
    "Scheduler",
    "StartupClock",
    "TaskOutcome",
    "configure_encoding",
    "is_elevated",
    "register_builtin_tasks",
]
