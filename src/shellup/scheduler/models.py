"""State models for the two-phase startup scheduler."""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

_subscription_ids = itertools.count(1)


class BootPhase(Enum):
    """Which stage of startup is active."""

    SYNCHRONOUS = "synchronous"
    DEFERRED = "deferred"
    COMPLETE = "complete"


class PromptState(Enum):
    """Which prompt implementation is installed on the host."""

    NONE = "none"
    PLACEHOLDER = "placeholder"
    THEMED = "themed"


@dataclass
class DeferredTask:
    """A unit of work run once the session is idle.

    Attributes:
        label: Human-readable name used in timing/log lines
        callback: Zero-argument callable; must tolerate missing tools
    """

    label: str
    callback: Callable[[], object]


@dataclass
class TaskOutcome:
    """Result of running one deferred task."""

    label: str
    ok: bool
    elapsed_ms: float
    error: str | None = None


@dataclass
class IdleSubscription:
    """Registration token for "run this at the host's next idle point".

    Attributes:
        callback: Zero-argument callable to invoke
        id: Unique id for this registration
        active: False once unregistered
    """

    callback: Callable[[], object]
    id: int = field(default_factory=lambda: next(_subscription_ids))
    active: bool = True


class StartupClock:
    """Monotonic startup timer.

    Started at process entry, read at checkpoints without being reset, and
    stopped when the deferred phase completes. Used for diagnostics only.
    """

    def __init__(self, start: float | None = None) -> None:
        self._start = time.perf_counter() if start is None else start
        self._stopped_at: float | None = None
        self.checkpoints: list[tuple[str, float]] = []

    @property
    def running(self) -> bool:
        return self._stopped_at is None

    def elapsed_ms(self) -> float:
        end = self._stopped_at if self._stopped_at is not None else time.perf_counter()
        return (end - self._start) * 1000.0

    def checkpoint(self, label: str) -> float:
        """Record the elapsed time under ``label`` and return it."""
        elapsed = self.elapsed_ms()
        self.checkpoints.append((label, elapsed))
        return elapsed

    def stop(self) -> float:
        """Freeze the clock; later calls return the same reading."""
        if self._stopped_at is None:
            self._stopped_at = time.perf_counter()
        return self.elapsed_ms()
