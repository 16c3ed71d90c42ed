"""Session context handed to shell functions and startup tasks."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from shellup.config import ShellupConfig
from shellup.tools import ToolProbe

if TYPE_CHECKING:
    from shellup.functions.kube import KubeTools
    from shellup.host.base import Host


@dataclass
class SessionContext:
    """Everything a shell function may touch, owned by one scheduler.

    Attributes:
        config: Loaded configuration
        probe: Session-wide memoized tool lookups
        host: The shell host (directory changes, prompt, functions)
        profile_entry: Path the profile was started from (may be a symlink)
        install_root: Real directory of the profile, set by the synchronous phase
        elevated: True when running with administrator privileges
    """

    config: ShellupConfig
    probe: ToolProbe
    host: Host
    profile_entry: Path
    install_root: Path | None = None
    elevated: bool = False
    _kube: KubeTools | None = field(default=None, repr=False)

    @property
    def kube(self) -> KubeTools:
        """kubectl helper with per-session context/namespace caches."""
        if self._kube is None:
            from shellup.functions.kube import KubeTools

            self._kube = KubeTools(self.probe)
        return self._kube
