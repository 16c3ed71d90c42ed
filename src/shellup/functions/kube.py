"""kubectl context and namespace switching."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shellup.errors import ToolError
from shellup.fuzzy import pick
from shellup.logging import print_error, print_success
from shellup.tools import ToolProbe

if TYPE_CHECKING:
    from shellup.context import SessionContext
    from shellup.functions import FunctionRegistry

KUBECTL = "kubectl"


class KubeTools:
    """kubectl wrapper with per-session caches.

    Context and namespace lists are cached on the instance (one per session)
    and invalidated whenever this wrapper changes the active context.
    """

    def __init__(self, probe: ToolProbe, timeout: float = 10.0) -> None:
        self.probe = probe
        self.timeout = timeout
        self._contexts: list[str] | None = None
        self._namespaces: dict[str, list[str]] = {}

    def contexts(self, refresh: bool = False) -> list[str]:
        if self._contexts is None or refresh:
            self._contexts = self.probe.lines(
                [KUBECTL, "config", "get-contexts", "-o", "name"], timeout=self.timeout
            )
        return list(self._contexts)

    def current_context(self) -> str:
        return self.probe.output([KUBECTL, "config", "current-context"], timeout=self.timeout)

    def use_context(self, name: str) -> None:
        self.probe.run([KUBECTL, "config", "use-context", name], timeout=self.timeout)

    def namespaces(self, refresh: bool = False) -> list[str]:
        context = self.current_context()
        if context not in self._namespaces or refresh:
            names = self.probe.lines(
                [KUBECTL, "get", "namespaces", "-o", "name"], timeout=self.timeout
            )
            self._namespaces[context] = [n.removeprefix("namespace/") for n in names]
        return list(self._namespaces[context])

    def set_namespace(self, namespace: str) -> None:
        self.probe.run(
            [KUBECTL, "config", "set-context", "--current", f"--namespace={namespace}"],
            timeout=self.timeout,
        )


def kube_context(ctx: SessionContext, args: list[str]) -> int:
    """Switch kubectl context; pick one with fzf when no name is given."""
    kube = ctx.kube
    try:
        name = args[0] if args else pick(kube.contexts(), ctx.probe, prompt="context")
        if name is None:
            return 0
        kube.use_context(name)
    except ToolError as e:
        print_error(e.message)
        return 1
    print_success(f"Switched to context {name}")
    return 0


def kube_namespace(ctx: SessionContext, args: list[str]) -> int:
    """Set the namespace of the current context; fzf pick when none given."""
    kube = ctx.kube
    try:
        name = args[0] if args else pick(kube.namespaces(), ctx.probe, prompt="namespace")
        if name is None:
            return 0
        kube.set_namespace(name)
    except ToolError as e:
        print_error(e.message)
        return 1
    print_success(f"Namespace set to {name}")
    return 0


def register(registry: FunctionRegistry) -> None:
    registry.register("kctx", kube_context)
    registry.register("kns", kube_namespace)
