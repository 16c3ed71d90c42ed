"""docker helpers."""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING

from shellup.errors import ToolError
from shellup.fuzzy import pick
from shellup.logging import print_error, print_info

if TYPE_CHECKING:
    from shellup.context import SessionContext
    from shellup.functions import FunctionRegistry

DOCKER = "docker"


def running_containers(ctx: SessionContext) -> list[str]:
    return ctx.probe.lines([DOCKER, "ps", "--format", "{{.Names}}"], timeout=10.0)


def docker_ps(ctx: SessionContext, args: list[str]) -> int:
    """List running container names."""
    try:
        names = running_containers(ctx)
    except ToolError as e:
        print_error(e.message)
        return 1
    for name in names:
        print_info(name)
    return 0


def docker_shell(ctx: SessionContext, args: list[str]) -> int:
    """Open a shell in a running container (fzf pick when none given)."""
    try:
        name = args[0] if args else pick(running_containers(ctx), ctx.probe, prompt="container")
    except ToolError as e:
        print_error(e.message)
        return 1
    if name is None:
        return 0
    shell = args[1] if len(args) > 1 else "sh"
    # Interactive: inherit the terminal
    return subprocess.call([DOCKER, "exec", "-it", name, shell])


def docker_prune(ctx: SessionContext, args: list[str]) -> int:
    """Remove stopped containers, dangling images and unused networks."""
    if not ctx.probe.has(DOCKER):
        print_error("docker not found on PATH")
        return 1
    return subprocess.call([DOCKER, "system", "prune", "-f", *args])


def register(registry: FunctionRegistry) -> None:
    registry.register("dps", docker_ps)
    registry.register("dsh", docker_shell)
    registry.register("dprune", docker_prune)
