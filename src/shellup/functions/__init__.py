"""Top-level shell functions and the registry that holds them.

A shell function is any callable ``func(ctx, args) -> int | None`` where
``ctx`` is the session context and ``args`` the words after the function
name. Returning None means success.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator

if TYPE_CHECKING:
    from shellup.context import SessionContext

ShellFunction = Callable[["SessionContext", list[str]], "int | None"]


@dataclass
class RegisteredFunction:
    """A named shell function."""

    name: str
    func: ShellFunction
    help: str = ""


class FunctionRegistry:
    """Name -> function table consulted before external commands."""

    def __init__(self) -> None:
        self._functions: dict[str, RegisteredFunction] = {}

    def register(self, name: str, func: ShellFunction, help: str | None = None) -> None:
        """Define (or redefine) a function."""
        if help is None:
            # First docstring line
            help = next(iter((func.__doc__ or "").strip().splitlines()), "")
        self._functions[name] = RegisteredFunction(name=name, func=func, help=help)

    def command(self, *names: str, help: str | None = None) -> Callable[[ShellFunction], ShellFunction]:
        """Decorator form of :meth:`register`, accepting aliases."""

        def decorator(func: ShellFunction) -> ShellFunction:
            for name in names:
                self.register(name, func, help=help)
            return func

        return decorator

    def get(self, name: str) -> RegisteredFunction | None:
        return self._functions.get(name)

    def names(self) -> list[str]:
        return sorted(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[RegisteredFunction]:
        return iter(self._functions[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._functions)


# Built-in leaf modules, in sourcing order. Each exposes register(registry).
BUILTIN_MODULES = (
    "shellup.functions.nav",
    "shellup.functions.git",
    "shellup.functions.kube",
    "shellup.functions.docker",
)

__all__ = ["BUILTIN_MODULES", "FunctionRegistry", "RegisteredFunction", "ShellFunction"]
