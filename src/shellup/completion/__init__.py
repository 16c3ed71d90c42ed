"""Argument completion for external CLIs."""

from shellup.completion.completers import (
    ArgcompleteCompleter,
    CobraCompleter,
    DispatchCompleter,
    DotnetCompleter,
    ToolCompleter,
    ZoxideCompleter,
    split_command_line,
)

__all__ = [
    "ArgcompleteCompleter",
    "CobraCompleter",
    "DispatchCompleter",
    "DotnetCompleter",
    "ToolCompleter",
    "ZoxideCompleter",
    "split_command_line",
]
