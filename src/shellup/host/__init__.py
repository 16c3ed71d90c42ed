"""Shell hosts the startup scheduler can drive."""

from shellup.host.base import DirectoryHook, Host, LineEditingOptions
from shellup.host.ptk import PromptToolkitHost

__all__ = ["DirectoryHook", "Host", "LineEditingOptions", "PromptToolkitHost"]
