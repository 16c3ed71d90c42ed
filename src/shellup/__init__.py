"""shellup - A Python shell profile with two-phase, idle-deferred startup."""

__version__ = "0.1.0"
