"""Centralized path definitions for shellup files.

User files live under the XDG config/state directories:

    ~/.config/shellup/
    └── config.toml     # User configuration

    ~/.local/state/shellup/
    └── history         # Persistent command history

Extra helper files are sourced from ``profile.d/`` beside the (symlink-resolved)
profile entry. A project-local ``.shelluprc.toml`` in the working directory
takes precedence over the user config file.
"""

from __future__ import annotations

import os
from pathlib import Path

from shellup.errors import ProfileError

APP_NAME = "shellup"

CONFIG_FILE = "config.toml"
LOCAL_CONFIG_FILE = ".shelluprc.toml"
HISTORY_FILE = "history"
FUNCTIONS_DIR = "profile.d"

# Environment variable pointing at the profile entry (usually a symlink)
PROFILE_ENV = "SHELLUP_PROFILE"


def get_config_dir() -> Path:
    """Get the user configuration directory (``$XDG_CONFIG_HOME/shellup``)."""
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / APP_NAME


def get_state_dir() -> Path:
    """Get the user state directory (``$XDG_STATE_HOME/shellup``)."""
    base = os.environ.get("XDG_STATE_HOME") or Path.home() / ".local" / "state"
    return Path(base) / APP_NAME


def get_config_path() -> Path:
    """Get the user configuration file path."""
    return get_config_dir() / CONFIG_FILE


def get_local_config_path(root: Path | str = ".") -> Path:
    """Get the project-local configuration file path."""
    return Path(root).resolve() / LOCAL_CONFIG_FILE


def get_history_path() -> Path:
    """Get the default persistent history file path."""
    return get_state_dir() / HISTORY_FILE


def default_profile_entry() -> Path:
    """Get the profile entry used when none is configured.

    Honors ``$SHELLUP_PROFILE``; otherwise the installed package directory,
    which always exists.
    """
    override = os.environ.get(PROFILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path(__file__).parent


def resolve_install_root(entry: Path | str) -> Path:
    """Resolve the profile's install root, following symlinks.

    The profile is typically symlinked into place, so the entry is resolved to
    its real location before looking for sibling files. A file entry yields its
    parent directory; a directory entry yields itself.

    Args:
        entry: Path to the profile entry (file or directory, may be a symlink)

    Returns:
        The real directory holding the profile

    Raises:
        ProfileError: If the entry (or its symlink target) does not exist
    """
    entry_path = Path(entry).expanduser()
    try:
        real = entry_path.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        # Symlink loops raise RuntimeError before Python 3.13, OSError after
        raise ProfileError(
            f"Cannot resolve profile location: {entry_path}",
            path=str(entry_path),
            reason=str(e),
        ) from e

    return real if real.is_dir() else real.parent


def get_functions_dir(install_root: Path) -> Path:
    """Get the helper-functions directory beside the profile."""
    return install_root / FUNCTIONS_DIR
