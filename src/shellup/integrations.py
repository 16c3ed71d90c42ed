"""External shell integrations applied on startup and on every cd."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from dotenv import dotenv_values

from shellup.errors import ToolError
from shellup.tools import ToolProbe

logger = logging.getLogger(__name__)

MISE = "mise"
ENV_FILE = ".env"


def apply_mise_env(probe: ToolProbe, directory: Path) -> dict[str, str]:
    """Export the tool environment mise resolves for ``directory``.

    Returns:
        The variables that were set
    """
    out = probe.output([MISE, "env", "--json"], timeout=5.0, cwd=str(directory))
    try:
        env = json.loads(out or "{}")
    except json.JSONDecodeError as e:
        raise ToolError(f"mise env returned invalid JSON: {e}", tool=MISE) from e

    applied = {str(k): str(v) for k, v in env.items()}
    os.environ.update(applied)
    return applied


class EnvFileLoader:
    """Load ``.env`` files as directories are entered.

    Variables a previous ``.env`` introduced are removed when leaving its
    directory; variables already present in the environment are never
    overwritten.
    """

    def __init__(self) -> None:
        self._loaded: dict[str, str] = {}

    def __call__(self, directory: Path) -> dict[str, str]:
        self.unload()
        env_file = directory / ENV_FILE
        if not env_file.is_file():
            return {}

        values = {k: v for k, v in dotenv_values(env_file).items() if v is not None}
        for key, value in values.items():
            if key not in os.environ:
                os.environ[key] = value
                self._loaded[key] = value
        logger.debug(f"Loaded {len(self._loaded)} variables from {env_file}")
        return dict(self._loaded)

    def unload(self) -> None:
        for key, value in self._loaded.items():
            if os.environ.get(key) == value:
                del os.environ[key]
        self._loaded.clear()
