"""Configuration models for shellup."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from shellup.errors import ConfigError
from shellup.paths import get_config_path, get_history_path, get_local_config_path


class PromptConfig(BaseModel):
    """Prompt engine configuration."""

    engine: Literal["oh-my-posh", "starship", "none"] = Field(
        default="oh-my-posh",
        description="External prompt engine used for the themed prompt",
    )
    theme: str | None = Field(
        default=None,
        description="Theme/config file passed to the prompt engine",
    )
    early_init: bool = Field(
        default=True,
        description="Initialize the engine before the first prompt if it is on PATH",
    )
    auto_install: bool = Field(
        default=False,
        description="Run install_command in the deferred phase when the engine is missing",
    )
    install_command: str = Field(
        default="curl -s https://ohmyposh.dev/install.sh | bash -s",
        description="Shell command that installs the prompt engine",
    )
    render_timeout_seconds: float = Field(
        default=2.0,
        description="Timeout for a single prompt render",
    )


class CompletionsConfig(BaseModel):
    """External argument completer configuration."""

    dotnet: bool = Field(default=True, description="Enable dotnet completion")
    az: bool = Field(default=True, description="Enable Azure CLI completion")
    kubectl: bool = Field(default=True, description="Enable kubectl completion")
    docker: bool = Field(default=True, description="Enable docker completion")
    min_chars: int = Field(
        default=1,
        ge=1,
        description="Minimum typed characters before an external completer is called",
    )
    timeout_seconds: float = Field(
        default=1.5,
        description="Timeout for a single external completion call",
    )


class HistoryConfig(BaseModel):
    """Command history configuration."""

    file: str = Field(
        default_factory=lambda: str(get_history_path()),
        description="Persistent history file",
    )
    redact_patterns: list[str] = Field(
        default=["password", "secret", "token", "apikey", "connectionstring"],
        description="Case-insensitive substrings that keep a line out of history",
    )
    prediction: bool = Field(
        default=True,
        description="Suggest completions from history while typing",
    )


class IntegrationsConfig(BaseModel):
    """Optional external shell integrations."""

    zoxide: bool = Field(default=True, description="Enable zoxide directory jumping")
    mise: bool = Field(default=True, description="Apply mise tool environment on cd")
    dotenv: bool = Field(default=True, description="Load .env files on cd")


class ShellupConfig(BaseSettings):
    """Main shellup configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SHELLUP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    version: str = Field(default="1.0", description="Config version")
    verbose: bool = Field(default=False, description="Log deferred-phase diagnostics")
    telemetry_optout: bool = Field(
        default=True,
        description="Opt out of dotnet/az/pwsh telemetry at startup",
    )
    profile: str | None = Field(
        default=None,
        description="Profile entry path (default: $SHELLUP_PROFILE or the package)",
    )
    prompt: PromptConfig = Field(default_factory=PromptConfig)
    completions: CompletionsConfig = Field(default_factory=CompletionsConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    integrations: IntegrationsConfig = Field(default_factory=IntegrationsConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> ShellupConfig:
        """Load configuration from file and environment.

        Resolution order (highest to lowest priority):
        1. Environment variables (SHELLUP_*, nested with __)
        2. Provided config file path
        3. .shelluprc.toml in current directory
        4. ~/.config/shellup/config.toml
        5. Built-in defaults
        """
        config_data: dict[str, Any] = {}

        locations = []
        if config_path:
            locations.append(config_path)
        locations.extend([get_local_config_path(), get_config_path()])

        for loc in locations:
            if loc.exists():
                try:
                    with open(loc, "rb") as f:
                        config_data = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    raise ConfigError(f"Invalid TOML in {loc}: {e}", path=str(loc)) from e
                break

        # Top-level [shellup] table holds scalar settings
        config_data.update(config_data.pop("shellup", {}))

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats values read from the TOML file
        return env_settings, init_settings, file_secret_settings


def get_default_config_toml() -> str:
    """Generate default config.toml content."""
    return f"""# shellup configuration
# Every key can be overridden from the environment:
#   SHELLUP_VERBOSE=1
#   SHELLUP_PROMPT__ENGINE=starship
#   SHELLUP_PROMPT__AUTO_INSTALL=true
#   SHELLUP_COMPLETIONS__AZ=false

[shellup]
version = "1.0"
verbose = false
telemetry_optout = true

[prompt]
engine = "oh-my-posh"  # oh-my-posh | starship | none
# theme = "~/.config/shellup/theme.omp.json"
early_init = true  # Init the engine before the first prompt when on PATH
auto_install = false
install_command = "curl -s https://ohmyposh.dev/install.sh | bash -s"
render_timeout_seconds = 2.0

[completions]
dotnet = true
az = true
kubectl = true
docker = true
min_chars = 1  # Never call an external completer on empty input
timeout_seconds = 1.5

[history]
file = "{get_history_path()}"
redact_patterns = ["password", "secret", "token", "apikey", "connectionstring"]
prediction = true

[integrations]
zoxide = true
mise = true
dotenv = true
"""
