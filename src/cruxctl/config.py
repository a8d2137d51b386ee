"""Configuration management for cruxctl using Pydantic."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from cruxctl.core.exceptions import ConfigError
from cruxctl.core.logging import LogLevel
from cruxctl.core.output import OutputFormat
from cruxctl.core.utils import get_config_dir, merge_dicts


class ApiConfig(BaseModel):
    """Remote crux REST API configuration.

    When no URL is configured, deployment commands run against local state.
    """

    url: str | None = None
    token: str | None = None
    timeout: int = 30
    insecure: bool = False

    def get_url(self) -> str | None:
        """Get API URL from config or environment."""
        return os.environ.get("CRUXCTL_API_URL") or os.environ.get("CRUX_URL") or self.url

    def get_token(self) -> str | None:
        """Get API token from config or environment."""
        token = self.token
        if token == "from_env" or token is None:
            token = os.environ.get("CRUXCTL_API_TOKEN") or os.environ.get("CRUX_TOKEN")
        return token


class AgentConfig(BaseModel):
    """Node agent endpoint configuration."""

    url: str | None = None
    token: str | None = None
    timeout: int = 30

    def get_url(self) -> str | None:
        """Get agent URL from config or environment."""
        return os.environ.get("CRUXCTL_AGENT_URL") or self.url

    def get_token(self) -> str | None:
        """Get agent token from config or environment."""
        token = self.token
        if token == "from_env" or token is None:
            token = os.environ.get("CRUXCTL_AGENT_TOKEN")
        return token


class StateConfig(BaseModel):
    """Local state storage configuration."""

    state_dir: str | None = None

    def get_state_dir(self) -> Path:
        """Get state directory from environment, config or the default location."""
        value = os.environ.get("CRUXCTL_STATE_DIR") or self.state_dir
        if value:
            return Path(value).expanduser()
        return get_config_dir() / "state"


class ProfileConfig(BaseModel):
    """Profile configuration grouping all service settings."""

    api: ApiConfig = Field(default_factory=ApiConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    state: StateConfig = Field(default_factory=StateConfig)
    identity: str | None = None

    def get_identity(self) -> str:
        """Get the identity recorded in audit fields."""
        return (
            os.environ.get("CRUXCTL_IDENTITY")
            or self.identity
            or os.environ.get("USER")
            or "cruxctl"
        )


class GlobalConfig(BaseModel):
    """Global settings."""

    output_format: OutputFormat = OutputFormat.TABLE
    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.WARNING
    dry_run: bool = False
    confirm_destructive: bool = True
    timeout: int = 300

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


class CruxConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    version: str = "1"
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    profiles: dict[str, ProfileConfig] = Field(default_factory=lambda: {"default": ProfileConfig()})

    def get_profile(self, name: str | None = None) -> ProfileConfig:
        """Get a profile by name, defaulting to 'default'."""
        profile_name = name or "default"
        if profile_name not in self.profiles:
            raise ConfigError(f"Profile '{profile_name}' not found")
        return self.profiles[profile_name]


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    CONFIG_FILENAMES = ["cruxctl.yaml", "cruxctl.yml", ".cruxctl.yaml", ".cruxctl.yml"]

    def __init__(self):
        self._config: CruxConfig | None = None

    def load(
        self,
        config_file: str | Path | None = None,
        profile: str | None = None,
    ) -> CruxConfig:
        """Load configuration from files.

        Priority (highest to lowest):
        1. Explicitly specified config file
        2. Project config (./cruxctl.yaml, searched upwards)
        3. User config (~/.cruxctl/config.yaml)

        Args:
            config_file: Optional explicit config file path
            profile: Profile name that must exist in the result

        Returns:
            Merged configuration
        """
        configs: list[dict[str, Any]] = []

        user_config_path = get_config_dir() / "config.yaml"
        if user_config_path.exists():
            configs.append(self._load_yaml_file(user_config_path))

        project_config = self._find_project_config()
        if project_config:
            configs.append(self._load_yaml_file(project_config))

        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_file}")
            configs.append(self._load_yaml_file(config_path))

        merged: dict[str, Any] = {}
        for config in configs:
            merged = merge_dicts(merged, config)

        try:
            self._config = CruxConfig(**merged)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}")

        if profile:
            self._config.get_profile(profile)
        return self._config

    def _find_project_config(self) -> Path | None:
        """Find project config file in current or parent directories."""
        current = Path.cwd()

        while current != current.parent:
            for filename in self.CONFIG_FILENAMES:
                config_path = current / filename
                if config_path.exists():
                    return config_path
            current = current.parent

        return None

    def _load_yaml_file(self, path: Path) -> dict[str, Any]:
        """Load a YAML config file."""
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")

        if not isinstance(content, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return content


# Global config loader instance
_config_loader = ConfigLoader()


def load_config(
    config_file: str | Path | None = None,
    profile: str | None = None,
) -> CruxConfig:
    """Load cruxctl configuration.

    Args:
        config_file: Optional explicit config file path
        profile: Profile name to use

    Returns:
        Loaded configuration
    """
    return _config_loader.load(config_file, profile)


def get_default_config() -> CruxConfig:
    """Get default configuration without loading from files."""
    return CruxConfig()
