"""Process configuration with Pydantic and YAML support.

User-facing timer settings (durations, auto-start flags, sound) live in the
database and are handled by :mod:`pulso.focus.settings`. This module only
covers where Pulso keeps its files and how the process behaves.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path.home() / ".config/pulso/config.yaml"


class Config(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PULSO_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/pulso")
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".local/state/pulso/logs")
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config/pulso")

    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    # Seconds between timer ticks; 1.0 in normal use
    tick_interval_seconds: float = Field(default=1.0, gt=0, le=60)

    desktop_notifications: bool = Field(
        default=True, description="Also raise a desktop notification via notify-send/osascript"
    )

    @property
    def db_path(self) -> Path:
        """Path to SQLite database."""
        return self.data_dir / "pulso.db"

    @property
    def config_file(self) -> Path:
        """Path to YAML config file."""
        return self.config_dir / "config.yaml"

    def ensure_directories(self) -> None:
        """Create all required directories."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        os.chmod(self.data_dir, 0o700)

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from YAML file, environment variables, and defaults.

        Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values
        """
        config_path = config_path or DEFAULT_CONFIG_PATH

        yaml_config: dict[str, Any] = {}
        if config_path.exists():
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}

        # Environment variables take precedence over init kwargs only for keys
        # missing from the file, so drop file keys that the environment sets.
        for key in list(yaml_config):
            if f"PULSO_{key.upper()}" in os.environ:
                yaml_config.pop(key)

        return cls(**yaml_config)

    def save(self, config_path: Path | None = None) -> Path:
        """Save current configuration to YAML file."""
        config_path = config_path or self.config_file
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(exclude_none=True)

        # Convert Path objects to strings for YAML
        for key in ["data_dir", "log_dir", "config_dir"]:
            if key in data:
                data[key] = str(data[key])

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        os.chmod(config_path, 0o600)
        return config_path


@lru_cache
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.load()
