"""
Configuration management for microplatform.

Loads and validates the micro home config.yaml file. Every value can be
overridden from the command line; the file only supplies defaults.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from microplatform.errors import ConfigError


DEFAULT_HOME = "~/.config/micro"

LOG_FORMATS = ("pretty", "structured")


@dataclass
class PlatformConfig:
    """Complete platform configuration."""

    profile: Optional[str] = None
    proxy_address: Optional[str] = None
    runtime: str = "local"
    log_level: str = "INFO"
    log_format: str = "pretty"
    log_file: Optional[str] = None
    auth_public_key: str = ""
    auth_private_key: str = ""
    env_file: Optional[str] = None
    stop_timeout: float = 5.0
    grace_period: float = 1.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlatformConfig":
        """
        Build a config from a parsed YAML mapping.

        Raises:
            ConfigError: If the mapping holds unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

        config = cls(**data)
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration values."""
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}, got '{self.log_format}'"
            )

        for name in ("stop_timeout", "grace_period"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value < 0:
                raise ConfigError(f"{name} must be a non-negative number, got {value!r}")

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path, if file logging is enabled."""
        if not self.log_file:
            return None
        return Path(self.log_file).expanduser()

    def load_env_file(self) -> bool:
        """
        Load the configured .env file into the process environment.

        Variables already present in the environment are left untouched.

        Returns:
            True if a file was loaded
        """
        if not self.env_file:
            return False

        env_path = Path(self.env_file).expanduser()
        if not env_path.exists():
            return False

        return load_dotenv(env_path, override=False)


def get_micro_home() -> Path:
    """Get the micro home directory ($MICRO_HOME or ~/.config/micro)."""
    home = os.environ.get("MICRO_HOME")
    if home:
        return Path(home).expanduser()
    return Path(DEFAULT_HOME).expanduser()


def load_config(config_path: Optional[Path] = None) -> PlatformConfig:
    """
    Load platform configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to <micro home>/config.yaml

    Returns:
        PlatformConfig instance. Defaults are used when the file is missing or empty.

    Raises:
        ConfigError: If config is invalid
    """
    if config_path is None:
        config_path = get_micro_home() / "config.yaml"

    config_path = Path(config_path)
    if not config_path.exists():
        return PlatformConfig()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}")

    if data is None:
        return PlatformConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must hold a mapping: {config_path}")

    return PlatformConfig.from_dict(data)
