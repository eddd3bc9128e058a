"""Configuration management for Todoist CLI."""

import json
import stat
from pathlib import Path
from typing import Any, Optional

from platformdirs import user_cache_dir, user_config_dir, user_data_dir
from pydantic import BaseModel, Field, ValidationError

from todoist_cli.exceptions import ConfigError

APP_NAME = "todoist-cli"


class APIConfig(BaseModel):
    """API configuration."""

    endpoint: str = Field(default="https://api.todoist.com/sync/v9")
    timeout: float = Field(default=30.0, gt=0)
    retry: int = Field(default=3, ge=0)


class CacheConfig(BaseModel):
    """Cache configuration."""

    path: Optional[str] = Field(default=None)


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="tsv", pattern="^(tsv|csv|table|json|yaml)$")
    color: bool = Field(default=False)
    header: bool = Field(default=False)


class Config(BaseModel):
    """Main configuration."""

    api: APIConfig = Field(default_factory=APIConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


class ConfigManager:
    """Manages Todoist CLI configuration and credentials.

    Credentials live apart from the config file and must only be readable
    by the owner, because they hold the API token.
    """

    def __init__(self, config_dir: Optional[Path] = None, data_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir or user_config_dir(APP_NAME))
        self.data_dir = Path(data_dir or user_data_dir(APP_NAME))
        self.config_file = self.config_dir / "config.json"
        self.credentials_file = self.data_dir / "credentials.json"

        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    @property
    def cache_path(self) -> Path:
        """Location of the local sync cache."""
        if self.config.cache.path:
            return Path(self.config.cache.path).expanduser()
        return Path(user_cache_dir(APP_NAME)) / "cache.json"

    def load_config(self) -> Config:
        """Load configuration from file.

        Raises:
            ConfigError: If the file exists but is not a valid configuration
        """
        if not self.config_file.exists():
            return Config()
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Config(**data)
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            raise ConfigError(f"Invalid config file {self.config_file}: {e}") from e

    def save_config(self, config: Optional[Config] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self.config

        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(config.model_dump(), f, indent=2)

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        return self.get_from_config(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key.

        Raises:
            ConfigError: If the key is unknown or the value is invalid
        """
        keys = key.split(".")
        config_dict = self.config.model_dump()

        current = config_dict
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                raise ConfigError(f"Unknown config key: {key}")
            current = current[k]
        if keys[-1] not in current:
            raise ConfigError(f"Unknown config key: {key}")

        current[keys[-1]] = value

        try:
            self._config = Config(**config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for {key}: {e}") from e
        self.save_config()

    def reset(self, key: Optional[str] = None) -> None:
        """Reset configuration to defaults."""
        if key is None:
            self._config = Config()
            self.save_config()
        else:
            self.set(key, self.get_from_config(Config(), key))

    @staticmethod
    def get_from_config(config: Config, key: str) -> Any:
        """Get value from a config object using dot notation."""
        value: Any = config
        for k in key.split("."):
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value

    def save_token(self, token: str) -> None:
        """Save the API token with owner-only permissions."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.credentials_file, "w", encoding="utf-8") as f:
            json.dump({"token": token}, f, indent=2)

        self.credentials_file.chmod(0o600)

    def load_token(self) -> Optional[str]:
        """Load the API token, or None when no credentials are stored.

        Raises:
            ConfigError: If the credentials file is readable by others or
                cannot be parsed
        """
        if not self.credentials_file.exists():
            return None

        mode = stat.S_IMODE(self.credentials_file.stat().st_mode)
        if mode != 0o600:
            raise ConfigError(
                "Credentials file has wrong permissions. Make sure to give "
                f"permissions 600 to file {self.credentials_file}"
            )

        try:
            with open(self.credentials_file, "r", encoding="utf-8") as f:
                credentials = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid credentials file {self.credentials_file}") from e
        if not isinstance(credentials, dict):
            raise ConfigError(f"Invalid credentials file {self.credentials_file}")
        return credentials.get("token") or None

    def clear_token(self) -> None:
        """Remove stored credentials."""
        if self.credentials_file.exists():
            self.credentials_file.unlink()
