"""Configuration for the installer.

Settings live in ``~/.secure-installer/config.json``. Every key is optional;
missing keys fall back to the defaults below.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

# Default configuration location
CONFIG_DIR = Path.home() / ".secure-installer"
CONFIG_FILE = "config.json"

ENV_GITHUB_TOKEN = "GITHUB_TOKEN"

DEFAULT_SYSTEM_TOOLS = [
    "bash",
    "curl",
    "docker",
    "git",
    "make",
    "node",
    "python",
    "python3",
    "sh",
    "ssh",
    "sudo",
    "wget",
    "zsh",
]


class ConfigError(Exception):
    """Configuration file could not be read or is invalid."""

    pass


class Settings(BaseModel):
    """Effective installer settings."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    github_api_base: str = Field(default="https://api.github.com", alias="githubApiBase")
    github_raw_base: str = Field(
        default="https://raw.githubusercontent.com", alias="githubRawBase"
    )
    npm_registry_base: str = Field(
        default="https://registry.npmjs.org", alias="npmRegistryBase"
    )
    github_token: str | None = Field(default=None, alias="githubToken", exclude=True)

    probe_timeout: float = Field(default=5.0, gt=0, alias="probeTimeout")
    metadata_timeout: float = Field(default=8.0, gt=0, alias="metadataTimeout")
    download_timeout: float = Field(default=10.0, gt=0, alias="downloadTimeout")
    checksum_timeout: float = Field(default=8.0, gt=0, alias="checksumTimeout")

    download_attempts: int = Field(default=3, ge=1, alias="downloadAttempts")
    backoff_base: float = Field(default=0.5, gt=0, alias="backoffBase")

    system_tools: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SYSTEM_TOOLS), alias="systemTools"
    )
    dependency_store: Path = Field(default=Path("node_modules"), alias="dependencyStore")
    # None means a private directory created per run
    download_dir: Path | None = Field(default=None, alias="downloadDir")

    def github_headers(self) -> dict[str, str]:
        """Headers for GitHub API requests."""
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "secure-installer",
        }
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers


class ConfigManager:
    """Loads and saves installer settings."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Directory holding config.json. Defaults to ~/.secure-installer.

        Note:
            Prefer using factory methods `create()` or `create_default()` for construction.
        """
        self.config_dir = config_dir or CONFIG_DIR
        self.config_file = self.config_dir / CONFIG_FILE

    @classmethod
    def create(cls, config_dir: Path) -> ConfigManager:
        """Create a config manager with a custom directory."""
        return cls(config_dir=config_dir)

    @classmethod
    def create_default(cls) -> ConfigManager:
        """Create a config manager using ~/.secure-installer."""
        return cls()

    def _read_raw(self) -> dict[str, Any]:
        if not self.config_file.exists():
            return {}
        try:
            data = json.loads(self.config_file.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read {self.config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{self.config_file} must contain a JSON object")
        return data

    def load(self) -> Settings:
        """Load settings from disk, applying environment overrides.

        Returns:
            Settings with defaults for missing keys.

        Raises:
            ConfigError: If the file is unreadable or fails validation.
        """
        data = self._read_raw()
        try:
            settings = Settings.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self.config_file}: {e}") from e

        if settings.github_token is None:
            token = os.environ.get(ENV_GITHUB_TOKEN)
            if token:
                settings.github_token = token
        return settings

    def set_value(self, key: str, value: str) -> Settings:
        """Persist a single setting.

        Args:
            key: Setting name, either the field name or its camelCase alias.
            value: Raw string value. Comma-separated for list settings.

        Returns:
            The updated settings.

        Raises:
            ConfigError: If the key is unknown or the value is invalid.
        """
        field_name = _resolve_key(key)
        field = Settings.model_fields[field_name]
        alias = field.alias or field_name

        data = self._read_raw()
        data[alias] = _coerce(field_name, value)
        try:
            settings = Settings.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for {key}: {e}") from e

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(data, indent=2, default=str))
        return settings


def _resolve_key(key: str) -> str:
    """Map a field name, alias, or dashed name to a Settings field."""
    candidate = key.replace("-", "_")
    if candidate in Settings.model_fields:
        return candidate
    for name, field in Settings.model_fields.items():
        if field.alias == key:
            return name
    raise ConfigError(f"Unknown configuration key: {key}")


def _coerce(field_name: str, value: str) -> Any:
    if field_name == "system_tools":
        return [v.strip() for v in value.split(",") if v.strip()]
    return value
