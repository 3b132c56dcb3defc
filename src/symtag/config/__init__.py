"""Configuration management for symtag."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import SymtagConfig
from .resolver import assign_nested, env_to_overrides, flatten_for_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.symtag/config.yaml")
_CONFIG_HEADER = (
    "# symtag configuration file\n"
    "# Manage with `symtag config edit` or `symtag config set KEY --value VALUE`.\n"
)


class ConfigManager:
    """Read and write the YAML configuration file and resolve overrides."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> SymtagConfig:
        """Return the effective configuration.

        Unlike ``ensure_exists`` this never writes; a missing file simply
        contributes no overrides.

        Raises:
            ConfigError: If the file or an override is invalid.
        """
        env_data: Mapping[str, str] | None = None
        if include_env:
            env_data = env_overrides if env_overrides is not None else self._env

        return resolve_with_precedence(
            defaults=SymtagConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_to_overrides(env_data) if env_data else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored on disk, or an empty one."""
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def save(self, config: SymtagConfig | Mapping[str, Any]) -> None:
        """Write configuration data to disk with a header and timestamp."""
        data = config.model_dump(mode="python") if isinstance(config, SymtagConfig) else dict(config)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(
            _CONFIG_HEADER + f"# Last updated: {stamp}\n" + yaml.safe_dump(data, sort_keys=False),
            encoding="utf-8",
        )

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        if not self._config_path.exists():
            self.save(SymtagConfig())
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")


__all__ = [
    "ConfigManager",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SymtagConfig",
    "assign_nested",
    "env_to_overrides",
    "flatten_for_env",
    "resolve_with_precedence",
]
