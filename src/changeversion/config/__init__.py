"""Configuration management for ChangeVersion.

Settings live in a YAML file (``~/.config/changeversion/config.yaml`` unless
another path is given). ``CV__SECTION__KEY`` environment variables and CLI
overrides are layered on top by :func:`resolve_with_precedence`.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import CvConfig
from .resolver import ENV_PREFIX, flatten_for_env, overrides_from_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.config/changeversion/config.yaml")
_HEADER_LINES = (
    "# ChangeVersion configuration file",
    "# Edit with `cv config edit` or `cv config set KEY --value VALUE`.",
)


class ConfigManager:
    """Read, resolve, and write the ChangeVersion configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Create a manager.

        Args:
            config_path: Configuration file; defaults to :data:`DEFAULT_CONFIG_PATH`.
            env: Environment used for ``CV__`` overrides; defaults to ``os.environ``.
        """
        self._path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        return self._path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = False,
        env_overrides: Mapping[str, str] | None = None,
    ) -> CvConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Highest-priority overrides, dotted or nested.
            include_env: Whether ``CV__`` environment variables apply.
            ensure_file: Write a default file first when none exists.
            env_overrides: Environment to read instead of the manager's own.

        Raises:
            ConfigError: If the file is unreadable or a value is invalid.
        """
        if ensure_file:
            self.ensure_exists()
        env_layer = None
        if include_env:
            env_layer = overrides_from_env(self._env if env_overrides is None else env_overrides)
        return resolve_with_precedence(
            defaults=CvConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_layer or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored in the configuration file (empty if absent)."""
        text = self.read_text()
        if not text:
            return {}
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file {self._path}: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {self._path} must contain a mapping.")
        return data

    def save(self, config: CvConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to disk with a generated header."""
        data = config.model_dump(mode="python") if isinstance(config, CvConfig) else dict(config)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = yaml.safe_dump(data, sort_keys=False)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            "\n".join((*_HEADER_LINES, f"# Last updated: {stamp}", body)), encoding="utf-8"
        )

    def ensure_exists(self) -> Path:
        """Write the default configuration unless a file is already present."""
        if not self._path.exists():
            self.save(CvConfig())
        return self._path

    def read_text(self) -> str:
        """Return the file contents, or an empty string when there is no file."""
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""


__all__ = [
    "ConfigError",
    "ConfigManager",
    "CvConfig",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "flatten_for_env",
    "overrides_from_env",
    "resolve_with_precedence",
]
