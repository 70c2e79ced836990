"""Configuration loading, saving and validation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from water_monitor.config.schema import AppConfig
from water_monitor.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads app config from a defaults YAML file plus user overrides."""

    def __init__(
        self,
        defaults_path: Path | None = None,
        user_path: Path | None = None,
    ) -> None:
        self._defaults_path = defaults_path or Path("config.defaults.yaml")
        self._user_path = user_path or Path("config.yaml")
        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            raise RuntimeError("Config not loaded. Call load() first.")
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from defaults + user overrides.

        Raises:
            ConfigurationError: if the merged YAML does not validate.
        """
        defaults = self._load_yaml(self._defaults_path)
        overrides = self._load_yaml(self._user_path)
        merged = self._deep_merge(defaults, overrides)
        try:
            config = AppConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid application config: {e}") from e
        self._config = config
        logger.info(
            "Configuration loaded (db=%s, timezone=%s)",
            config.db.path, config.billing.timezone,
        )
        return config

    def save_user_config(self, updates: dict[str, Any]) -> AppConfig:
        """Merge updates into the user config file and reload.

        Used by ``PUT /api/config/billing``; other user overrides already
        in the file are kept.
        """
        current = self._load_yaml(self._user_path)
        merged = self._deep_merge(current, updates)
        with open(self._user_path, "w") as f:
            yaml.dump(merged, f, default_flow_style=False, sort_keys=False)
        logger.info("User config updated: %s", ", ".join(sorted(updates)))
        return self.load()

    @staticmethod
    def _load_yaml(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        with open(path) as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Recursively merge override into base, returning a new dict."""
        result = dict(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigManager._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
