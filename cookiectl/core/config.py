"""Configuration management for cookiectl."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .constants import (
    CONFIG_FILE,
    CONFIG_VERSION,
    DEFAULT_SETTINGS,
)

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration is invalid."""
    pass


class ConfigManager:
    """Manages application configuration loading, validation, and persistence."""

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path or CONFIG_FILE
        self._config: dict[str, Any] = {}
        self._ensure_directories()
        self.load()

    def _ensure_directories(self) -> None:
        """Create the configuration directory if it doesn't exist."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

    def _create_default_config(self) -> dict[str, Any]:
        """Generate default configuration."""
        return {
            "version": CONFIG_VERSION,
            "settings": DEFAULT_SETTINGS.copy(),
            "last_run": None,
        }

    def _validate_settings(self, settings: dict[str, Any]) -> list[str]:
        """Validate the settings block and return list of errors."""
        errors = []

        whitelist_path = settings.get("whitelist_path")
        if whitelist_path is not None and not isinstance(whitelist_path, str):
            errors.append("'whitelist_path' must be a string or null")

        fields = settings.get("fields", DEFAULT_SETTINGS["fields"])
        if not isinstance(fields, str) or not fields.strip():
            errors.append("'fields' must be a non-empty string")

        max_workers = settings.get("max_workers", DEFAULT_SETTINGS["max_workers"])
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            errors.append("'max_workers' must be a positive integer")

        if not isinstance(settings.get("debug", False), bool):
            errors.append("'debug' must be true or false")

        return errors

    def _validate_config(self, config: dict[str, Any]) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not isinstance(config.get("version"), int):
            errors.append("Missing or invalid 'version' field")

        settings = config.get("settings")
        if not isinstance(settings, dict):
            errors.append("Missing or invalid 'settings' field")
        else:
            errors.extend(self._validate_settings(settings))

        return errors

    def load(self) -> None:
        """Load configuration from file, creating defaults if needed."""
        if not self.config_path.exists():
            logger.info("Config file not found, creating defaults at %s", self.config_path)
            self._config = self._create_default_config()
            self.save()
            return

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                loaded_config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file: {e}") from e

        if not isinstance(loaded_config, dict):
            raise ConfigError("Configuration validation failed: top level must be an object")

        errors = self._validate_config(loaded_config)
        if errors:
            for error in errors:
                logger.error("Config validation error: %s", error)
            raise ConfigError(f"Configuration validation failed: {'; '.join(errors)}")

        self._config = loaded_config
        logger.debug("Configuration loaded from %s", self.config_path)

    def save(self) -> None:
        """Save current configuration to file."""
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self._config, f, indent=2)
        logger.debug("Configuration saved to %s", self.config_path)

    @property
    def config(self) -> dict[str, Any]:
        """Return a copy of the current configuration."""
        return self._config.copy()

    @property
    def settings(self) -> dict[str, Any]:
        """Return application settings, with defaults for missing keys."""
        merged = DEFAULT_SETTINGS.copy()
        merged.update(self._config.get("settings", {}))
        return merged

    @property
    def whitelist_path(self) -> Path | None:
        """Return the configured whitelist file, if any."""
        value = self.settings.get("whitelist_path")
        return Path(value).expanduser() if value else None

    def update_settings(self, **kwargs: Any) -> None:
        """Update settings with provided values after validation."""
        candidate = self.settings
        candidate.update(kwargs)
        errors = self._validate_settings(candidate)
        if errors:
            raise ConfigError(f"Invalid settings: {'; '.join(errors)}")
        self._config.setdefault("settings", {}).update(kwargs)

    def update_last_run(self) -> None:
        """Update the last_run timestamp to now."""
        self._config["last_run"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
