"""Configuration management for httpbackoff.

Configuration is loaded hierarchically: defaults → TOML file → environment.
The backoff computation never reads configuration itself; callers build a
:class:`~httpbackoff.backoff.BackoffCalculator` from it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import toml
from pydantic import ValidationError

from httpbackoff.exceptions import ConfigurationError
from httpbackoff.logging_config import get_logger
from httpbackoff.models import BackoffConfig, Config

CONFIG_FILENAME = "httpbackoff.toml"

ENV_MAPPINGS: dict[str, str] = {
    "HTTPBACKOFF_MIN_DELAY": "backoff.min_delay",
    "HTTPBACKOFF_MAX_DELAY": "backoff.max_delay",
    "HTTPBACKOFF_LOG_LEVEL": "observability.log_level",
    "HTTPBACKOFF_LOG_FILE": "observability.log_file",
    "HTTPBACKOFF_STRUCTURED_LOGGING": "observability.structured_logging",
    "HTTPBACKOFF_LOG_CORRELATION_ID": "observability.log_correlation_id",
}

# Fields typed as strings in the models; their env values are never coerced.
_STRING_PATHS = frozenset({"observability.log_level", "observability.log_file"})

logger = get_logger("config")

_config_manager: ConfigManager | None = None


def _parse_env_value(raw: str, path: str) -> bool | int | float | str:
    if path in _STRING_PATHS:
        return raw
    low = raw.lower()
    if low in {"true", "yes", "on"}:
        return True
    if low in {"false", "no", "off"}:
        return False
    try:
        if "." in raw or "e" in low:
            return float(raw)
        return int(raw)
    except ValueError:
        return raw


def _set_nested(d: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    cur = d
    for p in parts[:-1]:
        cur = cur.setdefault(p, {})
    cur[parts[-1]] = value


def _merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge configuration dictionaries recursively."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_config(result[key], value)
        else:
            result[key] = value
    return result


class ConfigManager:
    """Loads and validates configuration."""

    def __init__(self, config_file: str | Path | None = None):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file. If None, searches for httpbackoff.toml

        """
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config()

    def _find_config_file(self, config_file: str | Path | None) -> Path | None:
        """Find configuration file in standard locations."""
        if config_file:
            return Path(config_file)

        search_paths = [
            Path.cwd() / CONFIG_FILENAME,
            Path.home() / ".config" / "httpbackoff" / CONFIG_FILENAME,
        ]
        for path in search_paths:
            if path.exists():
                return path
        return None

    def _read_config_file(self) -> dict[str, Any]:
        if not self.config_file or not self.config_file.exists():
            return {}
        try:
            with open(self.config_file, encoding="utf-8") as f:
                return toml.load(f)
        except (OSError, toml.TomlDecodeError) as e:
            logger.warning("Failed to load config file %s: %s", self.config_file, e)
            return {}

    def _get_env_config(self) -> dict[str, Any]:
        """Get configuration from environment variables."""
        env_config: dict[str, Any] = {}
        for env_name, cfg_path in ENV_MAPPINGS.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            _set_nested(env_config, cfg_path, _parse_env_value(raw, cfg_path))
        return env_config

    def _load_config(self) -> Config:
        """Load configuration from file and environment."""
        config_data = _merge_config(self._read_config_file(), self._get_env_config())
        try:
            config = Config(**config_data)
        except ValidationError as e:
            msg = "Invalid httpbackoff configuration"
            raise ConfigurationError(
                msg,
                source=str(self.config_file) if self.config_file else "environment",
                errors=(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ),
            ) from e
        logger.debug(
            "Loaded configuration (file=%s, min_delay=%s, max_delay=%s)",
            self.config_file,
            config.backoff.min_delay,
            config.backoff.max_delay,
        )
        return config

    def reload(self) -> Config:
        """Reload configuration from file and environment."""
        self.config = self._load_config()
        return self.config

    def export(self) -> str:
        """Export current configuration as TOML."""
        data = self.config.model_dump(mode="json", exclude_none=True)
        return toml.dumps(data)


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager.config


def init_config(config_file: str | Path | None = None) -> ConfigManager:
    """Initialize the global configuration manager."""
    global _config_manager
    _config_manager = ConfigManager(config_file)
    return _config_manager


def set_config(new_config: Config) -> None:
    """Replace the global configuration at runtime."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    _config_manager.config = new_config
    logger.debug("Configuration replaced at runtime")


def reset_config() -> None:
    """Drop the global configuration so the next access reloads it."""
    global _config_manager
    _config_manager = None


def get_backoff_config() -> BackoffConfig:
    """Get backoff configuration."""
    return get_config().backoff
