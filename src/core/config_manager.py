"""Thread-safe singleton configuration for thingtree.

Settings live in ``config/settings.yaml`` and are read once. Keys missing
from the file fall back to DEFAULT_CONFIG, and values that fail validation
are repaired or replaced by their default.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from src.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_PATH = PROJECT_ROOT / "config" / "settings.yaml"

# Default configuration template
DEFAULT_CONFIG = {
    "app": {
        "version": "1.0.0",
        "log_level": "INFO",
    },
    "reddit": {
        "request_interval_sec": 6,
        "max_retries": 3,
        "mock_mode": False,
    },
    "tree": {
        "strict_attach": False,
    },
    "security": {
        "mask_logs": True,
    },
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _lookup(config: dict, key: str, default=None) -> Any:
    node = config
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def _merged(defaults: dict, overrides: dict) -> dict:
    """Copy of ``defaults`` with ``overrides`` applied section by section."""
    result = {}
    for key, value in defaults.items():
        if isinstance(value, dict):
            section = overrides.get(key)
            result[key] = _merged(value, section if isinstance(section, dict) else {})
        else:
            result[key] = overrides.get(key, value)
    for key, value in overrides.items():
        result.setdefault(key, value)
    return result


def _log_level(value: Any) -> str:
    level = str(value).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
    return level


def _at_least(minimum: int) -> Callable[[Any], int]:
    def check(value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError("must be an integer")
        return max(minimum, int(value))
    return check


def _flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError("must be true or false")
    return value


VALIDATORS: dict[str, Callable[[Any], Any]] = {
    "app.log_level": _log_level,
    "reddit.request_interval_sec": _at_least(3),
    "reddit.max_retries": _at_least(0),
    "reddit.mock_mode": _flag,
    "tree.strict_attach": _flag,
    "security.mask_logs": _flag,
}


class ConfigManager:
    """Singleton holding the validated settings.

    The file is created from DEFAULT_CONFIG when it does not exist. Values
    are read with dot-notation keys, e.g. ``config.get("tree.strict_attach")``.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls, config_path: Optional[Path] = None):
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance.config_path = Path(config_path) if config_path else CONFIG_PATH
                instance._config = instance._load()
                cls._instance = instance
            return cls._instance

    def _load(self) -> dict:
        if not self.config_path.exists():
            config = _merged(DEFAULT_CONFIG, {})
            self._write(config)
            logger.info(f"Created default configuration at {self.config_path}")
            return config

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to read {self.config_path}: {e}")
            logger.warning("Using DEFAULT_CONFIG")
            return _merged(DEFAULT_CONFIG, {})

        if not isinstance(loaded, dict):
            logger.warning(f"{self.config_path} is not a mapping. Using DEFAULT_CONFIG")
            return _merged(DEFAULT_CONFIG, {})

        logger.info(f"Loaded configuration from {self.config_path}")
        config = _merged(DEFAULT_CONFIG, loaded)
        self._validate(config)
        return config

    @staticmethod
    def _validate(config: dict) -> None:
        for key, check in VALIDATORS.items():
            section, name = key.split(".")
            value = config[section][name]
            try:
                fixed = check(value)
            except (TypeError, ValueError) as e:
                fixed = _lookup(DEFAULT_CONFIG, key)
                logger.warning(f"Invalid {key} {value!r} ({e}). Using {fixed!r}.")
            else:
                if fixed != value:
                    logger.warning(f"{key} {value!r} adjusted to {fixed!r}")
            config[section][name] = fixed

    def _write(self, config: dict) -> None:
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to write configuration: {e}")
            raise ConfigError(f"Failed to write configuration: {e}")

    def get(self, key: str, default=None) -> Any:
        """Get a value by dot-notation key, or ``default`` if it is not set."""
        return _lookup(self._config, key, default)

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next call reloads the file (for testing)."""
        with cls._lock:
            cls._instance = None
