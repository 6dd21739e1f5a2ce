"""
Configuration Service Module

YAML-backed settings for the filter effect: audio format, starting filter
parameters, response-curve grid and log level.

Sources, later ones winning key by key:
    1. DEFAULT_CONFIG below
    2. config/default_config.yaml (repository template, never written)
    3. the per-user file, or a custom path given to the constructor
"""

from typing import Any, Dict, Optional
from pathlib import Path
import copy
import logging
import os
import sys
import threading

import yaml

logger = logging.getLogger(__name__)

APP_DIR_NAME = "resonant-lowpass"
TEMPLATE_PATH = Path("config") / "default_config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    'audio': {
        'sample_rate': 44100,
        'channels': 2,
        'block_size': 512,
    },
    'filter': {
        'cutoff_hz': 1000.0,
        'resonance_db': 0.0,
        'preset': None,
    },
    'response': {
        'frequency_count': 1024,
        'min_hz': 12.0,
    },
    'logging': {
        'level': 'WARNING',
    },
}

# Keys that must hold a positive number; bad values fall back to DEFAULT_CONFIG
_POSITIVE_KEYS = (
    ('audio.sample_rate', float),
    ('audio.channels', int),
    ('audio.block_size', int),
    ('response.frequency_count', int),
    ('response.min_hz', float),
)


def _lookup(tree: Dict[str, Any], key: str) -> Any:
    node: Any = tree
    for part in key.split('.'):
        node = node[part]
    return node


def _deep_merge(base: Dict, override: Dict) -> None:
    for key, value in override.items():
        if isinstance(base.get(key), dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


class ConfigService:
    """
    Configuration Service - Singleton Pattern

    Usage Example:
        config = ConfigService()
        cutoff = config.get_float("filter.cutoff_hz")

        config.set("filter.cutoff_hz", 800.0)
        config.save()

    Passing a path other than the repository template switches to custom
    mode: that file is both read and written, and the user file is ignored.
    """

    _instance: Optional['ConfigService'] = None
    _lock = threading.Lock()

    def __new__(cls, config_path: str = None) -> 'ConfigService':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: str = None):
        if self._initialized:
            return

        provided = Path(config_path) if config_path else None
        self._custom = provided is not None and provided != TEMPLATE_PATH
        self._save_path = provided if self._custom else self._get_user_config_path()

        self._config: Dict[str, Any] = {}
        self._data_lock = threading.RLock()
        self._initialized = True

        self._load()

    @staticmethod
    def _get_user_config_path() -> Path:
        """Per-user config file (platform-specific)"""
        if sys.platform == "win32":
            base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
        return base / APP_DIR_NAME / "config.yaml"

    @property
    def config_path(self) -> Path:
        """File that save() writes to"""
        return self._save_path

    def _load(self) -> None:
        config = copy.deepcopy(DEFAULT_CONFIG)
        sources = [self._save_path] if self._custom else [TEMPLATE_PATH, self._save_path]
        for path in sources:
            loaded = self._read_yaml(path)
            if loaded:
                _deep_merge(config, loaded)
        self._config = config
        self._validate()

    @staticmethod
    def _read_yaml(path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load configuration %s: %s", path, e)
            return None
        if not isinstance(loaded, dict):
            logger.warning("Ignoring configuration %s: top level is not a mapping", path)
            return None
        return loaded

    def _validate(self) -> None:
        """Replace non-positive or non-numeric values of the numeric keys."""
        for key, kind in _POSITIVE_KEYS:
            value = self.get(key)
            try:
                ok = not isinstance(value, bool) and kind(value) > 0
            except (TypeError, ValueError):
                ok = False
            if not ok:
                fallback = _lookup(DEFAULT_CONFIG, key)
                logger.warning("Invalid %s=%r, using %r", key, value, fallback)
                self.set(key, fallback)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key, e.g. "filter.cutoff_hz"
            default: Returned when the key is missing
        """
        with self._data_lock:
            try:
                return _lookup(self._config, key)
            except (KeyError, TypeError):
                return default

    def get_float(self, key: str) -> float:
        """Numeric value, falling back to the built-in default."""
        return float(self.get(key, _lookup(DEFAULT_CONFIG, key)))

    def get_int(self, key: str) -> int:
        return int(self.get(key, _lookup(DEFAULT_CONFIG, key)))

    def set(self, key: str, value: Any) -> None:
        """Set a value, creating intermediate sections as needed."""
        *parents, leaf = key.split('.')
        with self._data_lock:
            node = self._config
            for part in parents:
                if not isinstance(node.get(part), dict):
                    node[part] = {}
                node = node[part]
            node[leaf] = value

    def get_all(self) -> Dict[str, Any]:
        with self._data_lock:
            return copy.deepcopy(self._config)

    def save(self) -> bool:
        """
        Write the current configuration to config_path.

        Returns:
            bool: True if saving was successful.
        """
        try:
            self._save_path.parent.mkdir(parents=True, exist_ok=True)
            with self._data_lock:
                with open(self._save_path, 'w', encoding='utf-8') as f:
                    yaml.safe_dump(self._config, f, allow_unicode=True, default_flow_style=False)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save configuration: %s", e)
            return False
        logger.debug("Configuration saved to: %s", self._save_path)
        return True

    def reload(self) -> bool:
        """Re-read every source, discarding unsaved changes."""
        with self._data_lock:
            self._load()
        return True

    def reset(self) -> None:
        """Back to the built-in defaults (files untouched)."""
        with self._data_lock:
            self._config = copy.deepcopy(DEFAULT_CONFIG)

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing only)."""
        with cls._lock:
            cls._instance = None
