"""
Explorer Settings - Persistent preferences for the explorer core
"""
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ..constants import (
    METADATA_CACHE_MAXSIZE,
    METADATA_CACHE_TTL_S,
    QUERY_PREVIEW_LIMIT,
)

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = Path('_AppConfig') / 'explorer_settings.json'


class ExplorerSettings:
    """
    Explorer preferences with JSON persistence

    Settings include:
    - preview_limit: Row limit for table previews
    - metadata_cache_ttl / metadata_cache_maxsize: Adapter metadata cache
    - atomic_schema_batches: Run schema batches in one transaction when possible
    - show_all_databases: Browse every database on the server instead of
      the connection's own

    Pass an instance to adapters and services explicitly; get_instance()
    exists for the outer application only.
    """

    DEFAULT_SETTINGS = {
        'preview_limit': QUERY_PREVIEW_LIMIT,
        'metadata_cache_ttl': METADATA_CACHE_TTL_S,
        'metadata_cache_maxsize': METADATA_CACHE_MAXSIZE,
        'atomic_schema_batches': False,
        'show_all_databases': False,
    }

    _instance: Optional['ExplorerSettings'] = None

    def __init__(self, config_file: Union[str, Path, None] = None, autoload: bool = True):
        """
        Args:
            config_file: JSON file to persist to (None = in-memory only)
            autoload: Read config_file immediately if it exists
        """
        self._settings: Dict[str, Any] = self.DEFAULT_SETTINGS.copy()
        self._config_file = Path(config_file) if config_file else None
        self._observers: Dict[str, List[Callable[[Any], None]]] = {}

        if autoload and self._config_file is not None:
            self.load()

    @classmethod
    def get_instance(cls) -> 'ExplorerSettings':
        """Application-wide instance persisted in DEFAULT_SETTINGS_FILE"""
        if cls._instance is None:
            cls._instance = cls(DEFAULT_SETTINGS_FILE)
        return cls._instance

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def set(self, key: str, value: Any, save: bool = True):
        """
        Set a value, persist it and notify observers if it changed

        Args:
            key: Setting key
            value: New value
            save: Whether to write the file immediately
        """
        old_value = self._settings.get(key)
        self._settings[key] = value

        if save and self._config_file is not None:
            self.save()

        if old_value != value:
            self._notify_observers(key, value)

        logger.info(f"Setting changed: {key} = {value}")

    @property
    def preview_limit(self) -> int:
        return int(self.get('preview_limit', QUERY_PREVIEW_LIMIT))

    @property
    def metadata_cache_ttl(self) -> float:
        return float(self.get('metadata_cache_ttl', METADATA_CACHE_TTL_S))

    @property
    def metadata_cache_maxsize(self) -> int:
        return int(self.get('metadata_cache_maxsize', METADATA_CACHE_MAXSIZE))

    @property
    def atomic_schema_batches(self) -> bool:
        return bool(self.get('atomic_schema_batches', False))

    @property
    def show_all_databases(self) -> bool:
        return bool(self.get('show_all_databases', False))

    def load(self):
        """Load settings from file, merged over the defaults"""
        if self._config_file is None or not self._config_file.exists():
            logger.info("No explorer settings file found, using defaults")
            return
        try:
            with open(self._config_file, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading explorer settings: {e}")
            self._settings = self.DEFAULT_SETTINGS.copy()
            return

        self._settings = self.DEFAULT_SETTINGS.copy()
        self._settings.update(loaded)
        logger.info(f"Loaded explorer settings from {self._config_file}")

    def save(self):
        """Save settings to file"""
        if self._config_file is None:
            return
        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, 'w', encoding='utf-8') as f:
                json.dump(self._settings, f, indent=2)
            logger.debug(f"Saved explorer settings to {self._config_file}")
        except OSError as e:
            logger.error(f"Error saving explorer settings: {e}")

    def reset_to_defaults(self):
        self._settings = self.DEFAULT_SETTINGS.copy()
        self.save()
        for key, value in self._settings.items():
            self._notify_observers(key, value)

    def register_observer(self, key: str, callback: Callable[[Any], None]):
        """
        Register a callback for setting changes

        Args:
            key: Setting key to observe
            callback: Function(new_value) to call on change
        """
        callbacks = self._observers.setdefault(key, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def unregister_observer(self, key: str, callback: Callable[[Any], None]):
        if callback in self._observers.get(key, []):
            self._observers[key].remove(callback)

    def _notify_observers(self, key: str, value: Any):
        for callback in self._observers.get(key, []):
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Error notifying settings observer {callback}: {e}")

    def get_all(self) -> Dict[str, Any]:
        return self._settings.copy()
