"""
Connection Service - Registry of adapters by connection id

Database-level operations arrive with a connection id (the explorer's
"Create database" / "Delete database" dialogs); the service routes them to
that connection's adapter.
"""

import threading
from typing import Any, Callable, Dict, List, Optional

from ...config.settings import ExplorerSettings
from ..errors import SchemaForgeError
from ..models import ConnectionConfig
from .base import DatabaseAdapter
from .factory import AdapterFactory

import logging
logger = logging.getLogger(__name__)


class ConnectionService:
    """
    Adapters keyed by connection id, created on first use.

    Usage:
        service = ConnectionService(settings)
        service.register(config)
        service.create_database(config.id, "analytics")
    """

    def __init__(self, settings: Optional[ExplorerSettings] = None,
                 adapter_factory: Callable[..., DatabaseAdapter] = AdapterFactory.create):
        self.settings = settings or ExplorerSettings()
        self._adapter_factory = adapter_factory
        self._configs: Dict[str, ConnectionConfig] = {}
        self._adapters: Dict[str, DatabaseAdapter] = {}
        self._lock = threading.Lock()

    def register(self, config: ConnectionConfig):
        """Add or replace a connection. A replaced connection's adapter is closed."""
        with self._lock:
            self._configs[config.id] = config
            old = self._adapters.pop(config.id, None)
        if old is not None:
            old.close()
        logger.debug(f"Registered connection '{config.name}' ({config.db_type})")

    def add_adapter(self, connection_id: str, adapter: DatabaseAdapter):
        """Use an already built adapter for a connection id."""
        with self._lock:
            self._adapters[connection_id] = adapter

    def get_adapter(self, connection_id: str) -> DatabaseAdapter:
        """
        Raises:
            SchemaForgeError: no connection registered under this id
        """
        with self._lock:
            adapter = self._adapters.get(connection_id)
            if adapter is not None:
                return adapter
            config = self._configs.get(connection_id)
            if config is None:
                raise SchemaForgeError(f"Unknown connection: {connection_id}")
            adapter = self._adapter_factory(config, settings=self.settings)
            self._adapters[connection_id] = adapter
            return adapter

    def connection_ids(self) -> List[str]:
        with self._lock:
            return sorted(set(self._configs) | set(self._adapters))

    def create_database(self, connection_id: str, name: str):
        self.get_adapter(connection_id).create_database(name)

    def drop_database(self, connection_id: str, name: str):
        self.get_adapter(connection_id).drop_database(name)

    def close(self, connection_id: Optional[str] = None):
        """Close one adapter, or all of them."""
        with self._lock:
            if connection_id is None:
                adapters: List[Any] = list(self._adapters.values())
                self._adapters.clear()
            else:
                adapter = self._adapters.pop(connection_id, None)
                adapters = [adapter] if adapter is not None else []
        for adapter in adapters:
            adapter.close()
