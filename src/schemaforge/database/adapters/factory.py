"""
Adapter Factory - Create the adapter for a connection configuration
"""

from typing import Any, Callable, Dict, Optional, Type, Union

from ...config.settings import ExplorerSettings
from ...utils.connection_helpers import connect_factory
from ..models import ConnectionConfig, Dialect
from .base import DatabaseAdapter

import logging
logger = logging.getLogger(__name__)


class AdapterFactory:
    """
    Factory for database adapters.

    The connection type string is validated here, once; adapters and
    everything below them work with the Dialect enum.

    Usage:
        adapter = AdapterFactory.create(config, settings=settings)
    """

    _adapters: Dict[Dialect, Type[DatabaseAdapter]] = {}

    @classmethod
    def create(
        cls,
        config: ConnectionConfig,
        settings: Optional[ExplorerSettings] = None,
        connect: Optional[Callable[[Optional[str]], Any]] = None,
        default_database: Optional[str] = None
    ) -> DatabaseAdapter:
        """
        Create an adapter for a connection.

        Args:
            config: Connection description (db_type, connection_string...)
            settings: Explorer settings passed to the adapter
            connect: ``connect(database)`` override; defaults to the driver
                helper for config.db_type
            default_database: Name of the connection's own database

        Raises:
            UnsupportedDialectError: config.db_type is not supported
        """
        dialect = Dialect.parse(config.db_type)
        adapter_class = cls._adapters[dialect]
        if connect is None:
            connect = connect_factory(dialect, config.connection_string)

        logger.debug(f"Creating {adapter_class.__name__} for connection '{config.name}'")
        return adapter_class(
            connect,
            settings=settings,
            default_database=default_database,
            show_all_databases=config.show_all_databases,
        )

    @classmethod
    def register(cls, dialect: Union[Dialect, str], adapter_class: Type[DatabaseAdapter]):
        cls._adapters[Dialect.parse(dialect)] = adapter_class


def _register_default_adapters():
    """Register built-in adapters. Called on module import."""
    from .postgres_adapter import PostgresAdapter
    from .mysql_adapter import MySQLAdapter
    from .sqlserver_adapter import SQLServerAdapter

    AdapterFactory.register(Dialect.POSTGRES, PostgresAdapter)
    AdapterFactory.register(Dialect.MYSQL, MySQLAdapter)
    AdapterFactory.register(Dialect.MSSQL, SQLServerAdapter)


_register_default_adapters()
