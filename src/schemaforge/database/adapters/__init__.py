"""
Database Adapters - Per-dialect execution of core operations

Usage:
    from schemaforge.database.adapters import AdapterFactory

    adapter = AdapterFactory.create(config, settings=settings)
    metadata = adapter.get_metadata("schema:public.table:users")
"""

from .base import DatabaseAdapter, ROOT_ID
from .factory import AdapterFactory
from .connection_service import ConnectionService

from .postgres_adapter import PostgresAdapter
from .mysql_adapter import MySQLAdapter
from .sqlserver_adapter import SQLServerAdapter

__all__ = [
    "DatabaseAdapter",
    "ROOT_ID",
    "AdapterFactory",
    "ConnectionService",
    "PostgresAdapter",
    "MySQLAdapter",
    "SQLServerAdapter",
]
