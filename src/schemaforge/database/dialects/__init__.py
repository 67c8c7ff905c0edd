"""
Database Dialects - Database-specific SQL generation and catalog queries

Usage:
    from schemaforge.database.dialects import DialectFactory

    # Statement generation needs no connection
    dialect = DialectFactory.create("mssql")
    query = dialect.generate_select_query("Orders", schema_name="dbo", limit=100)

    # Catalog queries run on the given connection
    dialect = DialectFactory.create("postgres", connection)
    columns = dialect.get_table_columns("users", "public")
"""

from .base import DatabaseDialect
from .factory import DialectFactory

from .postgresql_dialect import PostgreSQLDialect
from .mysql_dialect import MySQLDialect
from .sqlserver_dialect import SQLServerDialect

__all__ = [
    # Base class
    "DatabaseDialect",

    # Factory
    "DialectFactory",

    # Implementations
    "PostgreSQLDialect",
    "MySQLDialect",
    "SQLServerDialect",
]
