"""
SQL Server Adapter - pyodbc connections
"""

from ..models import Dialect
from .base import DatabaseAdapter


class SQLServerAdapter(DatabaseAdapter):
    """SQL Server connection; default schema dbo, qmark parameters."""

    dialect = Dialect.MSSQL
