"""
Dialect Factory - Create appropriate dialect based on database type
"""

from typing import Any, Dict, List, Optional, Type, Union

from ..models import Dialect
from .base import DatabaseDialect

import logging
logger = logging.getLogger(__name__)


class DialectFactory:
    """
    Factory for creating database dialects.

    Database type strings are validated once here through Dialect.parse();
    everything downstream works with the Dialect enum.

    Usage:
        dialect = DialectFactory.create("postgres", connection)
        query = dialect.generate_select_query("users", limit=100)
    """

    # Registry of supported dialects
    _dialects: Dict[Dialect, Type[DatabaseDialect]] = {}

    @classmethod
    def create(
        cls,
        db_type: Union[Dialect, str],
        connection: Any = None,
        db_name: Optional[str] = None
    ) -> DatabaseDialect:
        """
        Create a dialect for the specified database type.

        Args:
            db_type: Dialect or alias (postgres, postgresql, pg, mysql,
                mariadb, mssql, sqlserver)
            connection: Database connection for catalog queries (optional)
            db_name: Optional target database name

        Returns:
            DatabaseDialect instance

        Raises:
            UnsupportedDialectError: db_type is not a supported dialect
        """
        dialect = Dialect.parse(db_type)
        return cls._dialects[dialect](connection, db_name)

    @classmethod
    def is_supported(cls, db_type: Union[Dialect, str]) -> bool:
        """Check if a database type is supported."""
        try:
            return Dialect.parse(db_type) in cls._dialects
        except ValueError:
            return False

    @classmethod
    def supported_types(cls) -> List[Dialect]:
        return list(cls._dialects.keys())

    @classmethod
    def register(cls, dialect: Dialect, dialect_class: Type[DatabaseDialect]):
        """
        Register a dialect implementation.

        Args:
            dialect: Dialect enum member
            dialect_class: DatabaseDialect subclass
        """
        cls._dialects[dialect] = dialect_class
        logger.debug(f"Registered dialect for: {dialect.value}")


def _register_default_dialects():
    """Register built-in dialects. Called on module import."""
    from .postgresql_dialect import PostgreSQLDialect
    from .mysql_dialect import MySQLDialect
    from .sqlserver_dialect import SQLServerDialect

    DialectFactory.register(Dialect.POSTGRES, PostgreSQLDialect)
    DialectFactory.register(Dialect.MYSQL, MySQLDialect)
    DialectFactory.register(Dialect.MSSQL, SQLServerDialect)


# Register on module import
_register_default_dialects()
