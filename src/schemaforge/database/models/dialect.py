"""
Dialect model - Closed set of supported SQL dialects
"""
from enum import Enum
from typing import Union

from ..errors import UnsupportedDialectError


class Dialect(str, Enum):
    """SQL dialects understood by the core."""
    POSTGRES = "postgres"
    MYSQL = "mysql"
    MSSQL = "mssql"

    @classmethod
    def parse(cls, value: Union[str, "Dialect"]) -> "Dialect":
        """
        Validate a connection type once, at the adapter boundary.

        Accepts the canonical names and the aliases used by connection
        configurations (postgresql, pg, mariadb, sqlserver).

        Raises:
            UnsupportedDialectError: for any other value
        """
        if isinstance(value, Dialect):
            return value
        if not isinstance(value, str):
            raise UnsupportedDialectError(value)
        key = value.strip().lower()
        dialect = _ALIASES.get(key)
        if dialect is None:
            raise UnsupportedDialectError(value)
        return dialect


_ALIASES = {
    "postgres": Dialect.POSTGRES,
    "postgresql": Dialect.POSTGRES,
    "pg": Dialect.POSTGRES,
    "mysql": Dialect.MYSQL,
    "mariadb": Dialect.MYSQL,
    "mssql": Dialect.MSSQL,
    "sqlserver": Dialect.MSSQL,
}
