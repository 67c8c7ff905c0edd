"""
Dialect Quoting Rules - Identifier escaping and qualified names

Only identifiers (schema, table, column, constraint names) go through these
functions. Literal values are encoded by schemaforge.database.literals.
"""

from typing import Tuple, Union

from .models import Dialect

import logging
logger = logging.getLogger(__name__)


# Quote characters per dialect: (open, close)
_QUOTE_CHARS = {
    Dialect.POSTGRES: ('"', '"'),
    Dialect.MYSQL: ("`", "`"),
    Dialect.MSSQL: ("[", "]"),
}

_DEFAULT_QUOTE_CHARS = ('"', '"')


def quote_chars(dialect: Union[Dialect, str, None]) -> Tuple[str, str]:
    """
    Opening and closing quote characters for a dialect.

    Unknown dialect names fall back to double quotes.
    """
    try:
        return _QUOTE_CHARS[Dialect.parse(dialect)]
    except ValueError:
        logger.warning(f"No quoting rules for dialect {dialect!r}, using double quotes")
        return _DEFAULT_QUOTE_CHARS


def quote_identifier(name: str, dialect: Union[Dialect, str, None] = Dialect.POSTGRES) -> str:
    """
    Quote a SQL identifier.

    The closing quote character is doubled inside the name, so any name
    (including one containing quote characters) stays a single identifier.

    Args:
        name: Raw identifier name
        dialect: Target dialect

    Returns:
        e.g. "my_table", `my_table` or [my_table]
    """
    open_char, close_char = quote_chars(dialect)
    escaped = str(name).replace(close_char, close_char * 2)
    return f"{open_char}{escaped}{close_char}"


def unquote_identifier(quoted: str, dialect: Union[Dialect, str, None] = Dialect.POSTGRES) -> str:
    """Reverse quote_identifier()."""
    open_char, close_char = quote_chars(dialect)
    if len(quoted) >= 2 and quoted.startswith(open_char) and quoted.endswith(close_char):
        quoted = quoted[1:-1]
    return quoted.replace(close_char * 2, close_char)


def qualify(schema: str, table: str, dialect: Union[Dialect, str, None] = Dialect.POSTGRES) -> str:
    """
    Build a schema-qualified table reference.

    Returns:
        e.g. "public"."users" or [dbo].[Orders]
    """
    return f"{quote_identifier(schema, dialect)}.{quote_identifier(table, dialect)}"
