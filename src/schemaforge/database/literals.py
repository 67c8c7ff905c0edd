"""
Literal encoding - SQL text for values embedded in generated statements

format_value() encodes Python values. coerce_insert_value() encodes the raw
text typed into the insert row of the data grid, sniffing NULL, booleans and
numbers first:

    1. "null"  (any case)          -> NULL
    2. "true" / "false" (any case) -> TRUE / FALSE   (1 / 0 on SQL Server)
    3. a complete decimal number    -> emitted unquoted
    4. anything else                -> quoted string

The sniffing cannot tell a text value "true" or "42" from the boolean or the
number. Callers that need the literal text must use format_value() instead.
"""

import datetime
import decimal
import math
import re
from typing import Any, Optional, Union

from .models import Dialect

# Optional sign, digits with optional fraction (or a bare fraction), optional exponent
NUMERIC_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def _dialect_or_none(dialect: Union[Dialect, str, None]) -> Optional[Dialect]:
    if dialect is None:
        return None
    try:
        return Dialect.parse(dialect)
    except ValueError:
        return None


def quote_string(text: str, dialect: Union[Dialect, str, None] = None) -> str:
    """
    Single-quote a string, doubling embedded single quotes.

    MySQL also treats backslash as an escape character inside string
    literals (unless NO_BACKSLASH_ESCAPES is set), so backslashes are
    doubled for that dialect.
    """
    escaped = text.replace("'", "''")
    if _dialect_or_none(dialect) == Dialect.MYSQL:
        escaped = escaped.replace("\\", "\\\\")
    return f"'{escaped}'"


def boolean_literal(value: bool, dialect: Union[Dialect, str, None] = None) -> str:
    """TRUE/FALSE, or 1/0 for SQL Server which has no boolean literal."""
    if _dialect_or_none(dialect) == Dialect.MSSQL:
        return "1" if value else "0"
    return "TRUE" if value else "FALSE"


def _bytes_literal(value: bytes, dialect: Optional[Dialect]) -> str:
    hex_text = value.hex()
    if dialect == Dialect.MSSQL:
        return f"0x{hex_text}"
    if dialect == Dialect.MYSQL:
        return f"X'{hex_text}'"
    return f"'\\x{hex_text}'"


def format_value(value: Any, dialect: Union[Dialect, str, None] = None) -> str:
    """
    Encode a Python value as a SQL literal.

    Args:
        value: None, bool, number, bytes, date/time or anything with str()
        dialect: Target dialect (changes booleans, bytes and MySQL escaping)

    Returns:
        Literal text safe to embed in a statement
    """
    resolved = _dialect_or_none(dialect)

    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return boolean_literal(value, resolved)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value):
            return repr(value)
        return quote_string(str(value), resolved)
    if isinstance(value, decimal.Decimal):
        if value.is_finite():
            return str(value)
        return quote_string(str(value), resolved)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _bytes_literal(bytes(value), resolved)
    if isinstance(value, datetime.datetime):
        return quote_string(value.isoformat(sep=" "), resolved)
    if isinstance(value, (datetime.date, datetime.time)):
        return quote_string(value.isoformat(), resolved)
    return quote_string(str(value), resolved)


def is_numeric_text(text: str) -> bool:
    """True if the whole (stripped) text is a decimal number."""
    return bool(NUMERIC_PATTERN.match(text.strip()))


def coerce_insert_value(raw: str, dialect: Union[Dialect, str, None] = None) -> str:
    """
    Encode raw insert-row text as a SQL literal with type sniffing.

    See the module docstring for the precedence rules.
    """
    resolved = _dialect_or_none(dialect)
    text = raw.strip()
    lowered = text.lower()

    if lowered == "null":
        return "NULL"
    if lowered == "true":
        return boolean_literal(True, resolved)
    if lowered == "false":
        return boolean_literal(False, resolved)
    if is_numeric_text(text):
        return text
    return quote_string(raw, resolved)


def parse_row_key(row_key: str) -> Any:
    """
    Best-effort Python value for a row key string.

    Integer-looking keys become int, other numeric keys float, anything
    else stays a string.
    """
    text = row_key.strip()
    if re.match(r"^[+-]?\d+$", text):
        return int(text)
    if is_numeric_text(text):
        return float(text)
    return row_key
