"""
Error Messages - User-friendly explanations of driver errors

Statement failures are reported verbatim by the adapter (QueryError.message);
this module adds a title and a suggestion for display.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..database.models import Dialect

import logging
logger = logging.getLogger(__name__)


@dataclass
class ErrorInfo:
    """Structured error explanation."""
    title: str
    message: str
    suggestion: str
    original_error: str

    def format_full(self) -> str:
        parts = [self.title, "", self.message]
        if self.suggestion:
            parts.extend(["", "Suggestion:", self.suggestion])
        return "\n".join(parts)


# (regex_pattern, title, message_template, suggestion)
# {match} in message_template is replaced by regex group(1)
Pattern = Tuple[str, str, str, str]

POSTGRES_PATTERNS: List[Pattern] = [
    (
        r'relation "([^"]+)" does not exist',
        "Unknown table",
        "The table or view '{match}' does not exist.",
        "Refresh the explorer; the object may have been renamed or dropped."
    ),
    (
        r'column "([^"]+)" (?:of relation "[^"]+" )?does not exist',
        "Unknown column",
        "The column '{match}' does not exist.",
        "Reload the table metadata before editing."
    ),
    (
        r'duplicate key value violates unique constraint "([^"]+)"',
        "Duplicate key",
        "The change violates the unique constraint '{match}'.",
        "Use a value that is not already present."
    ),
    (
        r'violates foreign key constraint "([^"]+)"',
        "Foreign key violation",
        "The change violates the foreign key '{match}'.",
        "Create or keep the referenced row first."
    ),
    (
        r'null value in column "([^"]+)"',
        "Missing value",
        "The column '{match}' does not accept NULL.",
        "Provide a value for every NOT NULL column."
    ),
    (
        r'database "([^"]+)" is being accessed by other users',
        "Database in use",
        "The database '{match}' still has open sessions.",
        "Close other clients connected to it and retry."
    ),
    (
        r"password authentication failed for user ['\"]?(\w+)['\"]?",
        "Authentication failed",
        "Wrong password for user '{match}'.",
        "Check the credentials of the connection."
    ),
]

MYSQL_PATTERNS: List[Pattern] = [
    (
        r"Table '([^']+)' doesn't exist",
        "Unknown table",
        "The table '{match}' does not exist.",
        "Refresh the explorer; the object may have been renamed or dropped."
    ),
    (
        r"Unknown column '([^']+)'",
        "Unknown column",
        "The column '{match}' does not exist.",
        "Reload the table metadata before editing."
    ),
    (
        r"Duplicate entry '([^']*)'",
        "Duplicate key",
        "The value '{match}' already exists in a unique key.",
        "Use a value that is not already present."
    ),
    (
        r"a foreign key constraint fails",
        "Foreign key violation",
        "The change violates a foreign key constraint.",
        "Create or keep the referenced row first."
    ),
    (
        r"Column '([^']+)' cannot be null",
        "Missing value",
        "The column '{match}' does not accept NULL.",
        "Provide a value for every NOT NULL column."
    ),
    (
        r"Access denied for user '([^']+)'",
        "Access denied",
        "User '{match}' is not allowed to perform this operation.",
        "Ask the database administrator for the required privileges."
    ),
]

MSSQL_PATTERNS: List[Pattern] = [
    (
        r"Invalid object name '([^']+)'",
        "Unknown table",
        "The object '{match}' does not exist.",
        "Refresh the explorer; the object may have been renamed or dropped."
    ),
    (
        r"Invalid column name '([^']+)'",
        "Unknown column",
        "The column '{match}' does not exist.",
        "Reload the table metadata before editing."
    ),
    (
        r"Violation of (?:PRIMARY KEY|UNIQUE KEY) constraint '([^']+)'",
        "Duplicate key",
        "The change violates the constraint '{match}'.",
        "Use a value that is not already present."
    ),
    (
        r"conflicted with the FOREIGN KEY constraint \"([^\"]+)\"",
        "Foreign key violation",
        "The change violates the foreign key '{match}'.",
        "Create or keep the referenced row first."
    ),
    (
        r"Cannot insert the value NULL into column '([^']+)'",
        "Missing value",
        "The column '{match}' does not accept NULL.",
        "Provide a value for every NOT NULL column."
    ),
    (
        r"Login failed for user ['\"]?([^'\"]+)['\"]?",
        "Authentication failed",
        "User '{match}' could not log in.",
        "Check the credentials of the connection."
    ),
    (
        r"(?:ODBC Driver|driver).*(?:not found|can't open lib)",
        "ODBC driver missing",
        "The ODBC driver for SQL Server is not installed.",
        "Install 'ODBC Driver 18 for SQL Server'."
    ),
]

# Checked after the dialect-specific patterns
GENERIC_PATTERNS: List[Pattern] = [
    (
        r"(?:syntax error|You have an error in your SQL syntax|Incorrect syntax near)",
        "Syntax error",
        "The statement could not be parsed by the server.",
        "Check the statement near the position reported below."
    ),
    (
        r"(?:permission denied|access denied)",
        "Access denied",
        "You do not have the required permissions.",
        "Ask the database administrator for the required privileges."
    ),
    (
        r"(?:timeout|timed out)",
        "Timeout",
        "The server did not answer in time.",
        "Check the network connection and retry."
    ),
    (
        r"(?:connection refused|could not connect|actively refused)",
        "Connection refused",
        "The database server refused the connection.",
        "Check that the server is running and reachable."
    ),
]

_DIALECT_PATTERNS = {
    Dialect.POSTGRES: POSTGRES_PATTERNS,
    Dialect.MYSQL: MYSQL_PATTERNS,
    Dialect.MSSQL: MSSQL_PATTERNS,
}


def _patterns_for(dialect: Any) -> List[Pattern]:
    try:
        return _DIALECT_PATTERNS[Dialect.parse(dialect)] + GENERIC_PATTERNS
    except ValueError:
        return POSTGRES_PATTERNS + MYSQL_PATTERNS + MSSQL_PATTERNS + GENERIC_PATTERNS


def parse_query_error(error: BaseException, dialect: Optional[Any] = None) -> ErrorInfo:
    """
    Match a driver error against known patterns.

    Args:
        error: The exception raised by the driver (or a QueryError)
        dialect: Dialect of the connection; None tries every dialect

    Returns:
        ErrorInfo, with a generic title when nothing matched
    """
    original = getattr(error, "message", None) or str(error)

    for pattern, title, template, suggestion in _patterns_for(dialect):
        match = re.search(pattern, original, re.IGNORECASE)
        if match:
            message = template
            if "{match}" in message and match.groups():
                message = message.replace("{match}", match.group(1))
            return ErrorInfo(title, message, suggestion, original)

    return ErrorInfo(
        title="Statement failed",
        message="The database reported an error.",
        suggestion="",
        original_error=original,
    )


def format_query_error(error: BaseException, dialect: Optional[Any] = None,
                       include_original: bool = True) -> str:
    """
    Format a driver error for display.

    Args:
        error: The exception that occurred
        dialect: Dialect of the connection
        include_original: Whether to append the server message

    Returns:
        Multi-line message
    """
    info = parse_query_error(error, dialect)
    text = info.format_full()
    if include_original:
        text += "\n\n---\nServer message:\n" + info.original_error[:500]
    return text
