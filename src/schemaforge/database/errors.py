"""
Error types raised by the SchemaForge core.

None of these are process-fatal: callers display them and let the user
decide (retry the save, discard edits, inspect the data). The core never
retries a failed statement.
"""

from typing import Any, List, Optional, Sequence


class SchemaForgeError(Exception):
    """Base class for all SchemaForge errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class UnsupportedDialectError(SchemaForgeError, ValueError):
    """Raised when a dialect name is not one of postgres, mysql, mssql."""

    def __init__(self, dialect: Any):
        super().__init__(f"Unsupported database dialect: {dialect!r}")
        self.dialect = dialect


class QueryError(SchemaForgeError):
    """
    A statement failed on the server.

    The driver message is kept verbatim in ``message``; ``describe()`` adds
    a user-facing explanation.
    """

    def __init__(self, message: str, sql: str = "", dialect: Any = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.sql = sql
        self.dialect = dialect

    def describe(self) -> str:
        """Return a formatted explanation suitable for display."""
        from ..utils.error_messages import format_query_error
        return format_query_error(self.cause or self, self.dialect)


class BatchPartialFailure(SchemaForgeError):
    """
    A sequential batch stopped at its first failing item.

    Items before ``failed_index`` were applied and are not rolled back;
    the failing item and everything after it were not applied.
    """

    def __init__(self, failed_index: int, total: int,
                 applied: Sequence[Any], remaining: Sequence[Any],
                 cause: Optional[BaseException] = None):
        reason = getattr(cause, "message", None) or str(cause or "")
        message = f"failed at operation {failed_index + 1} of {total}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, cause)
        self.failed_index = failed_index
        self.total = total
        self.applied: List[Any] = list(applied)
        self.remaining: List[Any] = list(remaining)


class SchemaOperationError(SchemaForgeError, ValueError):
    """A schema operation is malformed or cannot be expressed in the dialect."""


class MissingPrimaryKeyError(SchemaForgeError):
    """A row mutation needs a single primary-key column and none was resolved."""


class EditSessionError(SchemaForgeError):
    """A row edit session transition is not valid in the current state."""


class ConfirmationRequiredError(SchemaForgeError):
    """A destructive action was invoked without explicit confirmation."""


class InvalidDatabaseNameError(SchemaForgeError, ValueError):
    """A database name contains characters outside [A-Za-z0-9_-]."""

    def __init__(self, name: str):
        super().__init__(
            f"Invalid database name {name!r}. Only alphanumeric characters, "
            "underscores, and hyphens are allowed."
        )
        self.name = name
