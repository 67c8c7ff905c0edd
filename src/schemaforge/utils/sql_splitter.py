"""
SQL Splitter - Break query-editor text into executable statements.

SQL Server scripts are first cut into batches on GO lines; each batch (or
the whole text for other dialects) is then split on semicolons by sqlparse,
which keeps semicolons inside strings and comments intact.
"""

import re
from dataclasses import dataclass
from typing import List, Tuple, Union

import sqlparse

from ..database.models import Dialect

import logging
logger = logging.getLogger(__name__)

# GO alone on its line, optionally followed by a repeat count we ignore
GO_PATTERN = re.compile(r'^\s*GO(?:\s+\d+)?\s*$', re.IGNORECASE)

ROW_RETURNING_KEYWORDS = {
    'SELECT', 'WITH', 'SHOW', 'DESCRIBE', 'DESC', 'EXPLAIN', 'VALUES',
    'TABLE', 'EXEC', 'EXECUTE',
}


@dataclass
class SQLStatement:
    """One statement cut from a script."""
    text: str
    line_start: int     # 1-based
    line_end: int
    returns_rows: bool


def split_sql_statements(sql_text: str,
                         dialect: Union[Dialect, str] = Dialect.POSTGRES) -> List[SQLStatement]:
    """
    Split SQL text into individual statements.

    Args:
        sql_text: Editor contents, possibly several statements
        dialect: Target dialect; GO batches are honored for mssql only

    Returns:
        Statements in source order (empty list for blank input)
    """
    if not sql_text or not sql_text.strip():
        return []

    if Dialect.parse(dialect) == Dialect.MSSQL:
        batches = _split_on_go(sql_text)
    else:
        batches = [(sql_text, 1)]

    statements = []
    for batch_text, first_line in batches:
        offset = 0
        for chunk in sqlparse.split(batch_text):
            text = chunk.strip()
            if not text:
                continue
            position = batch_text.find(text, offset)
            if position < 0:
                position = offset
            else:
                offset = position + len(text)
            line_start = first_line + batch_text.count('\n', 0, position)
            statements.append(SQLStatement(
                text=text,
                line_start=line_start,
                line_end=line_start + text.count('\n'),
                returns_rows=returns_rows(text),
            ))

    logger.debug(f"Split script into {len(statements)} statement(s)")
    return statements


def _split_on_go(sql_text: str) -> List[Tuple[str, int]]:
    """
    Cut T-SQL text into batches at GO separator lines.

    Returns:
        List of (batch_text, start_line) tuples, empty batches dropped
    """
    batches = []
    current: List[str] = []
    start = 1

    for number, line in enumerate(sql_text.split('\n'), 1):
        if GO_PATTERN.match(line):
            if any(part.strip() for part in current):
                batches.append(('\n'.join(current), start))
            current = []
            start = number + 1
        else:
            current.append(line)

    if any(part.strip() for part in current):
        batches.append(('\n'.join(current), start))

    return batches


def returns_rows(stmt_text: str) -> bool:
    """
    Guess whether a statement produces a result set from its first keyword.

    INSERT/UPDATE/DELETE with RETURNING or OUTPUT are not detected; the
    adapter checks cursor.description after execution anyway.
    """
    cleaned = sqlparse.format(stmt_text, strip_comments=True).strip()
    if not cleaned:
        return False
    first_word = cleaned.split(None, 1)[0].upper().rstrip(';')
    return first_word in ROW_RETURNING_KEYWORDS
