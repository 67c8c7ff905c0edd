"""
Identifier Resolver - Parse and build explorer node identifiers

Structured identifiers are dot-separated, prefix-tagged segments:

    db:<database>.schema:<schema>.table:<table>
    db:<database>.schema:<schema>.view:<view>
    schema:<schema>.func:<function>
    db:<database>.schema:<schema>.folder:<label>

Legacy identifiers ("schema.table" or a bare table name) still resolve.
Resolution never fails; unrecognized input degrades to a table in the
default schema.
"""

from typing import Optional

from ..constants import DEFAULT_SCHEMA
from .models import NodeKind, ParsedIdentifier

import logging
logger = logging.getLogger(__name__)


# Segment prefix -> node kind for object segments
OBJECT_PREFIXES = {
    "table": NodeKind.TABLE,
    "view": NodeKind.VIEW,
    "func": NodeKind.FUNCTION,
}

_KIND_PREFIXES = {kind: prefix for prefix, kind in OBJECT_PREFIXES.items()}

STRUCTURED_MARKERS = ("db:", "schema:", "table:", "view:", "func:")
FOLDER_MARKER = ".folder:"


def _segment_value(segment: str) -> str:
    """Value part of a "prefix:value" segment."""
    return segment.partition(":")[2]


def resolve_identifier(node_id: str) -> ParsedIdentifier:
    """
    Resolve a node identifier into its database/schema/table parts.

    Precedence:
        1. Structured markers (db:, schema:, table:, view:, func:) anywhere
           in the string. A ".folder:" segment forces kind=folder.
        2. Legacy "schema.table" pair.
        3. Bare table name in the default schema.

    Args:
        node_id: Identifier string from the explorer tree or a tab

    Returns:
        ParsedIdentifier (never raises)
    """
    node_id = node_id or ""

    if any(marker in node_id for marker in STRUCTURED_MARKERS):
        return _resolve_structured(node_id)

    if "." in node_id:
        parts = node_id.split(".")
        return ParsedIdentifier(schema=parts[0], table=parts[1], kind=NodeKind.TABLE)

    if not node_id:
        logger.debug("Empty identifier resolved as table in default schema")
    return ParsedIdentifier(schema=DEFAULT_SCHEMA, table=node_id, kind=NodeKind.TABLE)


def _resolve_structured(node_id: str) -> ParsedIdentifier:
    segments = node_id.split(".")

    db_part = next((s for s in segments if s.startswith("db:")), None)
    schema_part = next((s for s in segments if s.startswith("schema:")), None)
    object_part = next(
        (s for s in segments if s.split(":", 1)[0] in OBJECT_PREFIXES and ":" in s),
        None
    )

    database = _segment_value(db_part) if db_part else None
    schema = _segment_value(schema_part) if schema_part else DEFAULT_SCHEMA
    table = None

    if object_part:
        prefix, _, table = object_part.partition(":")
        kind = OBJECT_PREFIXES[prefix]
    elif schema_part:
        kind = NodeKind.SCHEMA
    elif db_part:
        kind = NodeKind.DATABASE
    else:
        kind = NodeKind.UNKNOWN

    if FOLDER_MARKER in node_id:
        kind = NodeKind.FOLDER

    return ParsedIdentifier(database=database, schema=schema, table=table, kind=kind)


def format_identifier(parsed: ParsedIdentifier) -> str:
    """
    Emit the structured string form of a parsed identifier.

    Inverse of resolve_identifier() for database, schema, table, view and
    function kinds. Folders and unknown kinds cannot be rebuilt from their
    parts and raise ValueError.
    """
    if parsed.kind == NodeKind.DATABASE:
        if not parsed.database:
            raise ValueError("database identifier requires a database name")
        return database_id(parsed.database)

    if parsed.kind == NodeKind.SCHEMA:
        return schema_id(parsed.schema, parsed.database)

    prefix = _KIND_PREFIXES.get(parsed.kind)
    if prefix is None or not parsed.table:
        raise ValueError(f"cannot format identifier of kind {parsed.kind.value!r}")
    return f"{schema_id(parsed.schema, parsed.database)}.{prefix}:{parsed.table}"


# ==================== Hierarchy ids ====================

def database_id(database: str) -> str:
    return f"db:{database}"


def schema_id(schema: str, database: Optional[str] = None) -> str:
    if database:
        return f"db:{database}.schema:{schema}"
    return f"schema:{schema}"


def object_id(kind: NodeKind, name: str, schema: str,
              database: Optional[str] = None) -> str:
    """Identifier of a table, view or function under a schema."""
    prefix = _KIND_PREFIXES.get(kind)
    if prefix is None:
        raise ValueError(f"not an object kind: {kind!r}")
    return f"{schema_id(schema, database)}.{prefix}:{name}"


def folder_id(parent_id: str, label: str) -> str:
    """Identifier of an organizational folder below a schema node."""
    return f"{parent_id}{FOLDER_MARKER}{label}"


def folder_label(node_id: str) -> Optional[str]:
    """Label of the trailing folder segment, or None."""
    if FOLDER_MARKER not in node_id:
        return None
    return node_id.rsplit(FOLDER_MARKER, 1)[1]
