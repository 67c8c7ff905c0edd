"""
ParsedIdentifier model - Resolved explorer node address
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...constants import DEFAULT_SCHEMA


class NodeKind(str, Enum):
    """Kinds of explorer nodes an identifier can address."""
    DATABASE = "database"
    SCHEMA = "schema"
    TABLE = "table"
    VIEW = "view"
    FUNCTION = "function"
    FOLDER = "folder"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ParsedIdentifier:
    """Database/schema/table parts of a node identifier."""
    database: Optional[str] = None
    schema: str = DEFAULT_SCHEMA
    table: Optional[str] = None
    kind: NodeKind = NodeKind.UNKNOWN

    @property
    def is_queryable(self) -> bool:
        """True for tables and views (folders and routines are not)."""
        return self.kind in (NodeKind.TABLE, NodeKind.VIEW) and bool(self.table)
