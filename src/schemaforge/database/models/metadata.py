"""
Metadata models - Columns, tables, query results and explorer tree nodes
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ColumnInfo:
    """Column metadata returned by dialect catalog queries."""
    name: str
    type_name: str
    is_nullable: bool = True
    is_primary_key: bool = False
    default_value: Any = None
    pk_constraint_name: Optional[str] = None


@dataclass
class TableMetadata:
    """Columns of one table or view."""
    columns: List[ColumnInfo] = field(default_factory=list)
    row_count: Optional[int] = None

    @property
    def primary_key_columns(self) -> List[str]:
        return [c.name for c in self.columns if c.is_primary_key]

    @property
    def primary_key_column(self) -> Optional[str]:
        """
        The single primary-key column, or None.

        Composite keys return None: the row update/delete path keys rows by
        one column only.
        """
        pk_columns = self.primary_key_columns
        if len(pk_columns) == 1:
            return pk_columns[0]
        return None

    @property
    def pk_constraint_name(self) -> Optional[str]:
        for column in self.columns:
            if column.is_primary_key and column.pk_constraint_name:
                return column.pk_constraint_name
        return None

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


@dataclass
class QueryResult:
    """Rows and column names produced by a statement."""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)
    row_count: Optional[int] = None

    def to_dataframe(self):
        """Return the rows as a pandas DataFrame (columns in result order)."""
        import pandas as pd
        return pd.DataFrame(self.rows, columns=self.columns)


@dataclass
class TreeNode:
    """One node of the explorer hierarchy."""
    id: str
    name: str
    node_type: str
    parent_id: Optional[str] = None
    has_children: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Relationship:
    """A foreign-key column pair."""
    constraint_name: str
    source_table: str
    source_column: str
    target_table: str
    target_column: str


@dataclass
class ConnectionConfig:
    """
    Logical connection description.

    ``connection_string`` is handed to the driver helper unchanged;
    credentials are resolved by the caller before this object is built.
    """
    id: str
    name: str
    db_type: str
    connection_string: str
    description: str = ""
    show_all_databases: bool = False
