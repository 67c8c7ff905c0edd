"""
Database Models - Dataclasses and enums shared by the core

All models are re-exported here for convenience:
    from schemaforge.database.models import Dialect, ParsedIdentifier, AddColumn, ...
"""

from .dialect import Dialect
from .identifier import NodeKind, ParsedIdentifier
from .schema_operation import (
    AddColumn,
    DropColumn,
    AlterColumnType,
    RenameColumn,
    AddPrimaryKey,
    DropPrimaryKey,
    AddForeignKey,
    DropForeignKey,
    SchemaOperation,
    OPERATION_TYPES,
    ForeignKeyConstraint,
)
from .metadata import (
    ColumnInfo,
    TableMetadata,
    QueryResult,
    TreeNode,
    Relationship,
    ConnectionConfig,
)

__all__ = [
    "Dialect",
    "NodeKind",
    "ParsedIdentifier",
    "AddColumn",
    "DropColumn",
    "AlterColumnType",
    "RenameColumn",
    "AddPrimaryKey",
    "DropPrimaryKey",
    "AddForeignKey",
    "DropForeignKey",
    "SchemaOperation",
    "OPERATION_TYPES",
    "ForeignKeyConstraint",
    "ColumnInfo",
    "TableMetadata",
    "QueryResult",
    "TreeNode",
    "Relationship",
    "ConnectionConfig",
]
