"""
SchemaOperation models - Typed operation log for table alterations

Each variant is one declared intent against a single table. The ``op_type``
tag matches the ``type`` field of the wire format.
"""
from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union


@dataclass(frozen=True)
class AddColumn:
    """Add a column with a raw SQL type."""
    op_type: ClassVar[str] = "add_column"
    name: str
    data_type: str
    is_nullable: bool = True


@dataclass(frozen=True)
class DropColumn:
    op_type: ClassVar[str] = "drop_column"
    name: str


@dataclass(frozen=True)
class AlterColumnType:
    op_type: ClassVar[str] = "alter_column_type"
    name: str
    new_type: str


@dataclass(frozen=True)
class RenameColumn:
    op_type: ClassVar[str] = "rename_column"
    name: str
    new_name: str


@dataclass(frozen=True)
class AddPrimaryKey:
    op_type: ClassVar[str] = "add_pk"
    columns: Tuple[str, ...]


@dataclass(frozen=True)
class DropPrimaryKey:
    """Drop the table's primary key, by constraint name when known."""
    op_type: ClassVar[str] = "drop_pk"
    constraint_name: Optional[str] = None


@dataclass(frozen=True)
class AddForeignKey:
    """
    Add a named foreign key.

    ``ref_table`` is a bare table name (resolved in the target's schema) or
    any identifier form understood by the resolver.
    """
    op_type: ClassVar[str] = "add_fk"
    name: str
    columns: Tuple[str, ...]
    ref_table: str
    ref_columns: Tuple[str, ...]
    on_delete: Optional[str] = None
    on_update: Optional[str] = None


@dataclass(frozen=True)
class DropForeignKey:
    op_type: ClassVar[str] = "drop_fk"
    name: str


SchemaOperation = Union[
    AddColumn,
    DropColumn,
    AlterColumnType,
    RenameColumn,
    AddPrimaryKey,
    DropPrimaryKey,
    AddForeignKey,
    DropForeignKey,
]

OPERATION_TYPES = (
    AddColumn,
    DropColumn,
    AlterColumnType,
    RenameColumn,
    AddPrimaryKey,
    DropPrimaryKey,
    AddForeignKey,
    DropForeignKey,
)


@dataclass
class ForeignKeyConstraint:
    """Foreign key authored in the relationship dialog."""
    constraint_name: str
    source_table: str
    source_column: str
    target_table: str
    target_column: str
    on_delete: str = "NO ACTION"
    on_update: str = "NO ACTION"

    def to_operation(self) -> AddForeignKey:
        """Convert to an ``add_fk`` operation against ``source_table``."""
        return AddForeignKey(
            name=self.constraint_name,
            columns=(self.source_column,),
            ref_table=self.target_table,
            ref_columns=(self.target_column,),
            on_delete=self.on_delete,
            on_update=self.on_update,
        )
