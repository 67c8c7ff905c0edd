"""
Schema Operations - Decode, diff and translate table alterations

Operations arrive either as typed SchemaOperation objects or as wire
dictionaries ({"type": "add_column", "name": ..., "dataType": ...}).
translate_operations() turns a list of them into one ALTER statement per
operation, in the supplied order.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .dialects import DatabaseDialect, DialectFactory
from .errors import SchemaOperationError
from .models import (
    AddColumn,
    AddForeignKey,
    AddPrimaryKey,
    AlterColumnType,
    ColumnInfo,
    Dialect,
    DropColumn,
    DropForeignKey,
    DropPrimaryKey,
    OPERATION_TYPES,
    RenameColumn,
    SchemaOperation,
)

import logging
logger = logging.getLogger(__name__)


OperationLike = Union[SchemaOperation, Mapping[str, Any]]

_OPERATIONS_BY_TYPE = {op_class.op_type: op_class for op_class in OPERATION_TYPES}


def _field(data: Mapping[str, Any], snake: str, camel: Optional[str] = None,
           required: bool = True, default: Any = None) -> Any:
    """Read a wire field by snake_case or camelCase key."""
    for key in (snake, camel):
        if key and key in data and data[key] is not None:
            return data[key]
    if required:
        raise SchemaOperationError(
            f"{data.get('type', 'operation')} is missing field '{camel or snake}'"
        )
    return default


def _names(value: Any, field_name: str) -> tuple:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise SchemaOperationError(f"'{field_name}' must be a list of column names")
    return tuple(value)


def operation_from_dict(data: Mapping[str, Any]) -> SchemaOperation:
    """
    Decode one wire operation.

    Both camelCase (dataType, newName, refColumns...) and snake_case keys
    are accepted.

    Raises:
        SchemaOperationError: unknown type or missing required field
    """
    op_type = data.get("type")
    if op_type not in _OPERATIONS_BY_TYPE:
        raise SchemaOperationError(f"Unknown schema operation type: {op_type!r}")

    if op_type == "add_column":
        return AddColumn(
            name=_field(data, "name"),
            data_type=_field(data, "data_type", "dataType"),
            is_nullable=bool(_field(data, "is_nullable", "isNullable", required=False, default=True)),
        )
    if op_type == "drop_column":
        return DropColumn(name=_field(data, "name"))
    if op_type == "alter_column_type":
        return AlterColumnType(
            name=_field(data, "name"),
            new_type=_field(data, "new_type", "newType"),
        )
    if op_type == "rename_column":
        return RenameColumn(
            name=_field(data, "name"),
            new_name=_field(data, "new_name", "newName"),
        )
    if op_type == "add_pk":
        return AddPrimaryKey(columns=_names(_field(data, "columns"), "columns"))
    if op_type == "drop_pk":
        return DropPrimaryKey(
            constraint_name=_field(data, "constraint_name", "constraintName", required=False)
        )
    if op_type == "add_fk":
        return AddForeignKey(
            name=_field(data, "name"),
            columns=_names(_field(data, "columns"), "columns"),
            ref_table=_field(data, "ref_table", "refTable"),
            ref_columns=_names(_field(data, "ref_columns", "refColumns"), "refColumns"),
            on_delete=_field(data, "on_delete", "onDelete", required=False),
            on_update=_field(data, "on_update", "onUpdate", required=False),
        )
    return DropForeignKey(name=_field(data, "name"))


def operation_to_dict(operation: SchemaOperation) -> Dict[str, Any]:
    """Encode an operation in the camelCase wire format."""
    data: Dict[str, Any] = {"type": operation.op_type}

    if isinstance(operation, AddColumn):
        data.update(name=operation.name, dataType=operation.data_type,
                    isNullable=operation.is_nullable)
    elif isinstance(operation, (DropColumn, DropForeignKey)):
        data["name"] = operation.name
    elif isinstance(operation, AlterColumnType):
        data.update(name=operation.name, newType=operation.new_type)
    elif isinstance(operation, RenameColumn):
        data.update(name=operation.name, newName=operation.new_name)
    elif isinstance(operation, AddPrimaryKey):
        data["columns"] = list(operation.columns)
    elif isinstance(operation, DropPrimaryKey):
        if operation.constraint_name:
            data["constraintName"] = operation.constraint_name
    elif isinstance(operation, AddForeignKey):
        data.update(name=operation.name, columns=list(operation.columns),
                    refTable=operation.ref_table, refColumns=list(operation.ref_columns))
        if operation.on_delete:
            data["onDelete"] = operation.on_delete
        if operation.on_update:
            data["onUpdate"] = operation.on_update
    return data


def coerce_operation(operation: OperationLike) -> SchemaOperation:
    """Accept a typed operation or a wire dictionary."""
    if isinstance(operation, OPERATION_TYPES):
        return operation
    if isinstance(operation, Mapping):
        return operation_from_dict(operation)
    raise SchemaOperationError(f"Not a schema operation: {operation!r}")


def translate_operations(
    dialect: Union[DatabaseDialect, Dialect, str],
    schema_name: Optional[str],
    table_name: str,
    operations: Iterable[OperationLike]
) -> List[str]:
    """
    Translate operations against one table into ALTER statements.

    One statement per operation, in the supplied order. No live metadata is
    consulted and nothing is reordered or merged. A malformed operation
    raises before any statement is returned.

    Args:
        dialect: DatabaseDialect instance or a dialect name
        schema_name: Target schema (None = dialect default)
        table_name: Target table
        operations: SchemaOperation objects or wire dictionaries

    Returns:
        List of executable statements

    Raises:
        SchemaOperationError: malformed or untranslatable operation
    """
    if not isinstance(dialect, DatabaseDialect):
        dialect = DialectFactory.create(dialect)

    statements = []
    for op in operations:
        sql = dialect.generate_alter_statement(table_name, schema_name, coerce_operation(op))
        logger.debug(f"Translated {op!r} -> {sql}")
        statements.append(sql)
    return statements


def fill_primary_key_name(
    operations: Sequence[SchemaOperation],
    pk_constraint_name: Optional[str]
) -> List[SchemaOperation]:
    """Give unnamed drop_pk operations the constraint name from metadata."""
    if not pk_constraint_name:
        return list(operations)
    return [
        DropPrimaryKey(constraint_name=pk_constraint_name)
        if isinstance(op, DropPrimaryKey) and not op.constraint_name else op
        for op in operations
    ]


def diff_columns(
    original: Sequence[ColumnInfo],
    edited: Sequence[ColumnInfo]
) -> List[SchemaOperation]:
    """
    Operations that turn the original column list into the edited one.

    Columns are matched by name, so a renamed column shows up as a drop
    plus an add. Order: drop_pk (when the key changes), drop_column,
    add_column, alter_column_type, add_pk.
    """
    original_by_name = {c.name: c for c in original}
    edited_names = {c.name for c in edited}

    original_pk = [c.name for c in original if c.is_primary_key]
    edited_pk = [c.name for c in edited if c.is_primary_key]
    pk_changed = original_pk != edited_pk

    operations: List[SchemaOperation] = []

    if pk_changed and original_pk:
        constraint = next(
            (c.pk_constraint_name for c in original if c.is_primary_key and c.pk_constraint_name),
            None
        )
        operations.append(DropPrimaryKey(constraint_name=constraint))

    for column in original:
        if column.name not in edited_names:
            operations.append(DropColumn(name=column.name))

    for column in edited:
        if column.name not in original_by_name:
            operations.append(AddColumn(
                name=column.name,
                data_type=column.type_name,
                is_nullable=column.is_nullable,
            ))

    for column in edited:
        before = original_by_name.get(column.name)
        if before is not None and before.type_name != column.type_name:
            operations.append(AlterColumnType(name=column.name, new_type=column.type_name))

    if pk_changed and edited_pk:
        operations.append(AddPrimaryKey(columns=tuple(edited_pk)))

    return operations
