"""
SQL Server Dialect - SQL Server-specific SQL operations
"""

from typing import Any, List, Optional, Sequence, Tuple

from ...constants import MSSQL_DEFAULT_SCHEMA
from ..errors import SchemaOperationError
from ..literals import quote_string
from ..models import (
    AddColumn,
    AlterColumnType,
    ColumnInfo,
    Dialect,
    DropPrimaryKey,
    Relationship,
    RenameColumn,
)
from .base import DatabaseDialect

import logging
logger = logging.getLogger(__name__)


class SQLServerDialect(DatabaseDialect):
    """Dialect for Microsoft SQL Server."""

    # Built-in schemas and fixed database roles
    SYSTEM_SCHEMAS = (
        'sys', 'INFORMATION_SCHEMA', 'guest', 'db_owner', 'db_accessadmin',
        'db_securityadmin', 'db_ddladmin', 'db_backupoperator', 'db_datareader',
        'db_datawriter', 'db_denydatareader', 'db_denydatawriter',
    )
    SYSTEM_DATABASES = ('master', 'tempdb', 'model', 'msdb')

    @property
    def dialect(self) -> Dialect:
        return Dialect.MSSQL

    @property
    def default_schema(self) -> str:
        return MSSQL_DEFAULT_SCHEMA

    @property
    def placeholder(self) -> str:
        """pyodbc uses qmark parameters."""
        return "?"

    @property
    def supports_transactional_ddl(self) -> bool:
        return True

    @property
    def unsupported_fk_actions(self) -> Tuple[str, ...]:
        return ("RESTRICT",)

    def generate_select_query(
        self,
        table_name: str,
        schema_name: Optional[str] = None,
        columns: Optional[List[str]] = None,
        limit: Optional[int] = None,
        pk_column: Optional[str] = None,
        pk_values: Optional[Sequence[Any]] = None
    ) -> str:
        """Generate SQL Server SELECT query with TOP clause."""
        cols = self._column_list(columns)
        full_table = self.qualify(schema_name, table_name)
        top = f"TOP {int(limit)} " if limit is not None else ""
        return f"SELECT {top}{cols} FROM {full_table}{self._pk_filter(pk_column, pk_values)}"

    # ==================== ALTER TABLE spelling ====================

    def _add_column(self, quoted_table: str, op: AddColumn) -> str:
        return (
            f"ALTER TABLE {quoted_table} ADD {self.quote_identifier(op.name)} "
            f"{self.check_type_name(op.data_type)}{self._not_null(op.is_nullable)}"
        )

    def _alter_column_type(self, quoted_table: str, op: AlterColumnType) -> str:
        return (
            f"ALTER TABLE {quoted_table} ALTER COLUMN {self.quote_identifier(op.name)} "
            f"{self.check_type_name(op.new_type)}"
        )

    def _rename_column(self, quoted_table: str, schema_name: str,
                       table_name: str, op: RenameColumn) -> str:
        """sp_rename takes the current column path and the bare new name."""
        column_path = f"{quoted_table}.{self.quote_identifier(op.name)}"
        return (
            f"EXEC sp_rename {quote_string(column_path, self.dialect)}, "
            f"{quote_string(op.new_name, self.dialect)}, 'COLUMN'"
        )

    def _drop_primary_key(self, quoted_table: str, table_name: str, op: DropPrimaryKey) -> str:
        if not op.constraint_name:
            raise SchemaOperationError(
                f"SQL Server needs the primary key constraint name to drop it from {quoted_table}"
            )
        return (
            f"ALTER TABLE {quoted_table} DROP CONSTRAINT "
            f"{self.quote_identifier(op.constraint_name)}"
        )

    def generate_drop_database(self, name: str) -> List[str]:
        """Disconnect other users, then drop."""
        self.validate_database_name(name)
        quoted = self.quote_identifier(name)
        return [
            f"ALTER DATABASE {quoted} SET SINGLE_USER WITH ROLLBACK IMMEDIATE",
            f"DROP DATABASE {quoted}",
        ]

    # ==================== Catalog Queries ====================

    def get_table_columns(
        self,
        table_name: str,
        schema_name: Optional[str] = None
    ) -> List[ColumnInfo]:
        """Get columns with the primary key constraint name from sys.key_constraints."""
        schema = schema_name or self.default_schema

        rows = self._execute_all("""
            SELECT c.COLUMN_NAME, c.DATA_TYPE, c.IS_NULLABLE, c.COLUMN_DEFAULT,
                   pk.constraint_name
            FROM INFORMATION_SCHEMA.COLUMNS c
            LEFT JOIN (
                SELECT SCHEMA_NAME(t.schema_id) AS schema_name, t.name AS table_name,
                       sc.name AS column_name, kc.name AS constraint_name
                FROM sys.key_constraints kc
                JOIN sys.tables t ON t.object_id = kc.parent_object_id
                JOIN sys.index_columns ic
                    ON ic.object_id = kc.parent_object_id AND ic.index_id = kc.unique_index_id
                JOIN sys.columns sc ON sc.object_id = ic.object_id AND sc.column_id = ic.column_id
                WHERE kc.type = 'PK'
            ) pk ON pk.schema_name = c.TABLE_SCHEMA
                AND pk.table_name = c.TABLE_NAME
                AND pk.column_name = c.COLUMN_NAME
            WHERE c.TABLE_SCHEMA = ? AND c.TABLE_NAME = ?
            ORDER BY c.ORDINAL_POSITION
        """, (schema, table_name))

        return [
            ColumnInfo(
                name=row[0],
                type_name=row[1],
                is_nullable=(row[2] == 'YES'),
                default_value=row[3],
                is_primary_key=bool(row[4]),
                pk_constraint_name=row[4],
            )
            for row in rows
        ]

    def get_databases(self) -> List[str]:
        return [
            name for name in self._first_column("SELECT name FROM sys.databases ORDER BY name")
            if name not in self.SYSTEM_DATABASES
        ]

    def get_schemas(self) -> List[str]:
        return [
            name for name in self._first_column("SELECT name FROM sys.schemas ORDER BY name")
            if name not in self.SYSTEM_SCHEMAS
        ]

    def get_tables(self, schema_name: str) -> List[str]:
        return self._first_column("""
            SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES
            WHERE TABLE_SCHEMA = ? AND TABLE_TYPE = 'BASE TABLE'
            ORDER BY TABLE_NAME
        """, (schema_name,))

    def get_views(self, schema_name: str) -> List[str]:
        return self._first_column("""
            SELECT TABLE_NAME FROM INFORMATION_SCHEMA.VIEWS
            WHERE TABLE_SCHEMA = ?
            ORDER BY TABLE_NAME
        """, (schema_name,))

    def get_functions(self, schema_name: str) -> List[str]:
        """Scalar, inline and table-valued functions plus stored procedures."""
        return self._first_column("""
            SELECT name FROM sys.objects
            WHERE schema_id = SCHEMA_ID(?) AND type IN ('FN', 'IF', 'TF', 'P')
            ORDER BY name
        """, (schema_name,))

    def get_relationships(self, schema_name: Optional[str] = None) -> List[Relationship]:
        query = """
            SELECT fk.name, tp.name, cp.name, tr.name, cr.name
            FROM sys.foreign_keys fk
            JOIN sys.foreign_key_columns fkc ON fk.object_id = fkc.constraint_object_id
            JOIN sys.tables tp ON fkc.parent_object_id = tp.object_id
            JOIN sys.columns cp
                ON fkc.parent_object_id = cp.object_id AND fkc.parent_column_id = cp.column_id
            JOIN sys.tables tr ON fkc.referenced_object_id = tr.object_id
            JOIN sys.columns cr
                ON fkc.referenced_object_id = cr.object_id AND fkc.referenced_column_id = cr.column_id
        """
        params: tuple = ()
        if schema_name:
            query += " WHERE SCHEMA_NAME(tp.schema_id) = ?"
            params = (schema_name,)
        return self._relationships_from_rows(self._execute_all(query, params))
