"""
Base Database Dialect - Abstract base class for database-specific SQL operations

Dialects handle database-specific syntax differences such as:
- Identifier quoting ([brackets] vs "quotes" vs `backticks`)
- Row limiting (LIMIT vs TOP)
- ALTER TABLE spelling (MODIFY COLUMN, sp_rename, DROP FOREIGN KEY)
- System catalog queries (sys.* vs information_schema)
"""

from abc import ABC, abstractmethod
import re
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ...constants import DATABASE_NAME_PATTERN, DEFAULT_SCHEMA, FK_ACTIONS
from ..errors import InvalidDatabaseNameError, SchemaOperationError
from ..identifiers import STRUCTURED_MARKERS, resolve_identifier
from ..literals import coerce_insert_value, format_value
from ..models import (
    AddColumn,
    AddForeignKey,
    AddPrimaryKey,
    AlterColumnType,
    ColumnInfo,
    Dialect,
    DropColumn,
    DropForeignKey,
    DropPrimaryKey,
    Relationship,
    RenameColumn,
    SchemaOperation,
)
from ..quoting import quote_chars, quote_identifier

import logging
logger = logging.getLogger(__name__)

# Raw type text may not contain statement separators or comments
_UNSAFE_TYPE_PATTERN = re.compile(r";|--|/\*|\*/")


class DatabaseDialect(ABC):
    """
    Abstract base class for database dialects.

    Each dialect knows how to:
    1. Quote identifiers and encode literals for its database type
    2. Generate SELECT/INSERT/UPDATE/DELETE and ALTER TABLE statements
    3. Query system catalogs for metadata

    Statement generation never touches the connection; catalog queries run
    on the connection given at construction.

    Usage:
        dialect = DialectFactory.create("postgres", connection, db_name)
        query = dialect.generate_select_query("users", "public", limit=100)
        columns = dialect.get_table_columns("users", "public")
    """

    def __init__(self, connection: Any = None, db_name: Optional[str] = None):
        """
        Initialize the dialect.

        Args:
            connection: DB-API connection for catalog queries (optional)
            db_name: Optional target database name
        """
        self.connection = connection
        self.db_name = db_name

    @property
    @abstractmethod
    def dialect(self) -> Dialect:
        """The dialect this class implements."""
        pass

    # ==================== Identifier Quoting ====================

    @property
    def quote_char(self) -> str:
        """Character used to open a quoted identifier."""
        return quote_chars(self.dialect)[0]

    @property
    def quote_char_end(self) -> str:
        """Closing quote character."""
        return quote_chars(self.dialect)[1]

    def quote_identifier(self, identifier: str) -> str:
        """Quote a single identifier (table, column, schema name)."""
        return quote_identifier(identifier, self.dialect)

    def quote_full_table_name(
        self,
        table_name: str,
        schema_name: Optional[str] = None,
        include_db: bool = False
    ) -> str:
        """
        Quote a full table reference including optional schema/database.

        Args:
            table_name: Table name
            schema_name: Optional schema name
            include_db: Whether to include database name

        Returns:
            Fully qualified and quoted table name
        """
        parts = []
        if include_db and self.db_name:
            parts.append(self.quote_identifier(self.db_name))
        if schema_name:
            parts.append(self.quote_identifier(schema_name))
        parts.append(self.quote_identifier(table_name))
        return ".".join(parts)

    def qualify(self, schema_name: Optional[str], table_name: str) -> str:
        """Schema-qualified table reference, defaulting the schema."""
        return self.quote_full_table_name(table_name, schema_name or self.default_schema)

    # ==================== Defaults ====================

    @property
    def default_schema(self) -> str:
        """Default schema name for this database type."""
        return DEFAULT_SCHEMA

    def resolve_schema(self, schema_name: Optional[str]) -> Optional[str]:
        """
        Schema to use for a resolved identifier.

        Identifiers without a schema segment resolve to "public"; on
        dialects whose default differs, that becomes the dialect default.
        """
        if not schema_name or schema_name == DEFAULT_SCHEMA:
            return self.default_schema
        return schema_name

    @property
    def placeholder(self) -> str:
        """DB-API parameter marker used by the dialect's driver."""
        return "%s"

    @property
    def supports_transactional_ddl(self) -> bool:
        """Whether ALTER TABLE statements can be rolled back."""
        return False

    # ==================== Literals ====================

    def format_value(self, value: Any) -> str:
        return format_value(value, self.dialect)

    def coerce_insert_value(self, raw: str) -> str:
        return coerce_insert_value(raw, self.dialect)

    # ==================== SELECT Query Generation ====================

    def _column_list(self, columns: Optional[Sequence[str]]) -> str:
        if columns:
            return ", ".join(self.quote_identifier(c) for c in columns)
        return "*"

    def _pk_filter(self, pk_column: Optional[str], pk_values: Optional[Sequence[Any]]) -> str:
        if pk_column is None or pk_values is None:
            return ""
        if not pk_values:
            raise ValueError("pk_values must not be empty")
        values = ", ".join(self.format_value(v) for v in pk_values)
        return f" WHERE {self.quote_identifier(pk_column)} IN ({values})"

    def generate_select_query(
        self,
        table_name: str,
        schema_name: Optional[str] = None,
        columns: Optional[List[str]] = None,
        limit: Optional[int] = None,
        pk_column: Optional[str] = None,
        pk_values: Optional[Sequence[Any]] = None
    ) -> str:
        """
        Generate a SELECT query.

        Args:
            table_name: Table or view name
            schema_name: Optional schema name
            columns: List of columns to select (None = all)
            limit: Optional row limit
            pk_column: Optional key column for a WHERE ... IN filter
            pk_values: Key values for the filter

        Returns:
            Complete SELECT statement
        """
        cols = self._column_list(columns)
        full_table = self.qualify(schema_name, table_name)
        query = f"SELECT {cols} FROM {full_table}{self._pk_filter(pk_column, pk_values)}"
        if limit is not None:
            query += f" LIMIT {int(limit)}"
        return query

    def generate_count_query(self, table_name: str, schema_name: Optional[str] = None) -> str:
        return f"SELECT COUNT(*) AS total_rows FROM {self.qualify(schema_name, table_name)}"

    # ==================== DML Generation ====================

    def generate_insert(
        self,
        table_name: str,
        schema_name: Optional[str],
        values: Mapping[str, Any]
    ) -> str:
        """INSERT with values encoded by format_value()."""
        if not values:
            raise ValueError("INSERT requires at least one column")
        literals = {col: self.format_value(v) for col, v in values.items()}
        return self._insert_statement(table_name, schema_name, literals)

    def generate_insert_from_draft(
        self,
        table_name: str,
        schema_name: Optional[str],
        draft: Mapping[str, str]
    ) -> str:
        """
        INSERT from raw insert-row text.

        Blank fields are omitted so the server applies column defaults;
        the remaining fields go through coerce_insert_value().
        """
        literals = {
            col: self.coerce_insert_value(text)
            for col, text in draft.items()
            if text is not None and text.strip() != ""
        }
        if not literals:
            raise ValueError("Enter at least one value")
        return self._insert_statement(table_name, schema_name, literals)

    def _insert_statement(self, table_name: str, schema_name: Optional[str],
                          literals: Mapping[str, str]) -> str:
        col_names = ", ".join(self.quote_identifier(c) for c in literals)
        values = ", ".join(literals.values())
        return f"INSERT INTO {self.qualify(schema_name, table_name)} ({col_names}) VALUES ({values})"

    def generate_update(
        self,
        table_name: str,
        schema_name: Optional[str],
        pk_column: str,
        pk_value: Any,
        updates: Mapping[str, Any]
    ) -> Tuple[str, Tuple[Any, ...]]:
        """
        Parameterized single-row UPDATE keyed by one primary-key column.

        Returns:
            (sql, params) for cursor.execute()
        """
        if not updates:
            raise ValueError("UPDATE requires at least one column")
        marker = self.placeholder
        set_clause = ", ".join(
            f"{self._param_safe(self.quote_identifier(col))} = {marker}" for col in updates
        )
        sql = (
            f"UPDATE {self._param_safe(self.qualify(schema_name, table_name))} SET {set_clause} "
            f"WHERE {self._param_safe(self.quote_identifier(pk_column))} = {marker}"
        )
        params = tuple(updates.values()) + (pk_value,)
        return sql, params

    def _param_safe(self, sql_text: str) -> str:
        """Double '%' in text that shares a statement with pyformat parameters."""
        if self.placeholder == "%s":
            return sql_text.replace("%", "%%")
        return sql_text

    def generate_delete(
        self,
        table_name: str,
        schema_name: Optional[str],
        pk_column: str,
        pk_values: Sequence[Any]
    ) -> str:
        """DELETE every row whose key is in pk_values."""
        if not pk_values:
            raise ValueError("DELETE requires at least one key value")
        values = ", ".join(self.format_value(v) for v in pk_values)
        return (
            f"DELETE FROM {self.qualify(schema_name, table_name)} "
            f"WHERE {self.quote_identifier(pk_column)} IN ({values})"
        )

    # ==================== ALTER TABLE Generation ====================

    def generate_alter_statement(
        self,
        table_name: str,
        schema_name: Optional[str],
        operation: SchemaOperation
    ) -> str:
        """
        Translate one schema operation into one statement.

        Raises:
            SchemaOperationError: malformed operation or unsupported spelling
        """
        quoted_table = self.qualify(schema_name, table_name)
        schema = schema_name or self.default_schema

        if isinstance(operation, AddColumn):
            self._require_name(operation.name, "add_column")
            return self._add_column(quoted_table, operation)
        if isinstance(operation, DropColumn):
            self._require_name(operation.name, "drop_column")
            return f"ALTER TABLE {quoted_table} DROP COLUMN {self.quote_identifier(operation.name)}"
        if isinstance(operation, AlterColumnType):
            self._require_name(operation.name, "alter_column_type")
            return self._alter_column_type(quoted_table, operation)
        if isinstance(operation, RenameColumn):
            self._require_name(operation.name, "rename_column")
            self._require_name(operation.new_name, "rename_column")
            return self._rename_column(quoted_table, schema, table_name, operation)
        if isinstance(operation, AddPrimaryKey):
            if not operation.columns:
                raise SchemaOperationError("add_pk requires at least one column")
            cols = ", ".join(self.quote_identifier(c) for c in operation.columns)
            return f"ALTER TABLE {quoted_table} ADD PRIMARY KEY ({cols})"
        if isinstance(operation, DropPrimaryKey):
            return self._drop_primary_key(quoted_table, table_name, operation)
        if isinstance(operation, AddForeignKey):
            return self._add_foreign_key(quoted_table, schema, operation)
        if isinstance(operation, DropForeignKey):
            self._require_name(operation.name, "drop_fk")
            return self._drop_foreign_key(quoted_table, operation)

        raise SchemaOperationError(f"Unknown schema operation: {operation!r}")

    def _require_name(self, name: Optional[str], op_type: str):
        if not name or not str(name).strip():
            raise SchemaOperationError(f"{op_type} requires a name")

    def check_type_name(self, type_name: str) -> str:
        """Reject raw type text that could end or comment out the statement."""
        text = (type_name or "").strip()
        if not text or _UNSAFE_TYPE_PATTERN.search(text):
            raise SchemaOperationError(f"Invalid column type: {type_name!r}")
        return text

    def _not_null(self, is_nullable: bool) -> str:
        return "" if is_nullable else " NOT NULL"

    def _add_column(self, quoted_table: str, op: AddColumn) -> str:
        return (
            f"ALTER TABLE {quoted_table} ADD COLUMN {self.quote_identifier(op.name)} "
            f"{self.check_type_name(op.data_type)}{self._not_null(op.is_nullable)}"
        )

    def _alter_column_type(self, quoted_table: str, op: AlterColumnType) -> str:
        return (
            f"ALTER TABLE {quoted_table} ALTER COLUMN {self.quote_identifier(op.name)} "
            f"TYPE {self.check_type_name(op.new_type)}"
        )

    def _rename_column(self, quoted_table: str, schema_name: str,
                       table_name: str, op: RenameColumn) -> str:
        return (
            f"ALTER TABLE {quoted_table} RENAME COLUMN {self.quote_identifier(op.name)} "
            f"TO {self.quote_identifier(op.new_name)}"
        )

    @abstractmethod
    def _drop_primary_key(self, quoted_table: str, table_name: str, op: DropPrimaryKey) -> str:
        pass

    def _drop_foreign_key(self, quoted_table: str, op: DropForeignKey) -> str:
        return f"ALTER TABLE {quoted_table} DROP CONSTRAINT {self.quote_identifier(op.name)}"

    @property
    def unsupported_fk_actions(self) -> Tuple[str, ...]:
        """Referential actions the database rejects."""
        return ()

    def _fk_action(self, action: Optional[str], clause: str) -> str:
        if action is None:
            return ""
        normalized = " ".join(action.upper().split())
        if normalized not in FK_ACTIONS or normalized in self.unsupported_fk_actions:
            raise SchemaOperationError(
                f"{clause} {action!r} is not supported by {self.dialect.value}"
            )
        return f" {clause} {normalized}"

    def _referenced_table(self, ref_table: str, schema_name: str) -> str:
        """
        Quote the referenced table of a foreign key.

        Structured or "schema.table" references are resolved; a bare name
        is taken from the same schema as the altered table.
        """
        if "." in ref_table or any(m in ref_table for m in STRUCTURED_MARKERS):
            parsed = resolve_identifier(ref_table)
            if parsed.table:
                return self.qualify(parsed.schema, parsed.table)
        return self.qualify(schema_name, ref_table)

    def _add_foreign_key(self, quoted_table: str, schema_name: str, op: AddForeignKey) -> str:
        self._require_name(op.name, "add_fk")
        self._require_name(op.ref_table, "add_fk")
        if not op.columns or len(op.columns) != len(op.ref_columns):
            raise SchemaOperationError(
                "add_fk requires matching, non-empty column and reference column lists"
            )
        fk_cols = ", ".join(self.quote_identifier(c) for c in op.columns)
        ref_cols = ", ".join(self.quote_identifier(c) for c in op.ref_columns)
        return (
            f"ALTER TABLE {quoted_table} ADD CONSTRAINT {self.quote_identifier(op.name)} "
            f"FOREIGN KEY ({fk_cols}) REFERENCES {self._referenced_table(op.ref_table, schema_name)} "
            f"({ref_cols})"
            f"{self._fk_action(op.on_delete, 'ON DELETE')}"
            f"{self._fk_action(op.on_update, 'ON UPDATE')}"
        )

    # ==================== Database DDL ====================

    def validate_database_name(self, name: str) -> str:
        if not name or not re.match(DATABASE_NAME_PATTERN, name):
            raise InvalidDatabaseNameError(name)
        return name

    def generate_create_database(self, name: str) -> List[str]:
        self.validate_database_name(name)
        return [f"CREATE DATABASE {self.quote_identifier(name)}"]

    def generate_drop_database(self, name: str) -> List[str]:
        """Statements to run, in order, to drop a database."""
        self.validate_database_name(name)
        return [f"DROP DATABASE {self.quote_identifier(name)}"]

    # ==================== Catalog Queries ====================

    @abstractmethod
    def get_table_columns(
        self,
        table_name: str,
        schema_name: Optional[str] = None
    ) -> List[ColumnInfo]:
        """
        Get column metadata for a table or view.

        Args:
            table_name: Table or view name
            schema_name: Optional schema name

        Returns:
            List of ColumnInfo objects
        """
        pass

    @abstractmethod
    def get_databases(self) -> List[str]:
        """User databases on the server."""
        pass

    @abstractmethod
    def get_schemas(self) -> List[str]:
        """User schemas of the connected database."""
        pass

    @abstractmethod
    def get_tables(self, schema_name: str) -> List[str]:
        pass

    @abstractmethod
    def get_views(self, schema_name: str) -> List[str]:
        pass

    @abstractmethod
    def get_functions(self, schema_name: str) -> List[str]:
        pass

    @abstractmethod
    def get_relationships(self, schema_name: Optional[str] = None) -> List[Relationship]:
        """Foreign-key column pairs, one entry per column."""
        pass

    # ==================== Utility Methods ====================

    def _execute_all(self, query: str, params: tuple = ()) -> List[tuple]:
        """Execute query and return all rows."""
        cursor = self.connection.cursor()
        cursor.execute(query, params)
        return cursor.fetchall()

    def _first_column(self, query: str, params: tuple = ()) -> List[str]:
        return [row[0] for row in self._execute_all(query, params)]

    @staticmethod
    def _relationships_from_rows(rows: List[tuple]) -> List[Relationship]:
        return [
            Relationship(
                constraint_name=row[0],
                source_table=row[1],
                source_column=row[2],
                target_table=row[3],
                target_column=row[4],
            )
            for row in rows
        ]
