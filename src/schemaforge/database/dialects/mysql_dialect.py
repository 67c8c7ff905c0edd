"""
MySQL Dialect - MySQL/MariaDB-specific SQL operations

MySQL has no schemas below the database: a database plays the schema role,
so schema_name arguments are database names here.
"""

from typing import List, Optional

from ..models import (
    AlterColumnType,
    ColumnInfo,
    Dialect,
    DropForeignKey,
    DropPrimaryKey,
    Relationship,
)
from .base import DatabaseDialect

import logging
logger = logging.getLogger(__name__)


class MySQLDialect(DatabaseDialect):
    """Dialect for MySQL and MariaDB databases."""

    # System databases to exclude
    SYSTEM_DATABASES = ('information_schema', 'mysql', 'performance_schema', 'sys')

    @property
    def dialect(self) -> Dialect:
        return Dialect.MYSQL

    @property
    def default_schema(self) -> Optional[str]:
        """The connected database, if known (MySQL has no separate schemas)."""
        return self.db_name

    def qualify(self, schema_name: Optional[str], table_name: str) -> str:
        """`db`.`table`, or a bare `table` resolved against the session database."""
        schema = schema_name or self.default_schema
        if not schema:
            return self.quote_identifier(table_name)
        return self.quote_full_table_name(table_name, schema)

    def _alter_column_type(self, quoted_table: str, op: AlterColumnType) -> str:
        return (
            f"ALTER TABLE {quoted_table} MODIFY COLUMN {self.quote_identifier(op.name)} "
            f"{self.check_type_name(op.new_type)}"
        )

    def _drop_primary_key(self, quoted_table: str, table_name: str, op: DropPrimaryKey) -> str:
        # The primary key is always named PRIMARY
        return f"ALTER TABLE {quoted_table} DROP PRIMARY KEY"

    def _drop_foreign_key(self, quoted_table: str, op: DropForeignKey) -> str:
        return f"ALTER TABLE {quoted_table} DROP FOREIGN KEY {self.quote_identifier(op.name)}"

    # ==================== Catalog Queries ====================

    def get_table_columns(
        self,
        table_name: str,
        schema_name: Optional[str] = None
    ) -> List[ColumnInfo]:
        """Get columns using information_schema."""
        schema = schema_name or self.default_schema
        if schema:
            schema_filter, params = "TABLE_SCHEMA = %s", (schema, table_name)
        else:
            schema_filter, params = "TABLE_SCHEMA = DATABASE()", (table_name,)

        rows = self._execute_all(f"""
            SELECT COLUMN_NAME, COLUMN_TYPE, IS_NULLABLE, COLUMN_DEFAULT, COLUMN_KEY
            FROM information_schema.COLUMNS
            WHERE {schema_filter} AND TABLE_NAME = %s
            ORDER BY ORDINAL_POSITION
        """, params)

        columns = []
        for row in rows:
            is_pk = row[4] == 'PRI'
            columns.append(ColumnInfo(
                name=row[0],
                type_name=row[1],
                is_nullable=(row[2] == 'YES'),
                default_value=row[3],
                is_primary_key=is_pk,
                pk_constraint_name='PRIMARY' if is_pk else None,
            ))
        return columns

    def get_databases(self) -> List[str]:
        return [
            name for name in self._first_column("SHOW DATABASES")
            if name not in self.SYSTEM_DATABASES
        ]

    def get_schemas(self) -> List[str]:
        return self.get_databases()

    def get_tables(self, schema_name: str) -> List[str]:
        return self._first_column("""
            SELECT TABLE_NAME FROM information_schema.TABLES
            WHERE TABLE_SCHEMA = %s AND TABLE_TYPE = 'BASE TABLE'
            ORDER BY TABLE_NAME
        """, (schema_name,))

    def get_views(self, schema_name: str) -> List[str]:
        return self._first_column("""
            SELECT TABLE_NAME FROM information_schema.VIEWS
            WHERE TABLE_SCHEMA = %s
            ORDER BY TABLE_NAME
        """, (schema_name,))

    def get_functions(self, schema_name: str) -> List[str]:
        return self._first_column("""
            SELECT ROUTINE_NAME FROM information_schema.ROUTINES
            WHERE ROUTINE_SCHEMA = %s
            ORDER BY ROUTINE_NAME
        """, (schema_name,))

    def get_relationships(self, schema_name: Optional[str] = None) -> List[Relationship]:
        if schema_name:
            schema_filter, params = "TABLE_SCHEMA = %s", (schema_name,)
        else:
            schema_filter, params = "TABLE_SCHEMA = DATABASE()", ()
        rows = self._execute_all(f"""
            SELECT CONSTRAINT_NAME, TABLE_NAME, COLUMN_NAME,
                   REFERENCED_TABLE_NAME, REFERENCED_COLUMN_NAME
            FROM information_schema.KEY_COLUMN_USAGE
            WHERE REFERENCED_TABLE_NAME IS NOT NULL AND {schema_filter}
        """, params)
        return self._relationships_from_rows(rows)
