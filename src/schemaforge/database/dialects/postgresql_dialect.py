"""
PostgreSQL Dialect - PostgreSQL-specific SQL operations
"""

from typing import List, Optional

from ..models import ColumnInfo, Dialect, DropPrimaryKey, Relationship
from .base import DatabaseDialect

import logging
logger = logging.getLogger(__name__)


class PostgreSQLDialect(DatabaseDialect):
    """Dialect for PostgreSQL databases."""

    # System schemas to exclude
    SYSTEM_SCHEMAS = ('pg_catalog', 'information_schema')

    @property
    def dialect(self) -> Dialect:
        return Dialect.POSTGRES

    @property
    def supports_transactional_ddl(self) -> bool:
        return True

    def _drop_primary_key(self, quoted_table: str, table_name: str, op: DropPrimaryKey) -> str:
        constraint = op.constraint_name
        if not constraint:
            # Server-generated primary keys are named <table>_pkey
            constraint = f"{table_name}_pkey"
            logger.warning(
                f"No primary key constraint name for {quoted_table}, assuming {constraint}"
            )
        return f"ALTER TABLE {quoted_table} DROP CONSTRAINT {self.quote_identifier(constraint)}"

    def generate_drop_database(self, name: str) -> List[str]:
        """Terminate other sessions on the database, then drop it."""
        self.validate_database_name(name)
        return [
            "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
            f"WHERE datname = {self.format_value(name)} AND pid <> pg_backend_pid()",
            f"DROP DATABASE {self.quote_identifier(name)}",
        ]

    # ==================== Catalog Queries ====================

    def get_table_columns(
        self,
        table_name: str,
        schema_name: Optional[str] = None
    ) -> List[ColumnInfo]:
        """Get columns with their primary key constraint, if any."""
        schema = schema_name or self.default_schema

        rows = self._execute_all("""
            SELECT c.column_name, c.data_type, c.is_nullable, c.column_default,
                   con.conname AS pk_constraint_name
            FROM information_schema.columns c
            JOIN pg_class t ON t.relname = c.table_name
            JOIN pg_namespace s ON s.oid = t.relnamespace AND s.nspname = c.table_schema
            LEFT JOIN pg_attribute a ON a.attrelid = t.oid AND a.attname = c.column_name
            LEFT JOIN pg_constraint con
                ON con.conrelid = t.oid AND con.contype = 'p' AND a.attnum = ANY(con.conkey)
            WHERE c.table_schema = %s AND c.table_name = %s
            ORDER BY c.ordinal_position
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
        return self._first_column("""
            SELECT datname FROM pg_database
            WHERE datistemplate = false AND datname <> 'postgres'
            ORDER BY datname
        """)

    def get_schemas(self) -> List[str]:
        return self._first_column("""
            SELECT schema_name FROM information_schema.schemata
            WHERE schema_name NOT IN ('information_schema', 'pg_catalog')
              AND schema_name NOT LIKE 'pg_temp_%%'
              AND schema_name NOT LIKE 'pg_toast%%'
            ORDER BY schema_name
        """)

    def get_tables(self, schema_name: str) -> List[str]:
        return self._first_column("""
            SELECT table_name FROM information_schema.tables
            WHERE table_schema = %s AND table_type = 'BASE TABLE'
            ORDER BY table_name
        """, (schema_name,))

    def get_views(self, schema_name: str) -> List[str]:
        return self._first_column("""
            SELECT table_name FROM information_schema.tables
            WHERE table_schema = %s AND table_type = 'VIEW'
            ORDER BY table_name
        """, (schema_name,))

    def get_functions(self, schema_name: str) -> List[str]:
        return self._first_column("""
            SELECT DISTINCT routine_name FROM information_schema.routines
            WHERE routine_schema = %s
            ORDER BY routine_name
        """, (schema_name,))

    def get_relationships(self, schema_name: Optional[str] = None) -> List[Relationship]:
        rows = self._execute_all("""
            SELECT tc.constraint_name, tc.table_name, kcu.column_name,
                   ccu.table_name, ccu.column_name
            FROM information_schema.table_constraints AS tc
            JOIN information_schema.key_column_usage AS kcu
                ON tc.constraint_name = kcu.constraint_name AND tc.table_schema = kcu.table_schema
            JOIN information_schema.constraint_column_usage AS ccu
                ON ccu.constraint_name = tc.constraint_name AND ccu.table_schema = tc.table_schema
            WHERE tc.constraint_type = 'FOREIGN KEY' AND tc.table_schema = %s
        """, (schema_name or self.default_schema,))
        return self._relationships_from_rows(rows)
