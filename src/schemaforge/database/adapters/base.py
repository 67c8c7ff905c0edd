"""
Database Adapter - Executes core operations against a live connection

The adapter is the boundary between the SQL the core generates and a
server connection:

    execute_query    run editor SQL, return the last statement's rows
    get_metadata     columns of a table/view (cached)
    update_row       parameterized single-row UPDATE
    update_schema    translate and run a schema operation batch
    create_database / drop_database
    get_hierarchy    explorer tree nodes below a node id

Connections come from ``connect(database)``, pooled per database.
"""

import threading
from typing import Any, Callable, Iterable, List, Mapping, Optional

from cachetools import TTLCache

from ...config.settings import ExplorerSettings
from ...constants import DEFAULT_SCHEMA, HIERARCHY_FOLDERS
from ...utils.sql_splitter import split_sql_statements
from ..connection_pool import PoolRegistry
from ..dialects import DatabaseDialect, DialectFactory
from ..errors import BatchPartialFailure, MissingPrimaryKeyError, QueryError
from ..identifiers import (
    database_id,
    folder_id,
    folder_label,
    object_id,
    resolve_identifier,
    schema_id,
)
from ..models import (
    Dialect,
    DropPrimaryKey,
    NodeKind,
    ParsedIdentifier,
    QueryResult,
    Relationship,
    TableMetadata,
    TreeNode,
)
from ..schema_operations import (
    OperationLike,
    coerce_operation,
    fill_primary_key_name,
    translate_operations,
)

import logging
logger = logging.getLogger(__name__)

ROOT_ID = "root"

# Folder label -> (node kind, dialect listing method)
_FOLDER_LISTINGS = {
    "tables": (NodeKind.TABLE, "get_tables"),
    "views": (NodeKind.VIEW, "get_views"),
    "functions": (NodeKind.FUNCTION, "get_functions"),
}


class DatabaseAdapter:
    """
    Adapter for one server connection.

    Subclasses set ``dialect`` and override the few places where drivers or
    servers differ (autocommit switching, hierarchy root).

    Usage:
        adapter = PostgresAdapter(connect_factory("postgres", url), settings=settings)
        result = adapter.execute_query("SELECT * FROM users")
        meta = adapter.get_metadata("db:shop.schema:public.table:users")
    """

    dialect: Dialect = Dialect.POSTGRES

    def __init__(self, connect: Callable[[Optional[str]], Any],
                 settings: Optional[ExplorerSettings] = None,
                 default_database: Optional[str] = None,
                 show_all_databases: Optional[bool] = None):
        """
        Args:
            connect: ``connect(database)`` returning a DB-API connection;
                database None means the connection's own database
            settings: Explorer settings (defaults used if None)
            default_database: Name of the connection's own database, if known
            show_all_databases: Overrides the setting of the same name
        """
        self.settings = settings or ExplorerSettings()
        self.default_database = default_database
        self.show_all_databases = (
            self.settings.show_all_databases if show_all_databases is None else show_all_databases
        )
        self.pools = PoolRegistry(connect)
        self.builder = DialectFactory.create(self.dialect, db_name=default_database)
        self._metadata_cache = TTLCache(
            maxsize=self.settings.metadata_cache_maxsize,
            ttl=self.settings.metadata_cache_ttl,
        )
        self._cache_lock = threading.RLock()

    # ==================== Connections ====================

    def _pool_key(self, database: Optional[str]) -> Optional[str]:
        if database and database == self.default_database:
            return None
        return database

    def catalog(self, conn: Any, database: Optional[str] = None) -> DatabaseDialect:
        """Dialect bound to a live connection for catalog queries."""
        return DialectFactory.create(self.dialect, conn, database or self.default_database)

    def _set_autocommit(self, conn: Any, enabled: bool):
        """psycopg2 and pyodbc expose autocommit as an attribute."""
        conn.autocommit = enabled

    def _run(self, conn: Any, sql: str, params: Optional[tuple] = None) -> Any:
        logger.debug(f"Executing: {sql}")
        cursor = conn.cursor()
        if params is None:
            cursor.execute(sql)
        else:
            cursor.execute(sql, params)
        return cursor

    def _query_error(self, error: Exception, sql: str) -> QueryError:
        logger.error(f"Statement failed on {self.dialect.value}: {error}")
        return QueryError(str(error), sql=sql, dialect=self.dialect, cause=error)

    @staticmethod
    def _result_from_cursor(cursor: Any) -> QueryResult:
        if cursor.description is None:
            return QueryResult(rows=[], columns=[], row_count=cursor.rowcount)
        columns = [d[0] for d in cursor.description]
        rows = [dict(zip(columns, row)) for row in cursor.fetchall()]
        return QueryResult(rows=rows, columns=columns, row_count=len(rows))

    # ==================== execute_query ====================

    def execute_query(self, sql: str, database: Optional[str] = None) -> QueryResult:
        """
        Run one or more statements and return the last statement's result.

        Statements run in order on one connection and are committed together.

        Raises:
            QueryError: the driver rejected a statement (rolled back)
        """
        statements = split_sql_statements(sql, self.dialect)
        if not statements:
            return QueryResult()

        result = QueryResult()
        with self.pools.get(self._pool_key(database)).get_connection() as conn:
            current = statements[0].text
            try:
                for statement in statements:
                    current = statement.text
                    result = self._result_from_cursor(self._run(conn, current))
                conn.commit()
            except Exception as e:
                conn.rollback()
                raise self._query_error(e, current) from e
        return result

    # ==================== Metadata ====================

    def target_schema(self, parsed: ParsedIdentifier) -> Optional[str]:
        return self.builder.resolve_schema(parsed.schema)

    def get_metadata(self, table_id: str) -> TableMetadata:
        """
        Columns of the table or view named by a node identifier.

        Results are cached for ``metadata_cache_ttl`` seconds.
        """
        parsed = resolve_identifier(table_id)
        schema = self.target_schema(parsed)
        key = (parsed.database, schema, parsed.table)

        with self._cache_lock:
            if key in self._metadata_cache:
                return self._metadata_cache[key]

        with self.pools.get(self._pool_key(parsed.database)).get_connection() as conn:
            try:
                columns = self.catalog(conn, parsed.database).get_table_columns(parsed.table, schema)
                conn.rollback()
            except Exception as e:
                conn.rollback()
                raise self._query_error(e, f"<columns of {schema}.{parsed.table}>") from e

        metadata = TableMetadata(columns=columns)
        with self._cache_lock:
            self._metadata_cache[key] = metadata
        return metadata

    def invalidate_metadata(self, database: Optional[str] = None,
                            schema: Optional[str] = None, table: Optional[str] = None):
        """Drop cached metadata for one table, or everything when no table is given."""
        with self._cache_lock:
            if table is None:
                self._metadata_cache.clear()
                return
            for key in [k for k in self._metadata_cache if k[2] == table]:
                if key[1] == schema and (database is None or key[0] == database):
                    self._metadata_cache.pop(key, None)

    # ==================== update_row ====================

    def update_row(self, schema: Optional[str], table: str, pk_column: Optional[str],
                   pk_value: Any, updates: Mapping[str, Any],
                   database: Optional[str] = None) -> int:
        """
        Update one row identified by its primary key.

        Values are sent as driver parameters, never inlined.

        Returns:
            Number of rows affected

        Raises:
            MissingPrimaryKeyError: pk_column is empty
            QueryError: the driver rejected the statement
        """
        if not pk_column:
            raise MissingPrimaryKeyError(f"Cannot update {table}: no primary key column")

        sql, params = self.builder.generate_update(table, schema, pk_column, pk_value, updates)
        with self.pools.get(self._pool_key(database)).get_connection() as conn:
            try:
                cursor = self._run(conn, sql, params)
                conn.commit()
            except Exception as e:
                conn.rollback()
                raise self._query_error(e, sql) from e

        logger.info(f"Updated row {pk_column}={pk_value!r} in {table} ({len(updates)} column(s))")
        return cursor.rowcount

    # ==================== update_schema ====================

    def update_schema(self, schema: Optional[str], table: str,
                      operations: Iterable[OperationLike],
                      database: Optional[str] = None,
                      atomic: Optional[bool] = None) -> List[str]:
        """
        Translate and apply a schema operation batch.

        Every operation is translated before anything runs, so a malformed
        operation changes nothing. Statements then run in the supplied order.

        Args:
            schema: Target schema (None = dialect default)
            table: Target table
            operations: SchemaOperation objects or wire dictionaries
            database: Target database (None = connection default)
            atomic: Run the batch in one transaction when the server supports
                transactional DDL (None = setting ``atomic_schema_batches``)

        Returns:
            The executed statements

        Raises:
            SchemaOperationError: malformed or untranslatable operation
            BatchPartialFailure: a statement failed; earlier ones stay applied
                unless the batch ran atomically
        """
        ops = [coerce_operation(op) for op in operations]
        if any(isinstance(op, DropPrimaryKey) and not op.constraint_name for op in ops):
            ops = fill_primary_key_name(ops, self._pk_constraint_name(database, schema, table))

        statements = translate_operations(self.builder, schema, table, ops)
        if not statements:
            return []

        if atomic is None:
            atomic = self.settings.atomic_schema_batches
        if atomic and not self.builder.supports_transactional_ddl:
            logger.warning(
                f"{self.dialect.value} commits DDL implicitly; running schema batch non-atomically"
            )
            atomic = False

        try:
            if atomic:
                self._apply_atomic(statements, ops, database)
            else:
                self._apply_sequential(statements, ops, database)
        finally:
            self.invalidate_metadata(database, schema or self.builder.default_schema, table)

        logger.info(f"Applied {len(statements)} schema operation(s) to {table}")
        return statements

    def _pk_constraint_name(self, database: Optional[str], schema: Optional[str],
                            table: str) -> Optional[str]:
        """Current primary key constraint name, read fresh from the catalog."""
        schema = schema or self.builder.default_schema or DEFAULT_SCHEMA
        self.invalidate_metadata(database, schema, table)
        metadata = self.get_metadata(object_id(NodeKind.TABLE, table, schema, database))
        return metadata.pk_constraint_name

    def _apply_sequential(self, statements: List[str], ops: list, database: Optional[str]):
        with self.pools.get(self._pool_key(database)).get_connection() as conn:
            for index, sql in enumerate(statements):
                try:
                    self._run(conn, sql)
                    conn.commit()
                except Exception as e:
                    conn.rollback()
                    raise BatchPartialFailure(
                        index, len(statements), applied=ops[:index], remaining=ops[index:],
                        cause=self._query_error(e, sql),
                    ) from e

    def _apply_atomic(self, statements: List[str], ops: list, database: Optional[str]):
        index = 0
        try:
            with self.pools.get(self._pool_key(database)).transaction() as conn:
                for index, sql in enumerate(statements):
                    self._run(conn, sql)
        except Exception as e:
            # Rolled back: nothing from this batch was applied
            raise BatchPartialFailure(
                index, len(statements), applied=[], remaining=ops,
                cause=self._query_error(e, statements[index]),
            ) from e

    # ==================== Databases ====================

    def _run_autocommit(self, statements: List[str]):
        """CREATE/DROP DATABASE cannot run inside a transaction."""
        with self.pools.get(None).get_connection() as conn:
            self._set_autocommit(conn, True)
            try:
                for sql in statements:
                    try:
                        self._run(conn, sql)
                    except Exception as e:
                        raise self._query_error(e, sql) from e
            finally:
                self._set_autocommit(conn, False)

    def create_database(self, name: str):
        """
        Raises:
            InvalidDatabaseNameError: name has characters outside [A-Za-z0-9_-]
            QueryError: the server refused
        """
        self._run_autocommit(self.builder.generate_create_database(name))
        logger.info(f"Created database {name}")

    def drop_database(self, name: str):
        """Drop a database after closing this adapter's own connections to it."""
        statements = self.builder.generate_drop_database(name)
        self.pools.discard(name)
        self._run_autocommit(statements)
        self.invalidate_metadata()
        logger.info(f"Dropped database {name}")

    def get_databases(self) -> List[str]:
        return self._catalog_call(None, lambda c: c.get_databases())

    def get_relationships(self, database: Optional[str] = None,
                          schema: Optional[str] = None) -> List[Relationship]:
        """Foreign keys of a schema, one Relationship per column pair."""
        return self._catalog_call(database, lambda c: c.get_relationships(schema))

    def _catalog_call(self, database: Optional[str], call: Callable[[DatabaseDialect], Any]) -> Any:
        with self.pools.get(self._pool_key(database)).get_connection() as conn:
            try:
                result = call(self.catalog(conn, database))
                conn.rollback()
            except Exception as e:
                conn.rollback()
                raise self._query_error(e, "<catalog query>") from e
        return result

    # ==================== Hierarchy ====================

    def get_hierarchy(self, parent_id: str = ROOT_ID) -> List[TreeNode]:
        """
        Children of an explorer node.

        root -> databases (show_all_databases) or schemas
        database -> schemas
        schema -> Tables / Views / Functions folders
        folder -> objects of that kind
        """
        if not parent_id or parent_id == ROOT_ID:
            return self._root_nodes()

        parsed = resolve_identifier(parent_id)
        if parsed.kind == NodeKind.FOLDER:
            return self._folder_nodes(parent_id, parsed)
        if parsed.kind == NodeKind.SCHEMA:
            return [
                TreeNode(
                    id=folder_id(parent_id, key),
                    name=label,
                    node_type=NodeKind.FOLDER.value,
                    parent_id=parent_id,
                    has_children=True,
                )
                for key, label in HIERARCHY_FOLDERS
            ]
        if parsed.kind == NodeKind.DATABASE:
            return self._schema_nodes(parsed.database, parent_id)
        return []

    def _root_nodes(self) -> List[TreeNode]:
        if self.show_all_databases:
            return [
                TreeNode(
                    id=database_id(name),
                    name=name,
                    node_type=NodeKind.DATABASE.value,
                    parent_id=ROOT_ID,
                    has_children=True,
                )
                for name in self.get_databases()
            ]
        return self._schema_nodes(None, ROOT_ID)

    def _schema_nodes(self, database: Optional[str], parent_id: str) -> List[TreeNode]:
        schemas = self._catalog_call(database, lambda c: c.get_schemas())
        return [
            TreeNode(
                id=schema_id(name, database),
                name=name,
                node_type=NodeKind.SCHEMA.value,
                parent_id=parent_id,
                has_children=True,
            )
            for name in schemas
        ]

    def _folder_nodes(self, parent_id: str, parsed: ParsedIdentifier) -> List[TreeNode]:
        listing = _FOLDER_LISTINGS.get(folder_label(parent_id) or "")
        if listing is None:
            return []
        kind, method = listing
        schema = parsed.schema
        names = self._catalog_call(parsed.database, lambda c: getattr(c, method)(schema))
        return [
            TreeNode(
                id=object_id(kind, name, schema, parsed.database),
                name=name,
                node_type=kind.value,
                parent_id=parent_id,
                has_children=False,
            )
            for name in names
        ]

    # ==================== Lifecycle ====================

    def close(self):
        self.pools.close_all()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.dialect.value} database={self.default_database!r}>"

