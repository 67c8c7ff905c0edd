"""
Script Templates - "Script as..." SQL for explorer context-menu actions

Every template is built for an explicitly given dialect; quoting and row
limiting (LIMIT vs TOP) come from that dialect's statement builder.

    template = build_script("select_top", "schema:dbo.table:Orders", "mssql")
    template.sql  ->  SELECT TOP 1000 * FROM [dbo].[Orders];
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from ..config.settings import ExplorerSettings
from ..constants import QUERY_PREVIEW_LIMIT, SCRIPT_SELECT_LIMIT
from ..database.dialects import DatabaseDialect, DialectFactory
from ..database.identifiers import resolve_identifier
from ..database.literals import quote_string
from ..database.models import Dialect, NodeKind, ParsedIdentifier, TableMetadata

import logging
logger = logging.getLogger(__name__)

WARNING = "-- WARNING:"


@dataclass
class ScriptTemplate:
    """SQL to open in a new query tab."""
    title: str
    sql: str


@dataclass
class _Target:
    builder: DatabaseDialect
    parsed: ParsedIdentifier
    schema: Optional[str]
    name: str
    preview_limit: int = QUERY_PREVIEW_LIMIT

    @property
    def qualified(self) -> str:
        return self.builder.qualify(self.schema, self.name)

    def q(self, identifier: str) -> str:
        return self.builder.quote_identifier(identifier)


# ==================== Table / view scripts ====================

def _select_top(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    sql = t.builder.generate_select_query(t.name, t.schema, limit=t.preview_limit)
    return ScriptTemplate(f"Top {t.preview_limit} {t.name}", sql + ";")


def _count_rows(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    return ScriptTemplate(f"Count {t.name}", t.builder.generate_count_query(t.name, t.schema) + ";")


def _script_select(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    if t.builder.dialect == Dialect.MSSQL:
        sql = f"SELECT TOP {SCRIPT_SELECT_LIMIT} *\nFROM {t.qualified}\nWHERE 1=1\nORDER BY 1;"
    else:
        sql = f"SELECT *\nFROM {t.qualified}\nWHERE 1=1\nORDER BY 1\nLIMIT {SCRIPT_SELECT_LIMIT};"
    return ScriptTemplate(f"SELECT {t.name}", sql)


def _column_names(metadata: Optional[TableMetadata], fallback=("column1", "column2")):
    if metadata and metadata.columns:
        return metadata.column_names()
    return list(fallback)


def _script_insert(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    columns = _column_names(metadata)
    col_list = ",\n    ".join(t.q(c) for c in columns)
    values = ",\n    ".join(f"'value{i}'" for i in range(1, len(columns) + 1))
    sql = f"INSERT INTO {t.qualified} (\n    {col_list}\n)\nVALUES (\n    {values}\n);"
    return ScriptTemplate(f"INSERT {t.name}", sql)


def _key_column(metadata: Optional[TableMetadata]) -> str:
    if metadata and metadata.primary_key_column:
        return metadata.primary_key_column
    return "id"


def _script_update(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    key = _key_column(metadata)
    column = next((c for c in _column_names(metadata) if c != key), "column1")
    sql = f"UPDATE {t.qualified}\nSET {t.q(column)} = 'new_value'\nWHERE {t.q(key)} = 1;"
    return ScriptTemplate(f"UPDATE {t.name}", sql)


def _script_delete(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    sql = (
        f"{WARNING} Make sure to specify a WHERE clause!\n"
        f"DELETE FROM {t.qualified}\nWHERE {t.q(_key_column(metadata))} = 1;"
    )
    return ScriptTemplate(f"DELETE {t.name}", sql)


def _create_from_metadata(t: _Target, metadata: TableMetadata) -> str:
    lines = [
        f"    {t.q(c.name)} {c.type_name}{'' if c.is_nullable else ' NOT NULL'}"
        for c in metadata.columns
    ]
    if metadata.primary_key_columns:
        keys = ", ".join(t.q(c) for c in metadata.primary_key_columns)
        lines.append(f"    PRIMARY KEY ({keys})")
    body = ",\n".join(lines)
    return f"CREATE TABLE {t.qualified} (\n{body}\n);"


def _create_from_catalog(t: _Target) -> str:
    dialect = t.builder.dialect
    if dialect == Dialect.MYSQL:
        return f"SHOW CREATE TABLE {t.qualified};"

    schema = quote_string(t.schema or "", dialect)
    table = quote_string(t.name, dialect)
    if dialect == Dialect.MSSQL:
        return (
            "SELECT 'CREATE TABLE ' + QUOTENAME(TABLE_SCHEMA) + '.' + QUOTENAME(TABLE_NAME) + ' (' +\n"
            "    STRING_AGG(QUOTENAME(COLUMN_NAME) + ' ' + DATA_TYPE +\n"
            "        CASE WHEN CHARACTER_MAXIMUM_LENGTH IS NOT NULL\n"
            "             THEN '(' + CAST(CHARACTER_MAXIMUM_LENGTH AS VARCHAR(10)) + ')' ELSE '' END +\n"
            "        CASE WHEN IS_NULLABLE = 'NO' THEN ' NOT NULL' ELSE '' END, ', ')\n"
            "        WITHIN GROUP (ORDER BY ORDINAL_POSITION) + ');' AS create_statement\n"
            "FROM INFORMATION_SCHEMA.COLUMNS\n"
            f"WHERE TABLE_SCHEMA = {schema} AND TABLE_NAME = {table}\n"
            "GROUP BY TABLE_SCHEMA, TABLE_NAME;"
        )
    return (
        "SELECT\n"
        "    'CREATE TABLE ' || table_schema || '.' || table_name || ' (' ||\n"
        "    string_agg(\n"
        "        column_name || ' ' || data_type ||\n"
        "        CASE WHEN character_maximum_length IS NOT NULL THEN '(' || character_maximum_length || ')' ELSE '' END ||\n"
        "        CASE WHEN is_nullable = 'NO' THEN ' NOT NULL' ELSE '' END,\n"
        "        ', ' ORDER BY ordinal_position\n"
        "    ) || ');' AS create_statement\n"
        "FROM information_schema.columns\n"
        f"WHERE table_schema = {schema} AND table_name = {table}\n"
        "GROUP BY table_schema, table_name;"
    )


def _script_create(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    if metadata and metadata.columns:
        sql = _create_from_metadata(t, metadata)
    else:
        sql = f"-- Script: CREATE TABLE for {t.name}\n{_create_from_catalog(t)}"
    return ScriptTemplate(f"CREATE {t.name}", sql)


def _object_keyword(t: _Target) -> str:
    return "VIEW" if t.parsed.kind == NodeKind.VIEW else "TABLE"


def _script_drop(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    keyword = _object_keyword(t)
    sql = (
        f"{WARNING} This will permanently delete the {keyword.lower()}!\n"
        f"DROP {keyword} IF EXISTS {t.qualified};"
    )
    return ScriptTemplate(f"DROP {t.name}", sql)


def _truncate_table(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    sql = f"{WARNING} This will delete ALL rows from the table!\nTRUNCATE TABLE {t.qualified};"
    return ScriptTemplate(f"TRUNCATE {t.name}", sql)


def _drop_table(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    cascade = " CASCADE" if t.builder.dialect == Dialect.POSTGRES else ""
    sql = (
        f"{WARNING} This will permanently delete the table and all its data!\n"
        f"DROP TABLE IF EXISTS {t.qualified}{cascade};"
    )
    return ScriptTemplate(f"DROP {t.name}", sql)


# ==================== Schema / database scripts ====================

_ID_COLUMN = {
    Dialect.POSTGRES: "id SERIAL PRIMARY KEY",
    Dialect.MYSQL: "id INT AUTO_INCREMENT PRIMARY KEY",
    Dialect.MSSQL: "id INT IDENTITY(1,1) PRIMARY KEY",
}

_NOW = {
    Dialect.POSTGRES: "TIMESTAMP DEFAULT CURRENT_TIMESTAMP",
    Dialect.MYSQL: "TIMESTAMP DEFAULT CURRENT_TIMESTAMP",
    Dialect.MSSQL: "DATETIME2 DEFAULT SYSDATETIME()",
}


def _create_table(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    dialect = t.builder.dialect
    sql = (
        f"CREATE TABLE {t.builder.qualify(t.schema, 'new_table')} (\n"
        f"    {_ID_COLUMN[dialect]},\n"
        f"    {t.q('name')} VARCHAR(255) NOT NULL,\n"
        f"    {t.q('created_at')} {_NOW[dialect]}\n"
        ");"
    )
    return ScriptTemplate("Create Table", sql)


def _drop_schema(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    dialect = t.builder.dialect
    if dialect == Dialect.MYSQL:
        statement = f"DROP DATABASE {t.q(t.schema)};"
    elif dialect == Dialect.MSSQL:
        statement = f"DROP SCHEMA {t.q(t.schema)};"
    else:
        statement = f"DROP SCHEMA {t.q(t.schema)} CASCADE;"
    sql = f"{WARNING} This will drop the schema and ALL its objects!\n{statement}"
    return ScriptTemplate(f"Drop Schema {t.schema}", sql)


def _create_schema(t: _Target, metadata: Optional[TableMetadata]) -> ScriptTemplate:
    keyword = "DATABASE" if t.builder.dialect == Dialect.MYSQL else "SCHEMA"
    where = f" in {t.parsed.database}" if t.parsed.database else ""
    sql = f"-- Create a new schema{where}\nCREATE {keyword} {t.q('new_schema_name')};"
    return ScriptTemplate("Create Schema", sql)


ScriptBuilder = Callable[[_Target, Optional[TableMetadata]], ScriptTemplate]

TABLE_ACTIONS: Dict[str, ScriptBuilder] = {
    "select_top": _select_top,
    "count_rows": _count_rows,
    "script_select": _script_select,
    "script_insert": _script_insert,
    "script_update": _script_update,
    "script_delete": _script_delete,
    "script_create": _script_create,
    "script_drop": _script_drop,
    "truncate_table": _truncate_table,
    "drop_table": _drop_table,
}

SCHEMA_ACTIONS: Dict[str, ScriptBuilder] = {
    "create_table": _create_table,
    "drop_schema": _drop_schema,
}

DATABASE_ACTIONS: Dict[str, ScriptBuilder] = {
    "create_schema": _create_schema,
}

# Views accept the read-only table actions and script_drop
VIEW_ACTIONS = ("select_top", "count_rows", "script_select", "script_create", "script_drop")


def build_script(action: str, node_id: str, dialect: Union[Dialect, str],
                 metadata: Optional[TableMetadata] = None,
                 settings: Optional[ExplorerSettings] = None) -> ScriptTemplate:
    """
    Build the script for a context-menu action on a node.

    Args:
        action: One of TABLE_ACTIONS, SCHEMA_ACTIONS or DATABASE_ACTIONS
        node_id: Explorer node identifier
        dialect: Dialect of the connection the node belongs to
        metadata: Table columns; makes INSERT/UPDATE/CREATE scripts concrete
        settings: Explorer settings; preview_limit sizes select_top

    Raises:
        ValueError: action does not apply to the node kind, or a schema node has
            no schema name (MySQL without a connected database)
        UnsupportedDialectError: unknown dialect
    """
    builder = DialectFactory.create(dialect)
    parsed = resolve_identifier(node_id)
    schema = builder.resolve_schema(parsed.schema)

    if parsed.kind in (NodeKind.TABLE, NodeKind.VIEW):
        actions = TABLE_ACTIONS
        if parsed.kind == NodeKind.VIEW and action not in VIEW_ACTIONS:
            actions = {}
        name = parsed.table
    elif parsed.kind == NodeKind.SCHEMA:
        if schema is None:
            raise ValueError(f"Cannot resolve a schema name for {node_id}")
        actions, name = SCHEMA_ACTIONS, schema
    elif parsed.kind == NodeKind.DATABASE:
        actions, name = DATABASE_ACTIONS, parsed.database
    else:
        actions, name = {}, node_id

    script = actions.get(action)
    if script is None:
        raise ValueError(f"Action {action!r} does not apply to {parsed.kind.value} nodes")

    logger.debug(f"Building {action} script for {node_id}")
    preview_limit = (settings or ExplorerSettings()).preview_limit
    return script(_Target(builder, parsed, schema, name, preview_limit), metadata)
