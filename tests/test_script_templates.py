"""
Tests for "Script as..." templates.
"""
import pytest

from schemaforge.config import ExplorerSettings
from schemaforge.database.models import ColumnInfo, TableMetadata
from schemaforge.scripts import build_script


@pytest.fixture
def metadata():
    return TableMetadata(columns=[
        ColumnInfo("id", "integer", is_nullable=False, is_primary_key=True),
        ColumnInfo("name", "text"),
    ])


class TestTableScripts:
    """Tests for table and view actions"""

    def test_select_top_per_dialect(self):
        assert build_script("select_top", "schema:dbo.table:Orders", "mssql").sql == (
            "SELECT TOP 1000 * FROM [dbo].[Orders];"
        )
        assert build_script("select_top", "schema:public.table:users", "postgres").sql == (
            'SELECT * FROM "public"."users" LIMIT 1000;'
        )
        assert build_script("select_top", "table:orders", "mysql").sql == (
            "SELECT * FROM `orders` LIMIT 1000;"
        )

    def test_select_top_uses_preview_limit_setting(self):
        settings = ExplorerSettings()
        settings.set("preview_limit", 250)
        template = build_script("select_top", "schema:dbo.table:Orders", "mssql", settings=settings)
        assert template.sql == "SELECT TOP 250 * FROM [dbo].[Orders];"
        assert template.title == "Top 250 Orders"

    def test_public_maps_to_dbo_on_mssql(self):
        sql = build_script("count_rows", "table:Orders", "sqlserver").sql
        assert sql == "SELECT COUNT(*) AS total_rows FROM [dbo].[Orders];"

    def test_script_select_limits(self):
        assert "SELECT TOP 100 *" in build_script("script_select", "schema:dbo.table:t", "mssql").sql
        assert build_script("script_select", "schema:public.table:t", "postgres").sql.endswith(
            "LIMIT 100;"
        )

    def test_insert_uses_metadata(self, metadata):
        sql = build_script("script_insert", "schema:public.table:users", "postgres", metadata).sql
        assert '"id",\n    "name"' in sql
        assert "'value2'" in sql

    def test_update_and_delete_use_key(self, metadata):
        update = build_script("script_update", "schema:public.table:users", "postgres", metadata)
        assert 'SET "name" = \'new_value\'' in update.sql
        assert 'WHERE "id" = 1' in update.sql
        delete = build_script("script_delete", "schema:public.table:users", "mysql", metadata)
        assert delete.sql.startswith("-- WARNING:")

    def test_create_from_metadata(self, metadata):
        sql = build_script("script_create", "schema:dbo.table:users", "mssql", metadata).sql
        assert sql == (
            "CREATE TABLE [dbo].[users] (\n"
            "    [id] integer NOT NULL,\n"
            "    [name] text,\n"
            "    PRIMARY KEY ([id])\n"
            ");"
        )

    def test_create_from_catalog(self):
        assert build_script("script_create", "schema:shop.table:users", "mysql").sql.endswith(
            "SHOW CREATE TABLE `shop`.`users`;"
        )
        assert "string_agg" in build_script("script_create", "schema:public.table:users", "postgres").sql

    def test_drop_table_cascade_on_postgres_only(self):
        assert build_script("drop_table", "schema:public.table:t", "postgres").sql.endswith(
            'DROP TABLE IF EXISTS "public"."t" CASCADE;'
        )
        assert build_script("drop_table", "schema:dbo.table:t", "mssql").sql.endswith(
            "DROP TABLE IF EXISTS [dbo].[t];"
        )

    def test_view_drop(self):
        sql = build_script("script_drop", "schema:public.view:v", "postgres").sql
        assert 'DROP VIEW IF EXISTS "public"."v";' in sql

    def test_view_rejects_table_only_actions(self):
        with pytest.raises(ValueError):
            build_script("truncate_table", "schema:public.view:v", "postgres")


class TestContainerScripts:
    """Tests for schema and database actions"""

    def test_create_table_identity_column(self):
        assert "IDENTITY(1,1)" in build_script("create_table", "schema:dbo", "mssql").sql
        assert "SERIAL" in build_script("create_table", "schema:public", "postgres").sql
        assert "AUTO_INCREMENT" in build_script("create_table", "schema:shop", "mysql").sql

    def test_drop_schema(self):
        assert build_script("drop_schema", "schema:sales", "postgres").sql.endswith(
            'DROP SCHEMA "sales" CASCADE;'
        )
        assert build_script("drop_schema", "schema:shop", "mysql").sql.endswith(
            "DROP DATABASE `shop`;"
        )

    def test_mysql_schema_node_without_database(self):
        """Without a connected database the default schema has no name to drop"""
        with pytest.raises(ValueError, match="schema name"):
            build_script("drop_schema", "schema:public", "mysql")

    def test_create_schema(self):
        assert build_script("create_schema", "db:shop", "mysql").sql.endswith(
            "CREATE DATABASE `new_schema_name`;"
        )
        assert build_script("create_schema", "db:shop", "postgres").sql.endswith(
            'CREATE SCHEMA "new_schema_name";'
        )

    def test_action_must_match_node_kind(self):
        with pytest.raises(ValueError):
            build_script("select_top", "db:shop", "postgres")
        with pytest.raises(ValueError):
            build_script("create_table", "schema:public.folder:tables", "postgres")
