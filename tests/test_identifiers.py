"""
Tests for node identifier resolution and formatting.
"""
import pytest

from schemaforge.database.identifiers import (
    database_id,
    folder_id,
    folder_label,
    format_identifier,
    object_id,
    resolve_identifier,
    schema_id,
)
from schemaforge.database.models import NodeKind, ParsedIdentifier


class TestResolveStructured:
    """Tests for prefix-tagged identifiers"""

    def test_full_table_identifier(self):
        """db/schema/table segments resolve to a table"""
        parsed = resolve_identifier("db:shop.schema:sales.table:orders")
        assert parsed == ParsedIdentifier(
            database="shop", schema="sales", table="orders", kind=NodeKind.TABLE
        )

    def test_view_and_function_kinds(self):
        """view: and func: segments set the kind"""
        assert resolve_identifier("schema:public.view:active_users").kind == NodeKind.VIEW
        func = resolve_identifier("schema:public.func:calc_total")
        assert func.kind == NodeKind.FUNCTION
        assert func.table == "calc_total"

    def test_missing_schema_defaults_to_public(self):
        """A table segment alone lives in the default schema"""
        parsed = resolve_identifier("db:shop.table:orders")
        assert parsed.schema == "public"
        assert parsed.database == "shop"

    def test_database_and_schema_nodes(self):
        """Identifiers without an object segment address containers"""
        assert resolve_identifier("db:shop").kind == NodeKind.DATABASE
        schema = resolve_identifier("db:shop.schema:sales")
        assert schema.kind == NodeKind.SCHEMA
        assert schema.table is None

    def test_folder_marker_forces_folder_kind(self):
        """A .folder: segment wins over every other kind"""
        parsed = resolve_identifier("db:shop.schema:sales.folder:tables")
        assert parsed.kind == NodeKind.FOLDER
        assert parsed.schema == "sales"
        assert parsed.database == "shop"

    def test_structured_markers_take_precedence_over_dots(self):
        """A dotted string with markers is never read as schema.table"""
        parsed = resolve_identifier("schema:sales.table:orders")
        assert parsed.schema == "sales"
        assert parsed.table == "orders"


class TestResolveLegacy:
    """Tests for legacy identifier forms"""

    def test_schema_dot_table(self):
        """schema.table resolves to a table"""
        parsed = resolve_identifier("sales.orders")
        assert (parsed.schema, parsed.table, parsed.kind) == ("sales", "orders", NodeKind.TABLE)
        assert parsed.database is None

    def test_bare_table_name(self):
        """A bare name is a table in the default schema"""
        parsed = resolve_identifier("orders")
        assert (parsed.schema, parsed.table) == ("public", "orders")

    def test_never_raises_on_empty_input(self):
        """Empty or None input degrades instead of failing"""
        assert resolve_identifier("").kind == NodeKind.TABLE
        assert resolve_identifier(None).schema == "public"


class TestFormatIdentifier:
    """Tests for format_identifier() and the id builders"""

    @pytest.mark.parametrize("node_id", [
        "db:shop.schema:sales.table:orders",
        "schema:public.view:active_users",
        "db:shop.schema:public.func:calc_total",
        "db:shop.schema:sales",
        "db:shop",
    ])
    def test_structured_ids_round_trip(self, node_id):
        """format(resolve(id)) returns the same id"""
        assert format_identifier(resolve_identifier(node_id)) == node_id

    @pytest.mark.parametrize("parsed", [
        ParsedIdentifier(database="app", schema="sales", table="orders", kind=NodeKind.TABLE),
        ParsedIdentifier(database=None, schema="public", table="users", kind=NodeKind.TABLE),
        ParsedIdentifier(database="app", schema="dbo", table="Order Lines", kind=NodeKind.TABLE),
    ])
    def test_parsed_tables_round_trip(self, parsed):
        """resolve(format(p)) returns the same parsed identifier"""
        assert resolve_identifier(format_identifier(parsed)) == parsed

    def test_folder_cannot_be_formatted(self):
        """Folders carry no label in their parsed form"""
        with pytest.raises(ValueError):
            format_identifier(resolve_identifier("schema:public.folder:tables"))

    def test_database_kind_requires_name(self):
        with pytest.raises(ValueError):
            format_identifier(ParsedIdentifier(kind=NodeKind.DATABASE))

    def test_builders(self):
        """Hierarchy id builders produce resolvable ids"""
        assert database_id("shop") == "db:shop"
        assert schema_id("sales") == "schema:sales"
        assert schema_id("sales", "shop") == "db:shop.schema:sales"
        assert object_id(NodeKind.VIEW, "v", "sales", "shop") == "db:shop.schema:sales.view:v"

    def test_object_id_rejects_container_kinds(self):
        with pytest.raises(ValueError):
            object_id(NodeKind.FOLDER, "x", "public")

    def test_folder_label(self):
        """folder_label() reads the trailing folder segment"""
        node_id = folder_id("db:shop.schema:sales", "views")
        assert node_id == "db:shop.schema:sales.folder:views"
        assert folder_label(node_id) == "views"
        assert folder_label("schema:sales") is None

    def test_is_queryable(self):
        assert resolve_identifier("schema:s.table:t").is_queryable
        assert not resolve_identifier("schema:s.func:f").is_queryable
