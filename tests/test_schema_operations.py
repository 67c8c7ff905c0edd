"""
Tests for schema operation decoding, translation and diffing.
"""
import pytest

from schemaforge.database.errors import SchemaOperationError
from schemaforge.database.models import (
    AddColumn,
    AddForeignKey,
    AddPrimaryKey,
    AlterColumnType,
    ColumnInfo,
    DropColumn,
    DropForeignKey,
    DropPrimaryKey,
    ForeignKeyConstraint,
    RenameColumn,
)
from schemaforge.database.schema_operations import (
    diff_columns,
    fill_primary_key_name,
    operation_from_dict,
    operation_to_dict,
    translate_operations,
)


def _one(dialect, schema, table, operation):
    statements = translate_operations(dialect, schema, table, [operation])
    assert len(statements) == 1
    return statements[0]


class TestColumnOperations:
    """Tests for column add/drop/alter/rename spellings"""

    @pytest.mark.parametrize("dialect,schema,expected", [
        ("postgres", "public", 'ALTER TABLE "public"."users" ADD COLUMN "email" varchar(255) NOT NULL'),
        ("mysql", "shop", "ALTER TABLE `shop`.`users` ADD COLUMN `email` varchar(255) NOT NULL"),
        ("mssql", "dbo", "ALTER TABLE [dbo].[users] ADD [email] varchar(255) NOT NULL"),
    ])
    def test_add_column(self, dialect, schema, expected):
        op = AddColumn(name="email", data_type="varchar(255)", is_nullable=False)
        assert _one(dialect, schema, "users", op) == expected

    def test_nullable_column_has_no_constraint(self):
        sql = _one("postgres", "public", "users", AddColumn(name="note", data_type="text"))
        assert sql == 'ALTER TABLE "public"."users" ADD COLUMN "note" text'

    def test_drop_column(self):
        assert _one("mssql", None, "users", DropColumn(name="email")) == (
            "ALTER TABLE [dbo].[users] DROP COLUMN [email]"
        )

    @pytest.mark.parametrize("dialect,schema,expected", [
        ("postgres", "public", 'ALTER TABLE "public"."users" ALTER COLUMN "age" TYPE bigint'),
        ("mysql", "shop", "ALTER TABLE `shop`.`users` MODIFY COLUMN `age` bigint"),
        ("mssql", "dbo", "ALTER TABLE [dbo].[users] ALTER COLUMN [age] bigint"),
    ])
    def test_alter_column_type(self, dialect, schema, expected):
        assert _one(dialect, schema, "users", AlterColumnType(name="age", new_type="bigint")) == expected

    def test_rename_column(self):
        op = RenameColumn(name="old", new_name="new")
        assert _one("postgres", "public", "users", op) == (
            'ALTER TABLE "public"."users" RENAME COLUMN "old" TO "new"'
        )
        assert _one("mysql", "shop", "users", op) == (
            "ALTER TABLE `shop`.`users` RENAME COLUMN `old` TO `new`"
        )

    def test_mssql_rename_uses_sp_rename(self):
        sql = _one("mssql", "dbo", "users", RenameColumn(name="old", new_name="new"))
        assert sql == "EXEC sp_rename '[dbo].[users].[old]', 'new', 'COLUMN'"

    def test_mssql_rename_escapes_quotes(self):
        sql = _one("mssql", "dbo", "users", RenameColumn(name="it's", new_name="o'k"))
        assert sql == "EXEC sp_rename '[dbo].[users].[it''s]', 'o''k', 'COLUMN'"

    @pytest.mark.parametrize("bad_type", ["int; DROP TABLE users", "int -- x", "int /* x */", "  "])
    def test_unsafe_type_rejected(self, bad_type):
        with pytest.raises(SchemaOperationError):
            _one("postgres", "public", "users", AddColumn(name="x", data_type=bad_type))

    def test_missing_name_rejected(self):
        with pytest.raises(SchemaOperationError):
            _one("postgres", "public", "users", DropColumn(name=""))


class TestKeyOperations:
    """Tests for primary and foreign key spellings"""

    def test_add_primary_key(self):
        sql = _one("postgres", "public", "users", AddPrimaryKey(columns=("id", "tenant")))
        assert sql == 'ALTER TABLE "public"."users" ADD PRIMARY KEY ("id", "tenant")'

    def test_add_primary_key_requires_columns(self):
        with pytest.raises(SchemaOperationError):
            _one("postgres", "public", "users", AddPrimaryKey(columns=()))

    def test_drop_primary_key_by_name(self):
        sql = _one("postgres", "public", "users", DropPrimaryKey(constraint_name="users_pk"))
        assert sql == 'ALTER TABLE "public"."users" DROP CONSTRAINT "users_pk"'

    def test_postgres_assumes_default_key_name(self):
        """Unnamed keys fall back to <table>_pkey"""
        sql = _one("postgres", "public", "users", DropPrimaryKey())
        assert sql == 'ALTER TABLE "public"."users" DROP CONSTRAINT "users_pkey"'

    def test_mysql_drop_primary_key(self):
        assert _one("mysql", "shop", "users", DropPrimaryKey()) == (
            "ALTER TABLE `shop`.`users` DROP PRIMARY KEY"
        )

    def test_mssql_drop_primary_key_needs_name(self):
        with pytest.raises(SchemaOperationError):
            _one("mssql", "dbo", "users", DropPrimaryKey())
        assert _one("mssql", "dbo", "users", DropPrimaryKey("PK_users")) == (
            "ALTER TABLE [dbo].[users] DROP CONSTRAINT [PK_users]"
        )

    def test_add_foreign_key(self):
        op = AddForeignKey(
            name="fk_orders_user", columns=("user_id",), ref_table="users",
            ref_columns=("id",), on_delete="cascade",
        )
        assert _one("postgres", "public", "orders", op) == (
            'ALTER TABLE "public"."orders" ADD CONSTRAINT "fk_orders_user" '
            'FOREIGN KEY ("user_id") REFERENCES "public"."users" ("id") ON DELETE CASCADE'
        )

    def test_foreign_key_to_other_schema(self):
        op = AddForeignKey(
            name="fk", columns=("customer_id",), ref_table="sales.customers",
            ref_columns=("id",), on_update="set  null",
        )
        assert _one("mssql", "dbo", "orders", op) == (
            "ALTER TABLE [dbo].[orders] ADD CONSTRAINT [fk] FOREIGN KEY ([customer_id]) "
            "REFERENCES [sales].[customers] ([id]) ON UPDATE SET NULL"
        )

    def test_mssql_rejects_restrict(self):
        op = AddForeignKey(name="fk", columns=("a",), ref_table="t", ref_columns=("id",),
                           on_delete="RESTRICT")
        with pytest.raises(SchemaOperationError):
            _one("mssql", "dbo", "orders", op)
        assert _one("postgres", "public", "orders", op).endswith("ON DELETE RESTRICT")

    def test_unknown_action_rejected(self):
        op = AddForeignKey(name="fk", columns=("a",), ref_table="t", ref_columns=("id",),
                           on_delete="SET DEFAULT; DROP")
        with pytest.raises(SchemaOperationError):
            _one("postgres", "public", "orders", op)

    def test_mismatched_columns_rejected(self):
        op = AddForeignKey(name="fk", columns=("a", "b"), ref_table="t", ref_columns=("id",))
        with pytest.raises(SchemaOperationError):
            _one("mysql", "shop", "orders", op)

    def test_drop_foreign_key(self):
        assert _one("mysql", "shop", "orders", DropForeignKey(name="fk_x")) == (
            "ALTER TABLE `shop`.`orders` DROP FOREIGN KEY `fk_x`"
        )
        assert _one("postgres", "public", "orders", DropForeignKey(name="fk_x")) == (
            'ALTER TABLE "public"."orders" DROP CONSTRAINT "fk_x"'
        )

    def test_relationship_dialog_constraint(self):
        fk = ForeignKeyConstraint("fk_o_u", "orders", "user_id", "users", "id", on_delete="CASCADE")
        op = fk.to_operation()
        assert op.columns == ("user_id",)
        assert "ON DELETE CASCADE ON UPDATE NO ACTION" in _one("postgres", "public", "orders", op)


class TestTranslateOperations:
    """Tests for batch translation"""

    def test_order_is_preserved(self):
        """drop_pk then add_pk gives two statements in that order"""
        statements = translate_operations("postgres", "public", "users", [
            DropPrimaryKey("users_pkey"),
            AddPrimaryKey(columns=("id", "tenant")),
        ])
        assert statements == [
            'ALTER TABLE "public"."users" DROP CONSTRAINT "users_pkey"',
            'ALTER TABLE "public"."users" ADD PRIMARY KEY ("id", "tenant")',
        ]

    def test_wire_dictionaries_accepted(self):
        statements = translate_operations("mssql", "dbo", "users", [
            {"type": "add_column", "name": "email", "dataType": "nvarchar(100)"},
            {"type": "drop_column", "name": "legacy"},
        ])
        assert statements == [
            "ALTER TABLE [dbo].[users] ADD [email] nvarchar(100)",
            "ALTER TABLE [dbo].[users] DROP COLUMN [legacy]",
        ]

    def test_malformed_operation_fails_whole_batch(self):
        with pytest.raises(SchemaOperationError):
            translate_operations("postgres", "public", "users", [
                DropColumn(name="a"),
                {"type": "explode"},
            ])

    def test_empty_batch(self):
        assert translate_operations("mysql", "shop", "users", []) == []


class TestWireFormat:
    """Tests for operation_from_dict() / operation_to_dict()"""

    def test_camel_and_snake_case(self):
        camel = operation_from_dict(
            {"type": "add_column", "name": "a", "dataType": "int", "isNullable": False}
        )
        snake = operation_from_dict(
            {"type": "add_column", "name": "a", "data_type": "int", "is_nullable": False}
        )
        assert camel == snake == AddColumn(name="a", data_type="int", is_nullable=False)

    def test_foreign_key_fields(self):
        op = operation_from_dict({
            "type": "add_fk", "name": "fk", "columns": "user_id",
            "refTable": "users", "refColumns": ["id"], "onDelete": "CASCADE",
        })
        assert op == AddForeignKey(name="fk", columns=("user_id",), ref_table="users",
                                   ref_columns=("id",), on_delete="CASCADE")

    def test_unknown_type(self):
        with pytest.raises(SchemaOperationError, match="Unknown schema operation type"):
            operation_from_dict({"type": "truncate"})

    def test_missing_field(self):
        with pytest.raises(SchemaOperationError, match="newName"):
            operation_from_dict({"type": "rename_column", "name": "a"})

    def test_to_dict(self):
        assert operation_to_dict(RenameColumn(name="a", new_name="b")) == {
            "type": "rename_column", "name": "a", "newName": "b",
        }
        assert operation_to_dict(DropPrimaryKey()) == {"type": "drop_pk"}
        encoded = operation_to_dict(AddPrimaryKey(columns=("id",)))
        assert operation_from_dict(encoded) == AddPrimaryKey(columns=("id",))


class TestDiffColumns:
    """Tests for table designer diffing"""

    @pytest.fixture
    def original(self):
        return [
            ColumnInfo("id", "integer", is_nullable=False, is_primary_key=True,
                       pk_constraint_name="users_pkey"),
            ColumnInfo("name", "text"),
            ColumnInfo("age", "integer"),
        ]

    def test_add_drop_and_type_change(self, original):
        edited = [original[0], ColumnInfo("age", "bigint"), ColumnInfo("email", "text", is_nullable=False)]
        assert diff_columns(original, edited) == [
            DropColumn(name="name"),
            AddColumn(name="email", data_type="text", is_nullable=False),
            AlterColumnType(name="age", new_type="bigint"),
        ]

    def test_primary_key_change(self, original):
        edited = list(original) + [ColumnInfo("tenant", "integer", is_primary_key=True)]
        assert diff_columns(original, edited) == [
            DropPrimaryKey(constraint_name="users_pkey"),
            AddColumn(name="tenant", data_type="integer"),
            AddPrimaryKey(columns=("id", "tenant")),
        ]

    def test_no_changes(self, original):
        assert diff_columns(original, list(original)) == []

    def test_fill_primary_key_name(self):
        ops = fill_primary_key_name([DropPrimaryKey(), DropColumn("x")], "PK_users")
        assert ops == [DropPrimaryKey("PK_users"), DropColumn("x")]
        assert fill_primary_key_name([DropPrimaryKey()], None) == [DropPrimaryKey()]
