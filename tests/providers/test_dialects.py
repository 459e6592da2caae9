"""Tests for the statements each provider dialect writes."""

from dbmatic.models import (
    DmCheckConstraint,
    DmColumn,
    DmDefaultConstraint,
    DmForeignKeyAction,
    DmForeignKeyConstraint,
    DmIndex,
    DmPrimaryKeyConstraint,
    DmTable,
    DmUniqueConstraint,
    DmView,
)
from dbmatic.providers.dialect import is_simple_expression, strip_view_header, unwrap_parentheses
from dbmatic.providers.errors import ViewDefinitionError
from dbmatic.providers.mysql.dialect import MySqlDialect
from dbmatic.providers.postgres.dialect import PostgresDialect
from dbmatic.providers.sqlite.dialect import SqliteDialect
from dbmatic.providers.sqlserver.dialect import SqlServerDialect
from dbmatic.providers.version import DatabaseVersion

import pytest

PG = PostgresDialect()
MS = SqlServerDialect()
MY = MySqlDialect()
LITE = SqliteDialect()


def _orders(schema_name=None) -> DmTable:
    """Return a prepared orders table, the way the provider methods hand it to a dialect."""
    return DmTable(
        schema_name,
        "orders",
        [
            DmColumn(schema_name, "orders", "id", int, is_primary_key=True, is_auto_increment=True),
            DmColumn(schema_name, "orders", "qty", int),
        ],
        primary_key_constraint=DmPrimaryKeyConstraint(schema_name, "orders", "pk_orders_id", ["id"]),
        default_constraints=[DmDefaultConstraint(schema_name, "orders", "qty", "df_orders_qty", "1")],
        check_constraints=[DmCheckConstraint(schema_name, "orders", "qty", "ck_orders_qty", "qty > 0")],
        indexes=[DmIndex(schema_name, "orders", "ix_orders_qty", ["qty desc"])],
    )


@pytest.mark.parametrize(
    "dialect, name, ex_name",
    [
        (PG, "Order Lines", "orderlines"),
        (PG, "Orders_2", "orders_2"),
        (MS, "Order-Lines", "OrderLines"),
        (MY, "orders$", "orders"),
        (LITE, "", ""),
        (LITE, None, None),
    ],
)
def test_normalize_name(dialect, name, ex_name):
    """Tests identifiers are stripped of unsupported characters, and folded where the provider folds them."""
    assert dialect.normalize_name(name) == ex_name


@pytest.mark.parametrize(
    "dialect, schema_name, ex_schema",
    [
        (PG, None, "public"),
        (PG, "  ", "public"),
        (PG, "Sales", "sales"),
        (MS, None, "dbo"),
        (MS, "Sales", "Sales"),
        (MY, "sales", None),
        (LITE, "main", None),
    ],
)
def test_normalize_schema_name(dialect, schema_name, ex_schema):
    """Tests schema names fall back to the default schema, and are dropped where schemas are unsupported."""
    assert dialect.normalize_schema_name(schema_name) == ex_schema


@pytest.mark.parametrize(
    "dialect, name_filter, ex_like",
    [
        (PG, None, "%"),
        (PG, "Ord*", "ord%"),
        (MS, "Ord?rs", "ord_rs"),
        (MY, "orders", "orders"),
    ],
)
def test_like_pattern(dialect, name_filter, ex_like: str):
    """Tests filters become lower-cased LIKE patterns."""
    assert dialect.like_pattern(name_filter) == ex_like


@pytest.mark.parametrize(
    "dialect, schema_name, ex_qualified",
    [
        (PG, "public", '"public"."orders"'),
        (MS, "dbo", "[dbo].[orders]"),
        (MY, None, "`orders`"),
        (MY, "ignored", "`orders`"),
        (LITE, None, '"orders"'),
    ],
)
def test_qualify(dialect, schema_name, ex_qualified: str):
    """Tests object names are quoted, with a schema prefix where the provider has schemas."""
    assert dialect.qualify(schema_name, "orders") == ex_qualified


def test_postgres_create_table():
    """Tests PostgreSQL tables use identity columns, and table level key constraints without key order."""
    table = _orders("public")
    statements = PG.create_table(table, {"id": "integer", "qty": "integer"}, ordered_keys=False)
    assert statements == [
        'CREATE TABLE "public"."orders" (\n'
        '    "id" integer NOT NULL GENERATED BY DEFAULT AS IDENTITY,\n'
        '    "qty" integer NOT NULL DEFAULT 1,\n'
        '    CONSTRAINT "pk_orders_id" PRIMARY KEY ("id"),\n'
        '    CONSTRAINT "ck_orders_qty" CHECK (qty > 0)\n'
        ")",
        'CREATE INDEX "ix_orders_qty" ON "public"."orders" ("qty" DESC)',
    ]


def test_postgres_serial_has_no_identity():
    """Tests serial columns do not also get an identity clause."""
    column = DmColumn("public", "orders", "id", int, is_auto_increment=True)
    assert PG.column_definition(column, "serial") == '"id" serial NOT NULL'


def test_sqlserver_create_table():
    """Tests SQL Server tables use IDENTITY and named inline defaults."""
    statements = MS.create_table(_orders("dbo"), {"id": "int", "qty": "int"})
    assert statements[0] == (
        "CREATE TABLE [dbo].[orders] (\n"
        "    [id] int NOT NULL IDENTITY(1,1),\n"
        "    [qty] int NOT NULL CONSTRAINT [df_orders_qty] DEFAULT (1),\n"
        "    CONSTRAINT [pk_orders_id] PRIMARY KEY ([id]),\n"
        "    CONSTRAINT [ck_orders_qty] CHECK (qty > 0)\n"
        ")"
    )
    assert statements[1] == "CREATE INDEX [ix_orders_qty] ON [dbo].[orders] ([qty] DESC)"


def test_mysql_create_table_without_checks():
    """Tests MySQL tables use AUTO_INCREMENT, and leave out checks the server would ignore."""
    statements = MY.create_table(_orders(), {"id": "int", "qty": "int"}, supports_checks=False)
    assert statements[0] == (
        "CREATE TABLE `orders` (\n"
        "    `id` int NOT NULL AUTO_INCREMENT,\n"
        "    `qty` int NOT NULL DEFAULT 1,\n"
        "    CONSTRAINT `pk_orders_id` PRIMARY KEY (`id`)\n"
        ")"
    )


def test_sqlite_create_table():
    """Tests a single auto increment key is declared on its column, with AUTOINCREMENT after it."""
    statements = LITE.create_table(_orders(), {"id": "integer", "qty": "int"})
    assert statements == [
        'CREATE TABLE "orders" (\n'
        '    "id" integer NOT NULL CONSTRAINT "pk_orders_id" PRIMARY KEY AUTOINCREMENT,\n'
        '    "qty" int NOT NULL CONSTRAINT "df_orders_qty" DEFAULT (1),\n'
        '    CONSTRAINT "ck_orders_qty" CHECK (qty > 0)\n'
        ")",
        'CREATE INDEX "ix_orders_qty" ON "orders" ("qty" DESC)',
    ]


def test_sqlite_composite_key_is_table_level():
    """Tests a composite key stays a table constraint."""
    table = DmTable(
        None,
        "lines",
        [DmColumn(None, "lines", "order_id", int), DmColumn(None, "lines", "line_no", int)],
        primary_key_constraint=DmPrimaryKeyConstraint(None, "lines", "pk_lines", ["order_id", "line_no"]),
    )
    assert LITE.inline_primary_key(table) is None
    statements = LITE.create_table(table, {"order_id": "int", "line_no": "int"})
    assert 'CONSTRAINT "pk_lines" PRIMARY KEY ("order_id", "line_no")' in statements[0]


def test_foreign_key_clause():
    """Tests foreign keys name the referenced table in the constraint's schema, with both actions."""
    constraint = DmForeignKeyConstraint(
        "public",
        "orders",
        "fk_orders_customer_id_customers_id",
        ["customer_id"],
        "customers",
        ["id"],
        DmForeignKeyAction.CASCADE,
    )
    assert PG.add_foreign_key(constraint) == (
        'ALTER TABLE "public"."orders" ADD CONSTRAINT "fk_orders_customer_id_customers_id" '
        'FOREIGN KEY ("customer_id") REFERENCES "public"."customers" ("id") ON DELETE CASCADE ON UPDATE NO ACTION'
    )
    assert LITE.add_foreign_key(constraint) is None


@pytest.mark.parametrize(
    "dialect, ex_sql",
    [
        (PG, 'DROP INDEX "public"."ix_orders_qty" CASCADE'),
        (MS, "DROP INDEX [ix_orders_qty] ON [public].[orders]"),
        (MY, "DROP INDEX `ix_orders_qty` ON `orders`"),
        (LITE, 'DROP INDEX "ix_orders_qty"'),
    ],
)
def test_drop_index(dialect, ex_sql: str):
    """Tests index drops, which differ on every provider."""
    assert dialect.drop_index("public", "orders", "ix_orders_qty") == ex_sql


@pytest.mark.parametrize(
    "dialect, ex_sql",
    [
        (PG, 'ALTER TABLE "public"."orders" RENAME TO "purchases"'),
        (MS, "EXEC sp_rename 'public.orders', 'purchases'"),
        (MY, "ALTER TABLE `orders` RENAME TO `purchases`"),
        (LITE, 'ALTER TABLE "orders" RENAME TO "purchases"'),
    ],
)
def test_rename_table(dialect, ex_sql: str):
    """Tests table renames."""
    assert dialect.rename_table("public", "orders", "purchases") == ex_sql


def test_rename_column():
    """Tests column renames, SQL Server going through sp_rename."""
    table = _orders("dbo")
    assert MS.rename_column(table, "qty", "quantity") == "EXEC sp_rename 'dbo.orders.qty', 'quantity', 'COLUMN'"
    assert LITE.rename_column(_orders(), "qty", "quantity") == (
        'ALTER TABLE "orders" RENAME COLUMN "qty" TO "quantity"'
    )


@pytest.mark.parametrize(
    "dialect, ex_sql",
    [
        (PG, 'DROP TABLE "public"."orders" CASCADE'),
        (MS, "DROP TABLE [public].[orders]"),
        (MY, "DROP TABLE `orders`"),
    ],
)
def test_drop_table(dialect, ex_sql: str):
    """Tests table drops."""
    assert dialect.drop_table("public", "orders") == ex_sql


def test_schema_statements():
    """Tests PostgreSQL drops schemas with everything in them."""
    assert PG.create_schema("sales") == 'CREATE SCHEMA "sales"'
    assert PG.drop_schema("sales") == 'DROP SCHEMA "sales" CASCADE'
    assert MS.drop_schema("sales") == "DROP SCHEMA [sales]"


def test_add_column():
    """Tests column additions, with the default clause each provider uses."""
    table = _orders("public")
    column = DmColumn("public", "orders", "note", str, is_nullable=True)
    default = DmDefaultConstraint("public", "orders", "note", "df_orders_note", "'none'")
    assert PG.add_column(table, column, "varchar(255)", default) == (
        """ALTER TABLE "public"."orders" ADD COLUMN "note" varchar(255) NULL DEFAULT 'none'"""
    )
    assert MS.add_column(table, column, "nvarchar(255)", default) == (
        "ALTER TABLE [public].[orders] ADD [note] nvarchar(255) NULL CONSTRAINT [df_orders_note] DEFAULT ('none')"
    )
    assert LITE.add_column(table, column, "varchar(255)") is None


def test_sqlserver_column_dependents():
    """Tests dropping a SQL Server column first drops its default, check and indexes."""
    statements = MS.column_dependents(_orders("dbo"), "QTY")
    assert statements == [
        "ALTER TABLE [dbo].[orders] DROP CONSTRAINT [df_orders_qty]",
        "ALTER TABLE [dbo].[orders] DROP CONSTRAINT [ck_orders_qty]",
        "DROP INDEX [ix_orders_qty] ON [dbo].[orders]",
    ]
    assert PG.column_dependents(_orders("public"), "qty") == []


def test_default_statements():
    """Tests defaults are set and dropped through ALTER COLUMN, or as named constraints on SQL Server."""
    default = DmDefaultConstraint("public", "orders", "qty", "df_orders_qty", "1")
    assert PG.add_default_constraint(default) == 'ALTER TABLE "public"."orders" ALTER COLUMN "qty" SET DEFAULT 1'
    assert PG.drop_default_constraint(default) == 'ALTER TABLE "public"."orders" ALTER COLUMN "qty" DROP DEFAULT'
    assert MS.add_default_constraint(default) == (
        "ALTER TABLE [public].[orders] ADD CONSTRAINT [df_orders_qty] DEFAULT (1) FOR [qty]"
    )
    assert MS.drop_default_constraint(default) == "ALTER TABLE [public].[orders] DROP CONSTRAINT [df_orders_qty]"
    assert LITE.add_default_constraint(default) is None


@pytest.mark.parametrize(
    "expression, ex_clause",
    [
        ("1", "DEFAULT 1"),
        ("'abc'", "DEFAULT 'abc'"),
        ("CURRENT_TIMESTAMP", "DEFAULT CURRENT_TIMESTAMP"),
        ("now()", "DEFAULT now()"),
        ("(uuid())", "DEFAULT (uuid())"),
        ("qty * 2", "DEFAULT (qty * 2)"),
    ],
)
def test_mysql_default_clause(expression: str, ex_clause: str):
    """Tests MySQL wraps default expressions in parentheses unless they are plain literals."""
    default = DmDefaultConstraint(None, "orders", "qty", "df_orders_qty", expression)
    assert MY.default_clause(default) == ex_clause


def test_mysql_key_drops():
    """Tests MySQL drops keys by their own statements rather than DROP CONSTRAINT."""
    assert MY.drop_primary_key(None, "orders", "PRIMARY") == "ALTER TABLE `orders` DROP PRIMARY KEY"
    assert MY.drop_unique_constraint(None, "orders", "uc_x") == "ALTER TABLE `orders` DROP INDEX `uc_x`"
    assert MY.drop_foreign_key(None, "orders", "fk_x") == "ALTER TABLE `orders` DROP FOREIGN KEY `fk_x`"
    assert MY.drop_check_constraint(None, "orders", "ck_x") == "ALTER TABLE `orders` DROP CONSTRAINT `ck_x`"


def test_unique_and_index_statements():
    """Tests unique constraints and unique indexes."""
    constraint = DmUniqueConstraint("dbo", "orders", "uc_orders_code", ["code", "region desc"])
    assert MS.add_unique_constraint(constraint) == (
        "ALTER TABLE [dbo].[orders] ADD CONSTRAINT [uc_orders_code] UNIQUE ([code], [region] DESC)"
    )
    assert MS.add_unique_constraint(constraint, ordered=False) == (
        "ALTER TABLE [dbo].[orders] ADD CONSTRAINT [uc_orders_code] UNIQUE ([code], [region])"
    )
    index = DmIndex(None, "orders", "ix_orders_code", ["code"], is_unique=True)
    assert LITE.create_index(index) == 'CREATE UNIQUE INDEX "ix_orders_code" ON "orders" ("code")'


@pytest.mark.parametrize("dialect", [PG, MS, MY])
def test_truncate(dialect):
    """Tests truncation where the provider supports it in place."""
    assert dialect.truncate_table(None, "orders").startswith("TRUNCATE TABLE ")
    assert LITE.truncate_table(None, "orders") is None


def test_view_statements():
    """Tests view creation and drops."""
    view = DmView("public", "active_orders", "SELECT * FROM orders WHERE qty > 0")
    assert PG.create_view(view) == 'CREATE VIEW "public"."active_orders" AS SELECT * FROM orders WHERE qty > 0'
    assert MS.drop_view("dbo", "active_orders") == "DROP VIEW [dbo].[active_orders]"


@pytest.mark.parametrize(
    "definition, ex_select",
    [
        ("CREATE VIEW v AS SELECT 1", "SELECT 1"),
        ("create view [dbo].[v]\nas\nselect a as b from t", "select a as b from t"),
    ],
)
def test_strip_view_header(definition: str, ex_select: str):
    """Tests the SELECT statement is taken from a stored CREATE VIEW statement."""
    assert strip_view_header(definition) == ex_select


def test_strip_view_header_without_as():
    """Tests a definition without AS cannot be parsed."""
    with pytest.raises(ViewDefinitionError):
        strip_view_header("SELECT 1")


def test_normalize_view_definition():
    """Tests stored definitions are reduced to their SELECT statement."""
    assert PG.normalize_view_definition(" SELECT 1; ") == "SELECT 1"
    assert LITE.normalize_view_definition('CREATE VIEW "v" AS SELECT 1;') == "SELECT 1"
    assert MS.normalize_view_definition("CREATE VIEW v AS SELECT 1") == "SELECT 1"


@pytest.mark.parametrize(
    "expression, ex_expression",
    [
        ("((0))", "0"),
        ("('a')", "'a'"),
        ("(a) + (b)", "(a) + (b)"),
        ("(getdate())", "getdate()"),
        (None, None),
    ],
)
def test_unwrap_parentheses(expression, ex_expression):
    """Tests only parentheses enclosing the whole expression are removed."""
    assert unwrap_parentheses(expression) == ex_expression


@pytest.mark.parametrize(
    "expression, ex_simple",
    [("0", True), ("-1.5", True), ("'x'", True), ("now()", True), ("a + 1", False), ("concat(a, b)", False)],
)
def test_is_simple_expression(expression: str, ex_simple: bool):
    """Tests literals, identifiers and niladic calls are simple expressions."""
    assert is_simple_expression(expression) is ex_simple


@pytest.mark.parametrize(
    "version, version_text, ex_checks, ex_ordered",
    [
        (DatabaseVersion(5, 7, 40), "5.7.40-log", False, False),
        (DatabaseVersion(8, 0, 15), "8.0.15", False, True),
        (DatabaseVersion(8, 0, 36), "8.0.36", True, True),
        (DatabaseVersion(10, 2, 0), "10.2.0-MariaDB", False, False),
        (DatabaseVersion(10, 11, 6), "10.11.6-MariaDB-0+deb12u1", True, False),
        (None, "", True, False),
    ],
)
def test_mysql_capabilities(version, version_text: str, ex_checks: bool, ex_ordered: bool):
    """Tests MySQL and MariaDB capabilities follow the server version."""
    assert MY.supports_check_constraints(version, version_text) is ex_checks
    assert MY.supports_ordered_keys(version, version_text) is ex_ordered


@pytest.mark.parametrize(
    "dialect, value, ex_auto",
    [
        (PG, "nextval('orders_id_seq'::regclass)", True),
        (PG, "", False),
        (PG, None, False),
        (MY, "auto_increment", True),
        (MY, "DEFAULT_GENERATED", False),
        (MS, 1, True),
        (MS, 0, False),
        (LITE, "YES", True),
        (LITE, "false", False),
    ],
)
def test_is_auto_increment(dialect, value, ex_auto: bool):
    """Tests each provider's auto increment markers are interpreted."""
    assert dialect.is_auto_increment(value) is ex_auto
