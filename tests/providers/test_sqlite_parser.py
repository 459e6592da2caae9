"""Tests for parsing the CREATE TABLE statements SQLite stores."""

from dbmatic.models import DmColumn, DmColumnOrder, DmForeignKeyAction, ProviderType
from dbmatic.providers import TableParseError
from dbmatic.providers.sqlite.parser import COMMA, GROUP, NAME, STRING, WORD, CreateTableParser, tokenize

import pytest

ORDERS_SQL = """CREATE TABLE "orders" (
    "id" integer NOT NULL CONSTRAINT "pk_orders_id" PRIMARY KEY AUTOINCREMENT,
    "name" varchar (100) NOT NULL,
    "qty" int NOT NULL CONSTRAINT "df_orders_qty" DEFAULT (1),
    "note" text DEFAULT 'n/a, none',
    customer_id INTEGER REFERENCES customers(id) ON DELETE CASCADE,
    CONSTRAINT "uc_orders_name" UNIQUE ("name"),
    CHECK (qty > 0)
)"""


def _column(table_name: str, column_name: str, data_type: str, is_nullable: bool, is_auto_increment: bool):
    return DmColumn(
        None,
        table_name,
        column_name,
        object,
        is_nullable=is_nullable,
        is_auto_increment=is_auto_increment,
        provider_data_types={ProviderType.SQLITE: data_type} if data_type else {},
    )


def _parse(sql: str):
    return CreateTableParser(_column).parse(sql)


def test_tokenize():
    """Tests SQL text splits into names, words, strings, groups and commas."""
    tokens = tokenize("""[a b] numeric(10, 2) DEFAULT 'x, y', "c" """)
    assert [(t.kind, t.text) for t in tokens] == [
        (NAME, "a b"),
        (WORD, "numeric"),
        (GROUP, "(10, 2)"),
        (WORD, "DEFAULT"),
        (STRING, "'x, y'"),
        (COMMA, ","),
        (NAME, "c"),
    ]


def test_parse_columns():
    """Tests columns are read with their declared type, nullability and auto increment flag."""
    table = _parse(ORDERS_SQL)
    assert table.table_name == "orders"
    assert table.column_names == ["id", "name", "qty", "note", "customer_id"]
    types = [c.get_provider_data_type(ProviderType.SQLITE) for c in table.columns]
    assert types == ["integer", "varchar(100)", "int", "text", "INTEGER"]
    assert [c.is_nullable for c in table.columns] == [False, False, False, True, True]
    assert [c.is_auto_increment for c in table.columns] == [True, False, False, False, False]


def test_parse_constraints():
    """Tests named and unnamed constraints are read, unnamed ones given generated names."""
    table = _parse(ORDERS_SQL)
    assert table.primary_key_constraint.constraint_name == "pk_orders_id"
    assert table.primary_key_constraint.column_names == ["id"]
    assert [(c.constraint_name, c.column_names) for c in table.unique_constraints] == [("uc_orders_name", ["name"])]
    assert [(d.constraint_name, d.column_name, d.expression) for d in table.default_constraints] == [
        ("df_orders_qty", "qty", "1"),
        ("df_orders_note", "note", "'n/a, none'"),
    ]
    check = table.check_constraints[0]
    assert (check.constraint_name, check.column_name, check.expression) == ("ck_orders_qty", "qty", "qty > 0")
    fk = table.foreign_key_constraints[0]
    assert fk.constraint_name == "fk_orders_customer_id_customers_id"
    assert (fk.source_column_names, fk.referenced_table_name, fk.referenced_column_names) == (
        ["customer_id"],
        "customers",
        ["id"],
    )
    assert fk.on_delete is DmForeignKeyAction.CASCADE
    assert fk.on_update is DmForeignKeyAction.NO_ACTION


def test_parse_table_level_keys():
    """Tests composite keys and foreign keys declared on the table keep their order and actions."""
    table = _parse(
        "CREATE TABLE IF NOT EXISTS main.lines (\n"
        "    order_id int NOT NULL,\n"
        "    line_no int NOT NULL,\n"
        "    amount numeric(10,2) DEFAULT -1,\n"
        "    PRIMARY KEY (order_id, line_no DESC),\n"
        "    CONSTRAINT fk_lines_order FOREIGN KEY (order_id) REFERENCES orders (id) "
        "ON UPDATE SET NULL ON DELETE NO ACTION\n"
        ")"
    )
    assert table.table_name == "lines"
    pk = table.primary_key_constraint
    assert pk.constraint_name == "pk_lines_order_id_line_no"
    assert [c.order for c in pk.columns] == [DmColumnOrder.ASCENDING, DmColumnOrder.DESCENDING]
    assert table.default_constraints[0].expression == "-1"
    assert table.get_column("amount").get_provider_data_type(ProviderType.SQLITE) == "numeric(10,2)"
    fk = table.foreign_key_constraints[0]
    assert fk.constraint_name == "fk_lines_order"
    assert fk.on_update is DmForeignKeyAction.SET_NULL
    assert fk.on_delete is DmForeignKeyAction.NO_ACTION


def test_parse_typeless_column():
    """Tests a column declared without a type is read with an empty type."""
    table = _parse("CREATE TABLE t (a, b UNIQUE)")
    assert table.column_names == ["a", "b"]
    assert table.get_column("a").get_provider_data_type(ProviderType.SQLITE) is None
    assert table.unique_constraints[0].constraint_name == "uc_t_b"


@pytest.mark.parametrize(
    "sql, ex_match",
    [
        ("DROP TABLE orders", "Cannot parse"),
        ("CREATE TABLE t (a int, FOREIGN KEY (a) orders (id))", "missing REFERENCES"),
        ("CREATE TABLE t (a int NOT NULL BOGUS)", "Unexpected 'BOGUS'"),
    ],
)
def test_parse_errors(sql: str, ex_match: str):
    """Tests statements that are not understood raise a parse error."""
    with pytest.raises(TableParseError, match=ex_match):
        _parse(sql)
