"""Tests the SQLite provider methods against a real database file through aiosqlite."""

import datetime

from dbmatic.backend import create_connection_pool
from dbmatic.models import DmColumn, DmForeignKeyAction, DmIndex, DmTable, DmView, ProviderType
from dbmatic.providers import ProviderError, TableAlteration, create_default_registry

import pytest


def _customers() -> DmTable:
    return DmTable(None, "customers", [DmColumn(None, "customers", "id", int, is_primary_key=True)])


def _orders() -> DmTable:
    return DmTable(
        None,
        "orders",
        [
            DmColumn(None, "orders", "id", int, is_primary_key=True, is_auto_increment=True),
            DmColumn(None, "orders", "name", str, length=100, is_unique=True),
            DmColumn(None, "orders", "qty", int, check_expression="qty > 0", default_expression="1"),
            DmColumn(None, "orders", "created", datetime.datetime, is_nullable=True, is_indexed=True),
            DmColumn(
                None,
                "orders",
                "customer_id",
                int,
                is_foreign_key=True,
                referenced_table_name="customers",
                referenced_column_name="id",
                on_delete=DmForeignKeyAction.CASCADE,
            ),
        ],
    )


async def _count(cnx, table_name: str) -> int:
    async with cnx.query(f'SELECT count(*) FROM "{table_name}"') as res:
        return (await res.fetchone())[0]


@pytest.mark.asyncio
async def test_create_and_read_back(tmp_sqlite3_db_url: str):
    """Tests a created table reads back with its keys, constraints, defaults and indexes."""
    pool = create_connection_pool(tmp_sqlite3_db_url)
    async with pool.connection() as cnx:
        methods = create_default_registry().get_methods(cnx)
        assert methods.provider_type is ProviderType.SQLITE
        assert (await methods.get_database_version(cnx)).major == 3
        assert await methods.create_tables_if_not_exist(cnx, [_customers(), _orders()]) == [True, True]
        assert not await methods.create_table_if_not_exists(cnx, _orders())
        assert await methods.get_table_names(cnx) == ["customers", "orders"]
        assert await methods.get_table_names(cnx, None, "ORD*") == ["orders"]

        table = await methods.get_table(cnx, None, "orders")
        assert table.column_names == ["id", "name", "qty", "created", "customer_id"]
        assert table.primary_key_constraint.constraint_name == "pk_orders_id"
        assert table.get_column("id").is_auto_increment
        assert table.get_column("name").host_type is str
        assert table.get_column("name").length == 100
        assert table.get_column("name").is_unique
        assert table.get_column("created").is_nullable
        assert table.get_column("created").is_indexed
        assert [c.constraint_name for c in table.unique_constraints] == ["uc_orders_name"]
        check = table.check_constraints[0]
        assert (check.constraint_name, check.column_name, check.expression) == ("ck_orders_qty", "qty", "qty > 0")
        default = table.default_constraints[0]
        assert (default.constraint_name, default.expression) == ("df_orders_qty", "1")
        fk = table.foreign_key_constraints[0]
        assert fk.referenced_table_name == "customers"
        assert fk.on_delete is DmForeignKeyAction.CASCADE
        assert await methods.get_index_names(cnx, None, "orders") == ["ix_orders_created"]
        assert not await methods.does_schema_exist(cnx, "main")
    await pool.dispose()


@pytest.mark.asyncio
async def test_rebuilds_keep_rows(tmp_sqlite3_db_url: str):
    """Tests changes made by rebuilding a table keep the rows of the columns that remain."""
    pool = create_connection_pool(tmp_sqlite3_db_url)
    async with pool.connection() as cnx:
        methods = create_default_registry().get_methods(cnx)
        await methods.create_tables_if_not_exist(cnx, [_customers(), _orders()])
        await cnx.execute("INSERT INTO customers (id) VALUES (1)")
        await cnx.execute("INSERT INTO orders (name, qty, customer_id) VALUES ('first', 2, 1)")

        assert await methods.create_column_if_not_exists(cnx, DmColumn(None, "orders", "note", str, is_nullable=True))
        assert await methods.get_column_names(cnx, None, "orders") == [
            "id",
            "name",
            "qty",
            "created",
            "customer_id",
            "note",
        ]
        assert await _count(cnx, "orders") == 1

        assert await methods.drop_column_if_exists(cnx, None, "orders", "qty")
        assert await methods.get_check_constraints(cnx, None, "orders") == []
        assert await methods.get_default_constraints(cnx, None, "orders") == []
        assert not await methods.does_column_exist(cnx, None, "orders", "qty")
        assert await methods.does_index_exist(cnx, None, "orders", "ix_orders_created")
        assert await _count(cnx, "orders") == 1

        assert await methods.drop_unique_constraint_on_column_if_exists(cnx, None, "orders", "name")
        assert not await methods.does_unique_constraint_exist_on_column(cnx, None, "orders", "name")
        assert await _count(cnx, "orders") == 1

        assert await methods.truncate_table_if_exists(cnx, None, "orders")
        assert await _count(cnx, "orders") == 0
        assert await methods.does_index_exist(cnx, None, "orders", "ix_orders_created")
    await pool.dispose()


@pytest.mark.asyncio
async def test_alter_table(tmp_sqlite3_db_url: str):
    """Tests an alteration mixing statements SQLite runs and rebuilds it needs."""
    pool = create_connection_pool(tmp_sqlite3_db_url)
    async with pool.connection() as cnx:
        methods = create_default_registry().get_methods(cnx)
        await methods.create_tables_if_not_exist(cnx, [_customers(), _orders()])
        alteration = TableAlteration(
            None,
            "orders",
            new_table_name="purchases",
            rename_columns={"name": "title"},
            drop_indexes=["ix_orders_created"],
            add_indexes=[DmIndex(None, "purchases", "ix_purchases_title", ["title desc"])],
        )
        assert await methods.alter_table(cnx, alteration)
        assert await methods.get_table_names(cnx) == ["customers", "purchases"]
        table = await methods.get_table(cnx, None, "purchases")
        assert "title" in table.column_names
        assert [i.index_name for i in table.indexes] == ["ix_purchases_title"]
        assert table.indexes[0].columns[0].order.name == "DESCENDING"
        assert await methods.drop_table_if_exists(cnx, None, "purchases")
        assert not await methods.drop_table_if_exists(cnx, None, "purchases")
    await pool.dispose()


@pytest.mark.asyncio
async def test_views(tmp_sqlite3_db_url: str):
    """Tests views are created, read back without their header, renamed and dropped."""
    pool = create_connection_pool(tmp_sqlite3_db_url)
    async with pool.connection() as cnx:
        methods = create_default_registry().get_methods(cnx)
        await methods.create_table_if_not_exists(cnx, _customers())
        assert await methods.create_view_if_not_exists(cnx, DmView(None, "big_customers", "SELECT id FROM customers"))
        assert not await methods.create_view_if_not_exists(cnx, DmView(None, "big_customers", "SELECT 1"))
        view = await methods.get_view(cnx, None, "big_customers")
        assert view.definition == "SELECT id FROM customers"
        assert await methods.rename_view_if_exists(cnx, None, "big_customers", "all_customers")
        assert await methods.get_view_names(cnx) == ["all_customers"]
        assert await methods.update_view_if_exists(cnx, None, "all_customers", "SELECT id FROM customers WHERE id > 1")
        assert (await methods.get_view(cnx, None, "all_customers")).definition.endswith("WHERE id > 1")
        assert await methods.drop_view_if_exists(cnx, None, "all_customers")
        assert await methods.get_views(cnx) == []
    await pool.dispose()


def _single(table_name: str) -> DmTable:
    return DmTable(None, table_name, [DmColumn(None, table_name, "id", int, is_primary_key=True)])


@pytest.mark.asyncio
async def test_alter_table_rename_onto_existing_table(tmp_sqlite3_db_url: str):
    """Tests an alteration renaming a table onto a taken name changes neither table."""
    pool = create_connection_pool(tmp_sqlite3_db_url)
    async with pool.connection() as cnx:
        methods = create_default_registry().get_methods(cnx)
        await methods.create_tables_if_not_exist(cnx, [_single("a"), _single("b")])
        alteration = TableAlteration(
            None, "a", new_table_name="b", add_columns=[DmColumn(None, "b", "extra", str, is_nullable=True)]
        )
        assert not await methods.alter_table(cnx, alteration)
        assert await methods.get_table_names(cnx) == ["a", "b"]
        assert await methods.get_column_names(cnx, None, "a") == ["id"]
        assert await methods.get_column_names(cnx, None, "b") == ["id"]
    await pool.dispose()


@pytest.mark.asyncio
async def test_alter_table_additions_follow_rename(tmp_sqlite3_db_url: str):
    """Tests columns and indexes added alongside a rename land on the renamed table."""
    pool = create_connection_pool(tmp_sqlite3_db_url)
    async with pool.connection() as cnx:
        methods = create_default_registry().get_methods(cnx)
        await methods.create_table_if_not_exists(cnx, _single("a"))
        await cnx.execute('INSERT INTO "a" (id) VALUES (7)')
        alteration = TableAlteration(
            None,
            "a",
            new_table_name="c",
            add_columns=[DmColumn(None, "a", "extra", str, is_nullable=True)],
            add_indexes=[DmIndex(None, "a", "ix_c_extra", ["extra"])],
        )
        assert await methods.alter_table(cnx, alteration)
        assert await methods.get_table_names(cnx) == ["c"]
        assert await methods.get_column_names(cnx, None, "c") == ["id", "extra"]
        assert await methods.get_index_names(cnx, None, "c") == ["ix_c_extra"]
        assert await _count(cnx, "c") == 1
    await pool.dispose()


@pytest.mark.asyncio
async def test_rebuild_within_open_transaction(tmp_sqlite3_db_url: str):
    """Tests a rebuild joins the caller's transaction, leaving its commit or rollback to the caller."""
    pool = create_connection_pool(tmp_sqlite3_db_url)
    async with pool.connection() as cnx:
        methods = create_default_registry().get_methods(cnx)
        await methods.create_tables_if_not_exist(cnx, [_customers(), _orders()])
        await cnx.execute("INSERT INTO customers (id) VALUES (1)")
        cnx.autocommit = False
        await cnx.execute("INSERT INTO orders (name, qty, customer_id) VALUES ('first', 2, 1)")
        assert cnx.in_transaction

        assert await methods.create_column_if_not_exists(cnx, DmColumn(None, "orders", "note", str, is_nullable=True))
        assert cnx.in_transaction
        assert await methods.does_column_exist(cnx, None, "orders", "note")
        assert await _count(cnx, "orders") == 1

        await cnx.rollback()
        assert not await methods.does_column_exist(cnx, None, "orders", "note")
        assert await _count(cnx, "orders") == 0
        assert await _count(cnx, "customers") == 1

        await cnx.execute("INSERT INTO orders (name, qty, customer_id) VALUES ('second', 3, 1)")
        assert await methods.drop_column_if_exists(cnx, None, "orders", "qty")
        assert await methods.truncate_table_if_exists(cnx, None, "customers")
        assert cnx.in_transaction
        await cnx.commit()
        assert not await methods.does_column_exist(cnx, None, "orders", "qty")
        assert await _count(cnx, "orders") == 1
        assert await _count(cnx, "customers") == 0
    await pool.dispose()


@pytest.mark.asyncio
async def test_rebuild_within_open_transaction_refuses_cascades(tmp_sqlite3_db_url: str):
    """Tests a rebuild inside a transaction is refused when dropping the table would cascade to other tables."""
    pool = create_connection_pool(tmp_sqlite3_db_url)
    async with pool.connection() as cnx:
        methods = create_default_registry().get_methods(cnx)
        await cnx.execute("PRAGMA foreign_keys = 1")
        await methods.create_tables_if_not_exist(cnx, [_customers(), _orders()])
        await cnx.execute("INSERT INTO customers (id) VALUES (1)")
        await cnx.execute("INSERT INTO orders (name, qty, customer_id) VALUES ('first', 2, 1)")
        cnx.autocommit = False
        await cnx.execute("INSERT INTO customers (id) VALUES (2)")

        with pytest.raises(ProviderError, match="orders"):
            await methods.create_column_if_not_exists(cnx, DmColumn(None, "customers", "note", str, is_nullable=True))
        assert cnx.in_transaction
        assert await _count(cnx, "orders") == 1

        assert await methods.create_column_if_not_exists(cnx, DmColumn(None, "orders", "note", str, is_nullable=True))
        await cnx.commit()
        assert await _count(cnx, "customers") == 2
        assert await _count(cnx, "orders") == 1
        assert await methods.does_column_exist(cnx, None, "orders", "note")
    await pool.dispose()
