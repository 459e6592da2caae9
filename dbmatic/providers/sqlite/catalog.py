"""Reads SQLite tables from their stored CREATE TABLE statements and the index pragmas."""

from typing import List, Optional

from dbmatic.backend.base import AsyncConnection
from dbmatic.models import DmColumn, DmIndex, DmOrderedColumn, DmTable, DmView
from dbmatic.models.enums import DmColumnOrder
from dbmatic.providers import executor
from dbmatic.providers.catalog import Catalog, finish_table, group_rows
from dbmatic.providers.sqlite.parser import CreateTableParser
from dbmatic.templating import Template

TABLE_NAMES = Template(
    """
    SELECT name AS table_name
    FROM sqlite_master
    WHERE type = 'table'
        AND substr(name, 1, 7) <> 'sqlite_'
        AND lower(name) LIKE #{like}
    ORDER BY name
    """
)

TABLES = Template(
    """
    SELECT name AS table_name, sql AS table_sql
    FROM sqlite_master
    WHERE type = 'table'
        AND substr(name, 1, 7) <> 'sqlite_'
        AND lower(name) LIKE #{like}
    ORDER BY name
    """
)

INDEXES = Template(
    """
    SELECT DISTINCT
        m.name AS table_name,
        il.name AS index_name,
        il."unique" AS is_unique,
        ii.name AS column_name,
        ii."desc" AS is_descending,
        ii.seqno AS seqno
    FROM sqlite_master AS m,
        pragma_index_list(m.name) AS il,
        pragma_index_xinfo(il.name) AS ii
    WHERE m.type = 'table'
        AND ii.name IS NOT NULL
        AND ii."key" = 1
        AND il.origin = 'c'
        AND lower(m.name) LIKE #{like}
    ORDER BY m.name, il.name, ii.seqno
    """
)

VIEWS = Template(
    """
    SELECT name AS view_name, sql AS definition
    FROM sqlite_master
    WHERE type = 'view'
        AND lower(name) LIKE #{like}
    ORDER BY name
    """
)

TABLE_SQL = Template("SELECT sql FROM sqlite_master WHERE type = 'table' AND name = #{table_name}")

INDEX_SQL = Template(
    "SELECT sql FROM sqlite_master WHERE type = 'index' AND tbl_name = #{table_name} AND sql IS NOT NULL ORDER BY name"
)

CASCADING_REFERENCES = Template(
    """
    SELECT DISTINCT m.name AS table_name
    FROM sqlite_master AS m,
        pragma_foreign_key_list(m.name) AS fk
    WHERE m.type = 'table'
        AND lower(m.name) <> lower(#{table_name})
        AND lower(fk."table") = lower(#{table_name})
        AND upper(fk.on_delete) IN ('CASCADE', 'SET NULL', 'SET DEFAULT')
    ORDER BY m.name
    """
)

# Declared without a type a column has BLOB affinity
UNTYPED_COLUMN_TYPE = "blob"


class SqliteCatalog(Catalog):
    """Catalog reader for SQLite.

    Constraints come from parsing each table's stored CREATE TABLE statement, indexes created with
    CREATE INDEX from the index pragmas.
    """

    def __init__(self, dialect, type_map):
        """Construct a catalog reader, see ``Catalog``."""
        super().__init__(dialect, type_map)
        self.parser = CreateTableParser(self._make_column)

    def _make_column(
        self, table_name: str, column_name: str, data_type: str, is_nullable: bool, is_auto_increment: bool
    ) -> DmColumn:
        return self.make_column(
            None,
            table_name,
            column_name,
            data_type or UNTYPED_COLUMN_TYPE,
            is_nullable=is_nullable,
            is_auto_increment=is_auto_increment,
        )

    async def get_table_names(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[str]:  # noqa: D102
        return [r["table_name"] for r in await executor.query(cnx, TABLE_NAMES, like=like)]

    async def get_views(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[DmView]:  # noqa: D102
        rows = await executor.query(cnx, VIEWS, like=like)
        return [DmView(None, r["view_name"], self.dialect.normalize_view_definition(r["definition"])) for r in rows]

    async def get_tables(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[DmTable]:
        """Parse the stored statements of the matching tables and attach their indexes.

        :param cnx: the connection to run on
        :param schema_name: ignored, SQLite has no schemas
        :param like: a lower-cased LIKE pattern table names must match
        :returns: the tables
        """
        rows = await executor.query(cnx, TABLES, like=like)
        indexes = group_rows(await executor.query(cnx, INDEXES, like=like), "table_name")
        tables = []
        for row in rows:
            table = self.parser.parse(row["table_sql"])
            table.table_name = row["table_name"]
            for constraint in self._owned(table):
                constraint.table_name = row["table_name"]
            for (index_name,), index_rows in group_rows(indexes.get((row["table_name"],), []), "index_name").items():
                columns = [
                    DmOrderedColumn(
                        r["column_name"], DmColumnOrder.DESCENDING if r["is_descending"] else DmColumnOrder.ASCENDING
                    )
                    for r in index_rows
                ]
                table.indexes.append(
                    DmIndex(None, row["table_name"], index_name, columns, bool(index_rows[0]["is_unique"]))
                )
            tables.append(finish_table(table))
        return tables

    @staticmethod
    def _owned(table: DmTable) -> list:
        owned = list(table.columns) + table.check_constraints + table.default_constraints
        owned += table.unique_constraints + table.foreign_key_constraints
        if table.primary_key_constraint is not None:
            owned.append(table.primary_key_constraint)
        return owned

    async def get_table_sql(self, cnx: AsyncConnection, table_name: str) -> Optional[str]:
        """Return the statement a table was created with, None when the table does not exist."""
        return await executor.scalar(cnx, TABLE_SQL, table_name=table_name)

    async def get_index_sql(self, cnx: AsyncConnection, table_name: str) -> List[str]:
        """Return the statements the indexes of a table were created with."""
        return [r["sql"] for r in await executor.query(cnx, INDEX_SQL, table_name=table_name)]

    async def get_cascading_references(self, cnx: AsyncConnection, table_name: str) -> List[str]:
        """Return the other tables whose foreign keys change their rows when a row of this table is deleted."""
        return [r["table_name"] for r in await executor.query(cnx, CASCADING_REFERENCES, table_name=table_name)]
