"""Reads MySQL and MariaDB tables and views from information_schema."""

import re
from typing import List, Optional

from dbmatic.backend.base import AsyncConnection
from dbmatic.models import (
    DmCheckConstraint,
    DmDefaultConstraint,
    DmForeignKeyAction,
    DmForeignKeyConstraint,
    DmIndex,
    DmOrderedColumn,
    DmPrimaryKeyConstraint,
    DmTable,
    DmUniqueConstraint,
    DmView,
)
from dbmatic.models.enums import DmColumnOrder
from dbmatic.naming import generate_default_constraint_name, generate_primary_key_name
from dbmatic.providers import executor
from dbmatic.providers.catalog import Catalog, finish_table, group_rows, infer_check_column
from dbmatic.providers.dialect import unwrap_parentheses
from dbmatic.providers.version import DatabaseVersion
from dbmatic.templating import Template

TABLE_NAMES = Template(
    """
    SELECT TABLE_NAME AS table_name
    FROM information_schema.TABLES
    WHERE TABLE_TYPE = 'BASE TABLE'
        AND TABLE_SCHEMA = DATABASE()
        AND LOWER(TABLE_NAME) LIKE #{like}
    ORDER BY TABLE_NAME
    """
)

COLUMNS = Template(
    """
    SELECT
        c.TABLE_NAME AS table_name,
        c.COLUMN_NAME AS column_name,
        c.ORDINAL_POSITION AS column_ordinal,
        c.COLUMN_TYPE AS data_type,
        c.DATA_TYPE AS base_type,
        CASE WHEN c.IS_NULLABLE = 'YES' THEN 1 ELSE 0 END AS is_nullable,
        c.EXTRA AS extra,
        c.COLUMN_DEFAULT AS column_default
    FROM information_schema.COLUMNS c
        JOIN information_schema.TABLES t ON t.TABLE_SCHEMA = c.TABLE_SCHEMA AND t.TABLE_NAME = c.TABLE_NAME
    WHERE t.TABLE_TYPE = 'BASE TABLE'
        AND c.TABLE_SCHEMA = DATABASE()
        AND LOWER(c.TABLE_NAME) LIKE #{like}
    ORDER BY c.TABLE_NAME, c.ORDINAL_POSITION
    """
)

KEYS_AND_INDEXES = Template(
    """
    SELECT
        s.TABLE_NAME AS table_name,
        s.INDEX_NAME AS index_name,
        s.COLUMN_NAME AS column_name,
        CASE WHEN s.NON_UNIQUE = 0 THEN 1 ELSE 0 END AS is_unique,
        CASE WHEN s.COLLATION = 'D' THEN 1 ELSE 0 END AS is_descending
    FROM information_schema.STATISTICS s
    WHERE s.TABLE_SCHEMA = DATABASE()
        AND s.COLUMN_NAME IS NOT NULL
        AND LOWER(s.TABLE_NAME) LIKE #{like}
    ORDER BY s.TABLE_NAME, s.INDEX_NAME, s.SEQ_IN_INDEX
    """
)

FOREIGN_KEYS = Template(
    """
    SELECT
        k.TABLE_NAME AS table_name,
        k.CONSTRAINT_NAME AS constraint_name,
        k.COLUMN_NAME AS column_name,
        k.REFERENCED_TABLE_NAME AS referenced_table_name,
        k.REFERENCED_COLUMN_NAME AS referenced_column_name,
        r.DELETE_RULE AS delete_rule,
        r.UPDATE_RULE AS update_rule
    FROM information_schema.KEY_COLUMN_USAGE k
        JOIN information_schema.REFERENTIAL_CONSTRAINTS r
            ON r.CONSTRAINT_SCHEMA = k.CONSTRAINT_SCHEMA
            AND r.CONSTRAINT_NAME = k.CONSTRAINT_NAME
            AND r.TABLE_NAME = k.TABLE_NAME
    WHERE k.TABLE_SCHEMA = DATABASE()
        AND k.REFERENCED_TABLE_NAME IS NOT NULL
        AND LOWER(k.TABLE_NAME) LIKE #{like}
    ORDER BY k.TABLE_NAME, k.CONSTRAINT_NAME, k.ORDINAL_POSITION
    """
)

CHECK_CONSTRAINTS = Template(
    """
    SELECT
        tc.TABLE_NAME AS table_name,
        cc.CONSTRAINT_NAME AS constraint_name,
        cc.CHECK_CLAUSE AS expression
    FROM information_schema.CHECK_CONSTRAINTS cc
        JOIN information_schema.TABLE_CONSTRAINTS tc
            ON tc.CONSTRAINT_SCHEMA = cc.CONSTRAINT_SCHEMA
            AND tc.CONSTRAINT_NAME = cc.CONSTRAINT_NAME
            AND tc.CONSTRAINT_TYPE = 'CHECK'
    WHERE cc.CONSTRAINT_SCHEMA = DATABASE()
        AND LOWER(tc.TABLE_NAME) LIKE #{like}
    ORDER BY tc.TABLE_NAME, cc.CONSTRAINT_NAME
    """
)

VIEWS = Template(
    """
    SELECT TABLE_NAME AS view_name, VIEW_DEFINITION AS definition
    FROM information_schema.VIEWS
    WHERE TABLE_SCHEMA = DATABASE()
        AND VIEW_DEFINITION IS NOT NULL
        AND LOWER(TABLE_NAME) LIKE #{like}
    ORDER BY TABLE_NAME
    """
)

_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")
_NUMERIC_TYPES = (
    "bit",
    "tinyint",
    "smallint",
    "mediumint",
    "int",
    "integer",
    "bigint",
    "decimal",
    "numeric",
    "float",
    "double",
    "real",
    "bool",
    "boolean",
)


def default_expression_of(default: Optional[str], base_type: str, extra: Optional[str]) -> Optional[str]:
    """Turn the COLUMN_DEFAULT of ``information_schema.COLUMNS`` into a default expression.

    MySQL reports literal defaults without quotes and expressions with a DEFAULT_GENERATED marker in
    EXTRA, MariaDB quotes its literals and reports a missing default as the text NULL.

    :param default: the reported default
    :param base_type: the column's DATA_TYPE
    :param extra: the column's EXTRA
    :returns: the expression, None when the column has no default
    """
    if default is None:
        return None
    default = str(default)
    if default.upper() == "NULL":
        return None
    if "default_generated" in (extra or "").lower() or default.startswith("'"):
        return default
    if _NUMBER.match(default) or (base_type or "").lower() in _NUMERIC_TYPES:
        return default
    if "(" in default or default.upper().startswith("CURRENT_TIMESTAMP"):
        return default
    return "'" + default.replace("'", "''") + "'"


class MySqlCatalog(Catalog):
    """Catalog reader for MySQL and MariaDB.

    Both report every unique key as an index, so a unique key is read back as a unique constraint and
    as a unique index.
    """

    async def get_table_names(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[str]:  # noqa: D102
        return [r["table_name"] for r in await executor.query(cnx, TABLE_NAMES, like=like)]

    async def get_views(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[DmView]:  # noqa: D102
        rows = await executor.query(cnx, VIEWS, like=like)
        return [DmView(None, r["view_name"], self.dialect.normalize_view_definition(r["definition"])) for r in rows]

    async def _reads_checks(self, cnx: AsyncConnection) -> bool:
        text = await self.get_cached_version_text(cnx)
        return self.dialect.supports_check_constraints(DatabaseVersion.parse(text), text)

    async def get_tables(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[DmTable]:
        """Read the tables of the current database.

        Servers without check constraints have no CHECK_CONSTRAINTS view, it is only read where it exists.

        :param cnx: the connection to run on
        :param schema_name: ignored, MySQL has no schemas
        :param like: a lower-cased LIKE pattern table names must match
        :returns: the tables
        """
        columns = group_rows(await executor.query(cnx, COLUMNS, like=like), "table_name")
        keys = group_rows(await executor.query(cnx, KEYS_AND_INDEXES, like=like), "table_name")
        foreign_keys = group_rows(await executor.query(cnx, FOREIGN_KEYS, like=like), "table_name")
        checks = {}
        if await self._reads_checks(cnx):
            checks = group_rows(await executor.query(cnx, CHECK_CONSTRAINTS, like=like), "table_name")
        tables = []
        for (table_name,), column_rows in columns.items():
            key = (table_name,)
            table = DmTable(None, table_name)
            for row in column_rows:
                self._read_column(table, row)
            self._read_foreign_keys(table, foreign_keys.get(key, []))
            self._read_keys(table, keys.get(key, []))
            for row in checks.get(key, []):
                expression = unwrap_parentheses(row["expression"])
                table.check_constraints.append(
                    DmCheckConstraint(
                        None,
                        table_name,
                        infer_check_column(expression, table.column_names),
                        row["constraint_name"],
                        expression,
                    )
                )
            tables.append(finish_table(table))
        return tables

    def _read_column(self, table: DmTable, row: dict):
        column = self.make_column(
            None,
            table.table_name,
            row["column_name"],
            row["data_type"],
            is_nullable=row["is_nullable"],
            is_auto_increment=self.dialect.is_auto_increment(row["extra"]),
        )
        table.columns.append(column)
        default = default_expression_of(row["column_default"], row["base_type"], row["extra"])
        if default is not None and not column.is_auto_increment:
            table.default_constraints.append(
                DmDefaultConstraint(
                    None,
                    table.table_name,
                    column.column_name,
                    generate_default_constraint_name(table.table_name, column.column_name),
                    default,
                )
            )

    @staticmethod
    def _read_keys(table: DmTable, rows: List[dict]):
        foreign_key_names = {fk.constraint_name.lower() for fk in table.foreign_key_constraints}
        for (index_name,), index_rows in group_rows(rows, "index_name").items():
            columns = [
                DmOrderedColumn(
                    r["column_name"], DmColumnOrder.DESCENDING if r["is_descending"] else DmColumnOrder.ASCENDING
                )
                for r in index_rows
            ]
            if index_name.upper() == "PRIMARY":
                name = generate_primary_key_name(table.table_name, [c.column_name for c in columns])
                table.primary_key_constraint = DmPrimaryKeyConstraint(None, table.table_name, name, columns)
                continue
            if index_name.lower() in foreign_key_names:
                continue
            is_unique = bool(index_rows[0]["is_unique"])
            if is_unique:
                table.unique_constraints.append(DmUniqueConstraint(None, table.table_name, index_name, columns))
            table.indexes.append(DmIndex(None, table.table_name, index_name, columns, is_unique))

    @staticmethod
    def _read_foreign_keys(table: DmTable, rows: List[dict]):
        for (name,), fk_rows in group_rows(rows, "constraint_name").items():
            first = fk_rows[0]
            table.foreign_key_constraints.append(
                DmForeignKeyConstraint(
                    None,
                    table.table_name,
                    name,
                    [r["column_name"] for r in fk_rows],
                    first["referenced_table_name"],
                    [r["referenced_column_name"] for r in fk_rows],
                    DmForeignKeyAction.parse(first["delete_rule"]),
                    DmForeignKeyAction.parse(first["update_rule"]),
                )
            )
