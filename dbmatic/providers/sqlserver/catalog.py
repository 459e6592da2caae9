"""Reads SQL Server tables and views from INFORMATION_SCHEMA and the sys catalog views."""

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
from dbmatic.providers import executor
from dbmatic.providers.catalog import Catalog, finish_table, group_rows, infer_check_column
from dbmatic.providers.dialect import unwrap_parentheses
from dbmatic.templating import Template

SCHEMA_NAMES = Template(
    """
    SELECT name AS schema_name
    FROM sys.schemas
    WHERE name NOT IN ('sys', 'INFORMATION_SCHEMA', 'guest')
        AND LEFT(name, 3) <> 'db_'
        AND LOWER(name) LIKE #{like}
    ORDER BY name
    """
)

TABLE_NAMES = Template(
    """
    SELECT TABLE_NAME AS table_name
    FROM INFORMATION_SCHEMA.TABLES
    WHERE TABLE_TYPE = 'BASE TABLE'
        AND LOWER(TABLE_SCHEMA) = LOWER(#{schema_name})
        AND LOWER(TABLE_NAME) LIKE #{like}
    ORDER BY TABLE_NAME
    """
)

COLUMNS = Template(
    """
    SELECT
        t.TABLE_NAME AS table_name,
        c.COLUMN_NAME AS column_name,
        c.ORDINAL_POSITION AS column_ordinal,
        CASE WHEN c.IS_NULLABLE = 'YES' THEN 1 ELSE 0 END AS is_nullable,
        COLUMNPROPERTY(OBJECT_ID(QUOTENAME(t.TABLE_SCHEMA) + '.' + QUOTENAME(t.TABLE_NAME)), c.COLUMN_NAME, 'IsIdentity')
            AS is_identity,
        c.DATA_TYPE AS data_type,
        c.CHARACTER_MAXIMUM_LENGTH AS max_length,
        c.NUMERIC_PRECISION AS numeric_precision,
        c.NUMERIC_SCALE AS numeric_scale
    FROM INFORMATION_SCHEMA.TABLES t
        JOIN INFORMATION_SCHEMA.COLUMNS c ON t.TABLE_SCHEMA = c.TABLE_SCHEMA AND t.TABLE_NAME = c.TABLE_NAME
    WHERE t.TABLE_TYPE = 'BASE TABLE'
        AND LOWER(t.TABLE_SCHEMA) = LOWER(#{schema_name})
        AND LOWER(t.TABLE_NAME) LIKE #{like}
    ORDER BY t.TABLE_NAME, c.ORDINAL_POSITION
    """
)

KEYS_AND_INDEXES = Template(
    """
    SELECT
        t.name AS table_name,
        i.name AS index_name,
        c.name AS column_name,
        ic.is_descending_key AS is_descending,
        i.is_unique,
        i.is_primary_key,
        i.is_unique_constraint
    FROM sys.indexes i
        JOIN sys.index_columns ic ON i.object_id = ic.object_id AND i.index_id = ic.index_id
        JOIN sys.tables t ON t.object_id = i.object_id
        JOIN sys.columns c ON t.object_id = c.object_id AND ic.column_id = c.column_id
    WHERE t.is_ms_shipped = 0
        AND ic.is_included_column = 0
        AND LOWER(SCHEMA_NAME(t.schema_id)) = LOWER(#{schema_name})
        AND LOWER(t.name) LIKE #{like}
    ORDER BY t.name, i.name, ic.key_ordinal
    """
)

FOREIGN_KEYS = Template(
    """
    SELECT
        t.name AS table_name,
        fk.name AS constraint_name,
        pc.name AS column_name,
        rt.name AS referenced_table_name,
        rc.name AS referenced_column_name,
        fk.delete_referential_action_desc AS delete_rule,
        fk.update_referential_action_desc AS update_rule
    FROM sys.foreign_keys fk
        JOIN sys.foreign_key_columns fkc ON fkc.constraint_object_id = fk.object_id
        JOIN sys.tables t ON t.object_id = fk.parent_object_id
        JOIN sys.columns pc ON pc.object_id = fkc.parent_object_id AND pc.column_id = fkc.parent_column_id
        JOIN sys.tables rt ON rt.object_id = fk.referenced_object_id
        JOIN sys.columns rc ON rc.object_id = fkc.referenced_object_id AND rc.column_id = fkc.referenced_column_id
    WHERE LOWER(SCHEMA_NAME(t.schema_id)) = LOWER(#{schema_name})
        AND LOWER(t.name) LIKE #{like}
    ORDER BY t.name, fk.name, fkc.constraint_column_id
    """
)

CHECK_CONSTRAINTS = Template(
    """
    SELECT
        t.name AS table_name,
        col.name AS column_name,
        con.name AS constraint_name,
        con.definition AS expression
    FROM sys.check_constraints con
        JOIN sys.tables t ON con.parent_object_id = t.object_id
        LEFT JOIN sys.all_columns col ON con.parent_column_id = col.column_id AND con.parent_object_id = col.object_id
    WHERE con.definition IS NOT NULL
        AND LOWER(SCHEMA_NAME(t.schema_id)) = LOWER(#{schema_name})
        AND LOWER(t.name) LIKE #{like}
    ORDER BY t.name, con.name
    """
)

DEFAULT_CONSTRAINTS = Template(
    """
    SELECT
        t.name AS table_name,
        col.name AS column_name,
        con.name AS constraint_name,
        con.definition AS expression
    FROM sys.default_constraints con
        JOIN sys.tables t ON con.parent_object_id = t.object_id
        JOIN sys.all_columns col ON con.parent_column_id = col.column_id AND con.parent_object_id = col.object_id
    WHERE LOWER(SCHEMA_NAME(t.schema_id)) = LOWER(#{schema_name})
        AND LOWER(t.name) LIKE #{like}
    ORDER BY t.name, con.name
    """
)

VIEWS = Template(
    """
    SELECT v.name AS view_name, m.definition
    FROM sys.views v
        JOIN sys.sql_modules m ON m.object_id = v.object_id
    WHERE LOWER(SCHEMA_NAME(v.schema_id)) = LOWER(#{schema_name})
        AND LOWER(v.name) LIKE #{like}
    ORDER BY v.name
    """
)

_LENGTH_TYPES = ("char", "varchar", "nchar", "nvarchar", "binary", "varbinary")
_DECIMAL_TYPES = ("decimal", "numeric")


def full_type_name(data_type: str, max_length: Optional[int], precision: Optional[int], scale: Optional[int]) -> str:
    """Compose the full SQL type of a column from the parts INFORMATION_SCHEMA reports separately.

    ``("nvarchar", -1, None, None)`` gives ``"nvarchar(max)"`` and ``("decimal", None, 10, 2)`` gives
    ``"decimal(10,2)"``.
    """
    data_type = data_type.lower()
    if data_type in _LENGTH_TYPES and max_length is not None:
        return f"{data_type}({'max' if max_length == -1 else max_length})"
    if data_type in _DECIMAL_TYPES and precision is not None:
        return f"{data_type}({precision},{scale or 0})"
    return data_type


class SqlServerCatalog(Catalog):
    """Catalog reader for SQL Server."""

    async def get_schema_names(self, cnx: AsyncConnection, like: str) -> List[str]:  # noqa: D102
        return [r["schema_name"] for r in await executor.query(cnx, SCHEMA_NAMES, like=like)]

    async def get_table_names(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[str]:  # noqa: D102
        rows = await executor.query(cnx, TABLE_NAMES, schema_name=schema_name, like=like)
        return [r["table_name"] for r in rows]

    async def get_views(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[DmView]:  # noqa: D102
        rows = await executor.query(cnx, VIEWS, schema_name=schema_name, like=like)
        return [
            DmView(schema_name, r["view_name"], self.dialect.normalize_view_definition(r["definition"])) for r in rows
        ]

    async def get_tables(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[DmTable]:
        """Read tables with one query per kind of object, grouping the rows by table.

        :param cnx: the connection to run on
        :param schema_name: the schema to read
        :param like: a lower-cased LIKE pattern table names must match
        :returns: the tables
        """
        args = {"schema_name": schema_name, "like": like}
        columns = group_rows(await executor.query(cnx, COLUMNS, **args), "table_name")
        keys = group_rows(await executor.query(cnx, KEYS_AND_INDEXES, **args), "table_name")
        foreign_keys = group_rows(await executor.query(cnx, FOREIGN_KEYS, **args), "table_name")
        checks = group_rows(await executor.query(cnx, CHECK_CONSTRAINTS, **args), "table_name")
        defaults = group_rows(await executor.query(cnx, DEFAULT_CONSTRAINTS, **args), "table_name")
        tables = []
        for (table_name,), column_rows in columns.items():
            key = (table_name,)
            table = DmTable(schema_name, table_name)
            for row in column_rows:
                table.columns.append(
                    self.make_column(
                        schema_name,
                        table_name,
                        row["column_name"],
                        full_type_name(
                            row["data_type"], row["max_length"], row["numeric_precision"], row["numeric_scale"]
                        ),
                        is_nullable=row["is_nullable"],
                        is_auto_increment=self.dialect.is_auto_increment(row["is_identity"]),
                    )
                )
            self._read_keys(table, keys.get(key, []))
            self._read_foreign_keys(table, foreign_keys.get(key, []))
            for row in checks.get(key, []):
                expression = unwrap_parentheses(row["expression"])
                column_name = row["column_name"] or infer_check_column(expression, table.column_names)
                table.check_constraints.append(
                    DmCheckConstraint(schema_name, table_name, column_name, row["constraint_name"], expression)
                )
            for row in defaults.get(key, []):
                table.default_constraints.append(
                    DmDefaultConstraint(
                        schema_name,
                        table_name,
                        row["column_name"],
                        row["constraint_name"],
                        unwrap_parentheses(row["expression"]),
                    )
                )
            tables.append(finish_table(table))
        return tables

    @staticmethod
    def _read_keys(table: DmTable, rows: List[dict]):
        schema_name, table_name = table.schema_name, table.table_name
        for (index_name,), index_rows in group_rows(rows, "index_name").items():
            columns = [
                DmOrderedColumn(
                    r["column_name"], DmColumnOrder.DESCENDING if r["is_descending"] else DmColumnOrder.ASCENDING
                )
                for r in index_rows
            ]
            first = index_rows[0]
            if first["is_primary_key"]:
                table.primary_key_constraint = DmPrimaryKeyConstraint(schema_name, table_name, index_name, columns)
            elif first["is_unique_constraint"]:
                table.unique_constraints.append(DmUniqueConstraint(schema_name, table_name, index_name, columns))
            else:
                table.indexes.append(DmIndex(schema_name, table_name, index_name, columns, bool(first["is_unique"])))

    @staticmethod
    def _read_foreign_keys(table: DmTable, rows: List[dict]):
        for (name,), fk_rows in group_rows(rows, "constraint_name").items():
            first = fk_rows[0]
            table.foreign_key_constraints.append(
                DmForeignKeyConstraint(
                    table.schema_name,
                    table.table_name,
                    name,
                    [r["column_name"] for r in fk_rows],
                    first["referenced_table_name"],
                    [r["referenced_column_name"] for r in fk_rows],
                    DmForeignKeyAction.parse(first["delete_rule"]),
                    DmForeignKeyAction.parse(first["update_rule"]),
                )
            )
