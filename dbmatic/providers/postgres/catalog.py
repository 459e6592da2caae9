"""Reads PostgreSQL tables and views from pg_catalog."""

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
from dbmatic.naming import generate_default_constraint_name
from dbmatic.providers import executor
from dbmatic.providers.catalog import Catalog, finish_table, group_rows
from dbmatic.providers.dialect import unwrap_parentheses
from dbmatic.templating import Template

_EXTENSION_OBJECTS = "('spatial_ref_sys', 'geometry_columns', 'geography_columns', 'raster_columns', 'raster_overviews')"

SCHEMA_NAMES = Template(
    """
    SELECT nspname AS schema_name
    FROM pg_catalog.pg_namespace
    WHERE left(nspname, 3) <> 'pg_'
        AND nspname <> 'information_schema'
        AND lower(nspname) LIKE #{like}
    ORDER BY nspname
    """
)

TABLE_NAMES = Template(
    f"""
    SELECT c.relname AS table_name
    FROM pg_catalog.pg_class c
        JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    WHERE c.relkind IN ('r', 'p')
        AND lower(n.nspname) = lower(#{{schema_name}})
        AND lower(c.relname) LIKE #{{like}}
        AND c.relname NOT IN {_EXTENSION_OBJECTS}
    ORDER BY c.relname
    """
)

COLUMNS = Template(
    f"""
    SELECT
        c.relname AS table_name,
        a.attname AS column_name,
        a.attnum AS column_ordinal,
        pg_catalog.format_type(a.atttypid, a.atttypmod) AS data_type,
        NOT a.attnotnull AS is_nullable,
        a.attidentity::text AS identity,
        pg_catalog.pg_get_expr(d.adbin, d.adrelid) AS column_default
    FROM pg_catalog.pg_attribute a
        JOIN pg_catalog.pg_class c ON a.attrelid = c.oid AND c.relkind IN ('r', 'p')
        JOIN pg_catalog.pg_namespace n ON c.relnamespace = n.oid
        LEFT JOIN pg_catalog.pg_attrdef d ON a.attrelid = d.adrelid AND a.attnum = d.adnum
    WHERE a.attnum > 0
        AND NOT a.attisdropped
        AND lower(n.nspname) = lower(#{{schema_name}})
        AND lower(c.relname) LIKE #{{like}}
        AND c.relname NOT IN {_EXTENSION_OBJECTS}
    ORDER BY c.relname, a.attnum
    """
)

CONSTRAINTS = Template(
    """
    SELECT
        t.relname AS table_name,
        r.conname AS constraint_name,
        r.contype::text AS constraint_type,
        pg_catalog.pg_get_constraintdef(r.oid, true) AS definition,
        rt.relname AS referenced_table_name,
        (SELECT string_agg(a.attname, ',' ORDER BY k.ord)
            FROM unnest(r.conkey) WITH ORDINALITY AS k(attnum, ord)
                JOIN pg_catalog.pg_attribute a ON a.attrelid = r.conrelid AND a.attnum = k.attnum
        ) AS column_names,
        (SELECT string_agg(a.attname, ',' ORDER BY k.ord)
            FROM unnest(r.confkey) WITH ORDINALITY AS k(attnum, ord)
                JOIN pg_catalog.pg_attribute a ON a.attrelid = r.confrelid AND a.attnum = k.attnum
        ) AS referenced_column_names,
        r.confdeltype::text AS delete_rule,
        r.confupdtype::text AS update_rule
    FROM pg_catalog.pg_constraint r
        JOIN pg_catalog.pg_class t ON r.conrelid = t.oid
        JOIN pg_catalog.pg_namespace n ON t.relnamespace = n.oid
        LEFT JOIN pg_catalog.pg_class rt ON r.confrelid = rt.oid
    WHERE r.contype IN ('c', 'f', 'p', 'u')
        AND lower(n.nspname) = lower(#{schema_name})
        AND lower(t.relname) LIKE #{like}
    ORDER BY t.relname, r.conname
    """
)

INDEXES = Template(
    """
    SELECT
        t.relname AS table_name,
        i.relname AS index_name,
        ix.indisunique AS is_unique,
        a.attname AS column_name,
        (ix.indoption[(k.ord - 1)::int]::int & 1) = 1 AS is_descending
    FROM pg_catalog.pg_index ix
        JOIN pg_catalog.pg_class t ON t.oid = ix.indrelid
        JOIN pg_catalog.pg_class i ON i.oid = ix.indexrelid
        JOIN pg_catalog.pg_namespace n ON n.oid = t.relnamespace
        CROSS JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS k(attnum, ord)
        JOIN pg_catalog.pg_attribute a ON a.attrelid = t.oid AND a.attnum = k.attnum
    WHERE NOT ix.indisprimary
        AND NOT EXISTS (
            SELECT 1 FROM pg_catalog.pg_constraint c
            WHERE c.conindid = ix.indexrelid AND c.contype IN ('p', 'u', 'x')
        )
        AND lower(n.nspname) = lower(#{schema_name})
        AND lower(t.relname) LIKE #{like}
    ORDER BY t.relname, i.relname, k.ord
    """
)

VIEWS = Template(
    f"""
    SELECT viewname AS view_name, definition
    FROM pg_catalog.pg_views
    WHERE lower(schemaname) = lower(#{{schema_name}})
        AND lower(viewname) LIKE #{{like}}
        AND viewname NOT IN {_EXTENSION_OBJECTS}
    ORDER BY viewname
    """
)


def _split(csv: Optional[str]) -> List[str]:
    return [name for name in (csv or "").split(",") if name]


def check_expression_of(definition: str) -> str:
    """Return the expression of a ``CHECK (...)`` constraint definition."""
    text = definition.strip()
    if text.upper().startswith("CHECK"):
        text = text[len("CHECK") :].strip()  # noqa: E203
    if text.upper().endswith("NOT VALID"):
        text = text[: -len("NOT VALID")].strip()
    return unwrap_parentheses(text)


class PostgresCatalog(Catalog):
    """Catalog reader for PostgreSQL."""

    async def get_schema_names(self, cnx: AsyncConnection, like: str) -> List[str]:  # noqa: D102
        rows = await executor.query(cnx, SCHEMA_NAMES, like=like)
        return [r["schema_name"] for r in rows]

    async def get_table_names(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[str]:  # noqa: D102
        rows = await executor.query(cnx, TABLE_NAMES, schema_name=schema_name, like=like)
        return [r["table_name"] for r in rows]

    async def get_views(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[DmView]:  # noqa: D102
        rows = await executor.query(cnx, VIEWS, schema_name=schema_name, like=like)
        return [
            DmView(schema_name, r["view_name"], self.dialect.normalize_view_definition(r["definition"])) for r in rows
        ]

    async def get_tables(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[DmTable]:
        """Read tables with three catalog queries: columns, constraints and indexes.

        :param cnx: the connection to run on
        :param schema_name: the schema to read
        :param like: a lower-cased LIKE pattern table names must match
        :returns: the tables
        """
        column_rows = await executor.query(cnx, COLUMNS, schema_name=schema_name, like=like)
        constraints = group_rows(
            await executor.query(cnx, CONSTRAINTS, schema_name=schema_name, like=like), "table_name"
        )
        indexes = group_rows(await executor.query(cnx, INDEXES, schema_name=schema_name, like=like), "table_name")
        tables = []
        for (table_name,), rows in group_rows(column_rows, "table_name").items():
            table = DmTable(schema_name, table_name)
            for row in rows:
                self._read_column(table, row)
            for row in constraints.get((table_name,), []):
                self._read_constraint(table, row)
            for (index_name,), index_rows in group_rows(indexes.get((table_name,), []), "index_name").items():
                columns = [
                    DmOrderedColumn(
                        r["column_name"], DmColumnOrder.DESCENDING if r["is_descending"] else DmColumnOrder.ASCENDING
                    )
                    for r in index_rows
                ]
                table.indexes.append(
                    DmIndex(schema_name, table_name, index_name, columns, bool(index_rows[0]["is_unique"]))
                )
            tables.append(finish_table(table))
        return tables

    def _read_column(self, table: DmTable, row: dict):
        default = row["column_default"]
        is_sequence = bool(default) and default.lower().startswith("nextval(")
        column = self.make_column(
            table.schema_name,
            table.table_name,
            row["column_name"],
            row["data_type"],
            is_nullable=row["is_nullable"],
            is_auto_increment=is_sequence or self.dialect.is_auto_increment(row["identity"]),
        )
        table.columns.append(column)
        if default and not is_sequence:
            table.default_constraints.append(
                DmDefaultConstraint(
                    table.schema_name,
                    table.table_name,
                    column.column_name,
                    generate_default_constraint_name(table.table_name, column.column_name),
                    default,
                )
            )

    @staticmethod
    def _read_constraint(table: DmTable, row: dict):
        schema_name, table_name = table.schema_name, table.table_name
        name = row["constraint_name"]
        columns = _split(row["column_names"])
        kind = row["constraint_type"]
        if kind == "p":
            table.primary_key_constraint = DmPrimaryKeyConstraint(schema_name, table_name, name, columns)
        elif kind == "u":
            table.unique_constraints.append(DmUniqueConstraint(schema_name, table_name, name, columns))
        elif kind == "c":
            table.check_constraints.append(
                DmCheckConstraint(
                    schema_name,
                    table_name,
                    columns[0] if len(columns) == 1 else None,
                    name,
                    check_expression_of(row["definition"]),
                )
            )
        elif kind == "f":
            table.foreign_key_constraints.append(
                DmForeignKeyConstraint(
                    schema_name,
                    table_name,
                    name,
                    columns,
                    row["referenced_table_name"],
                    _split(row["referenced_column_names"]),
                    DmForeignKeyAction.parse(row["delete_rule"]),
                    DmForeignKeyAction.parse(row["update_rule"]),
                )
            )
