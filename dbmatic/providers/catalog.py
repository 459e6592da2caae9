"""Defines the catalog interface, which reads tables and views back into model objects, and its shared helpers."""

import logging
import re
import weakref
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from dbmatic.backend.base import AsyncConnection
from dbmatic.models import DmColumn, DmTable, DmView
from dbmatic.providers import executor
from dbmatic.providers.dialect import Dialect
from dbmatic.types.base import ProviderTypeMap

_IDENTIFIER = re.compile(r"[\"`\[]?([A-Za-z_][A-Za-z0-9_]*)[\"`\]]?")
_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")


def infer_check_column(expression: str, column_names: Iterable[str]) -> Optional[str]:
    """Find the single column a check expression refers to.

    :param expression: the check expression
    :param column_names: the names of the table's columns
    :returns: the column's name when exactly one column is referenced, otherwise None
    """
    if not expression:
        return None
    known = {name.lower(): name for name in column_names}
    found = []
    for match in _IDENTIFIER.finditer(_STRING_LITERAL.sub("''", expression)):
        name = known.get(match.group(1).lower())
        if name is not None and name not in found:
            found.append(name)
    return found[0] if len(found) == 1 else None


def group_rows(rows: List[dict], *keys: str) -> Dict[tuple, List[dict]]:
    """Group catalog rows by the values of the given keys, keeping row order."""
    grouped = {}
    for row in rows:
        grouped.setdefault(tuple(row[k] for k in keys), []).append(row)
    return grouped


def finish_table(table: DmTable) -> DmTable:
    """Set the column shortcut flags of an introspected table from its constraints and indexes.

    :param table: the table to complete
    :returns: the same table
    """
    by_name = {c.column_name.lower(): c for c in table.columns}

    def _column(name: str) -> Optional[DmColumn]:
        return by_name.get(name.lower())

    if table.primary_key_constraint is not None:
        for name in table.primary_key_constraint.column_names:
            column = _column(name)
            if column is not None:
                column.is_primary_key = True
    for constraint in table.unique_constraints:
        if len(constraint.columns) == 1 and _column(constraint.column_names[0]) is not None:
            _column(constraint.column_names[0]).is_unique = True
    for index in table.indexes:
        for name in index.column_names:
            column = _column(name)
            if column is None:
                continue
            column.is_indexed = True
            if index.is_unique and len(index.columns) == 1:
                column.is_unique = True
    for constraint in table.check_constraints:
        column = _column(constraint.column_name) if constraint.column_name else None
        if column is not None and column.check_expression is None:
            column.check_expression = constraint.expression
    for constraint in table.default_constraints:
        column = _column(constraint.column_name)
        if column is not None:
            column.default_expression = constraint.expression
    for constraint in table.foreign_key_constraints:
        for source, referenced in zip(constraint.source_column_names, constraint.referenced_column_names):
            column = _column(source)
            if column is None or column.is_foreign_key:
                continue
            column.referenced_table_name = constraint.referenced_table_name
            column.referenced_column_name = referenced
            column.on_delete = constraint.on_delete
            column.on_update = constraint.on_update
            column.is_foreign_key = True
    return table


class Catalog(ABC):
    """Reads a provider's system catalog.

    Queries are pre-filtered with a lower-cased LIKE pattern, callers apply the exact wildcard match.
    """

    def __init__(self, dialect: Dialect, type_map: ProviderTypeMap):
        """Construct a catalog reader.

        :param dialect: the provider's dialect
        :param type_map: the provider's type map, used to describe introspected columns
        """
        self.logger = logging.getLogger(__name__)
        self.dialect = dialect
        self.type_map = type_map
        self._version_texts = weakref.WeakKeyDictionary()

    async def get_version_text(self, cnx: AsyncConnection) -> str:
        """Return the server's version text."""
        return str(await executor.scalar(cnx, self.dialect.version_sql) or "")

    async def get_cached_version_text(self, cnx: AsyncConnection) -> str:
        """Return the server's version text, read once per connection."""
        text = self._version_texts.get(cnx)
        if text is None:
            text = await self.get_version_text(cnx)
            self._version_texts[cnx] = text
        return text

    async def get_schema_names(self, cnx: AsyncConnection, like: str) -> List[str]:
        """Return the schema names matching a LIKE pattern, none where the provider has no schemas."""
        return []

    @abstractmethod
    async def get_table_names(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[str]:
        """Return the names of the tables in a schema matching a LIKE pattern."""
        pass  # pragma: no cover

    @abstractmethod
    async def get_tables(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[DmTable]:
        """Return the tables in a schema matching a LIKE pattern, with columns, constraints and indexes."""
        pass  # pragma: no cover

    @abstractmethod
    async def get_views(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[DmView]:
        """Return the views in a schema matching a LIKE pattern."""
        pass  # pragma: no cover

    async def get_view_names(self, cnx: AsyncConnection, schema_name: Optional[str], like: str) -> List[str]:
        """Return the names of the views in a schema matching a LIKE pattern."""
        return [v.view_name for v in await self.get_views(cnx, schema_name, like)]

    def make_column(
        self,
        schema_name: Optional[str],
        table_name: str,
        column_name: str,
        data_type: str,
        is_nullable: bool = True,
        is_auto_increment: bool = False,
        length: Optional[int] = None,
        precision: Optional[int] = None,
        scale: Optional[int] = None,
    ) -> DmColumn:
        """Describe an introspected column, resolving its host type through the type map.

        The raw SQL type is kept as the column's provider data type, so the column re-creates with the
        exact same type. A type the map cannot resolve is kept with the host type ``object``.

        :param schema_name: the column's schema
        :param table_name: the column's table
        :param column_name: the column's name
        :param data_type: the SQL type reported by the catalog, e.g. "character varying(255)"
        :param is_nullable: does the column accept NULL
        :param is_auto_increment: is the column an identity / auto increment column
        :param length: the length reported by the catalog, overrides the one parsed from the type
        :param precision: the precision reported by the catalog, overrides the one parsed from the type
        :param scale: the scale reported by the catalog, overrides the one parsed from the type
        :returns: the column
        """
        host = self.type_map.try_get_host_type(data_type)
        if host is None:
            self.logger.warning(
                "Cannot map SQL type '%s' of column %s.%s, keeping it as object", data_type, table_name, column_name
            )
        return DmColumn(
            schema_name,
            table_name,
            column_name,
            host_type=host.host_type if host is not None else object,
            provider_data_types={self.dialect.provider_type: data_type},
            length=length if length is not None else (host.length if host is not None else None),
            precision=precision if precision is not None else (host.precision if host is not None else None),
            scale=scale if scale is not None else (host.scale if host is not None else None),
            is_nullable=bool(is_nullable),
            is_auto_increment=bool(is_auto_increment),
            is_unicode=host.is_unicode if host is not None else None,
            is_fixed_length=host.is_fixed_length if host is not None else None,
        )
