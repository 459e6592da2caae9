"""Implements the provider neutral DDL engine.

``DatabaseMethods`` combines a dialect (how statements are written), a catalog (how the database is read
back) and a type map (how host types translate to SQL types). Every operation is a coroutine taking the
connection to run on first, creates are idempotent and report whether they changed anything.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Callable, List, Optional, Tuple, Union

from dbmatic.backend.base import AsyncConnection
from dbmatic.models import (
    DmCheckConstraint,
    DmColumn,
    DmDefaultConstraint,
    DmForeignKeyAction,
    DmForeignKeyConstraint,
    DmIndex,
    DmOrderedColumn,
    DmPrimaryKeyConstraint,
    DmTable,
    DmUniqueConstraint,
    DmView,
    ProviderType,
)
from dbmatic.naming import (
    generate_check_constraint_name,
    generate_default_constraint_name,
    generate_foreign_key_name,
    generate_index_name,
    generate_primary_key_name,
    generate_unique_constraint_name,
    matches_filter,
)
from dbmatic.providers import executor
from dbmatic.providers.alteration import AlterationStepKind, TableAlteration
from dbmatic.providers.catalog import Catalog
from dbmatic.providers.dialect import Dialect
from dbmatic.providers.errors import ProviderError, UnmappedTypeError
from dbmatic.providers.version import DatabaseVersion
from dbmatic.types.base import ProviderTypeMap
from dbmatic.types.descriptors import HostTypeDescriptor, SqlTypeDescriptor

TableObject = Union[DmCheckConstraint, DmDefaultConstraint, DmForeignKeyConstraint, DmIndex, DmUniqueConstraint]


def object_name(obj) -> str:
    """Return the name of a constraint or index."""
    return obj.index_name if isinstance(obj, DmIndex) else obj.constraint_name


def object_columns(obj) -> List[str]:
    """Return the names of the columns a constraint or index is defined on."""
    if isinstance(obj, DmForeignKeyConstraint):
        return obj.source_column_names
    if isinstance(obj, (DmCheckConstraint, DmDefaultConstraint)):
        return [obj.column_name] if obj.column_name else []
    return obj.column_names


def is_on_column(obj, column_name: str) -> bool:
    """Test whether a constraint or index includes a column, ignoring case."""
    return column_name.lower() in (c.lower() for c in object_columns(obj))


def references_column(expression: Optional[str], column_name: str) -> bool:
    """Test whether an SQL expression mentions a column by name."""
    if not expression:
        return False
    return re.search(rf"(?<![\w]){re.escape(column_name)}(?![\w])", expression, re.IGNORECASE) is not None


def _find(items, name: str):
    wanted = name.lower()
    return next((i for i in items if object_name(i).lower() == wanted), None)


def _has_single_column_key(table: DmTable, column_name: str) -> bool:
    key = [column_name.lower()]
    keys = [[c.lower() for c in u.column_names] for u in table.unique_constraints]
    keys += [[c.lower() for c in i.column_names] for i in table.indexes if i.is_unique]
    if table.primary_key_constraint is not None:
        keys.append([c.lower() for c in table.primary_key_constraint.column_names])
    return key in keys


class TableRebuilder(ABC):
    """Applies table changes a provider cannot make in place by rebuilding the table."""

    @abstractmethod
    async def rebuild(self, cnx: AsyncConnection, current: DmTable, desired: DmTable, create_statements: List[str]):
        """Replace a table with a new definition, keeping the data of the columns both definitions share.

        :param cnx: the connection to run on
        :param current: the table as it exists
        :param desired: the table as it should be
        :param create_statements: the statements creating the desired table and its indexes
        """
        pass  # pragma: no cover

    @abstractmethod
    async def truncate(self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str):
        """Remove every row of a table."""
        pass  # pragma: no cover


class DatabaseMethods:
    """DDL and introspection operations for one database provider."""

    def __init__(
        self,
        dialect: Dialect,
        catalog: Catalog,
        type_map: ProviderTypeMap,
        rebuilder: Optional[TableRebuilder] = None,
    ):
        """Construct the methods of a provider.

        :param dialect: writes the provider's statements
        :param catalog: reads the provider's system catalog
        :param type_map: translates between host types and the provider's SQL types
        :param rebuilder: applies the changes the dialect cannot make in place, if any
        """
        self.logger = logging.getLogger(__name__)
        self.dialect = dialect
        self.catalog = catalog
        self.type_map = type_map
        self.rebuilder = rebuilder

    @property
    def provider_type(self) -> ProviderType:  # noqa: D102
        return self.dialect.provider_type

    @property
    def default_schema(self) -> Optional[str]:  # noqa: D102
        return self.dialect.default_schema

    # Capabilities

    async def _version_text(self, cnx: AsyncConnection) -> str:
        return await self.catalog.get_cached_version_text(cnx)

    async def _capability_version(self, cnx: AsyncConnection) -> Tuple[Optional[DatabaseVersion], str]:
        if not self.dialect.version_dependent_capabilities:
            return None, ""
        text = await self._version_text(cnx)
        return DatabaseVersion.parse(text), text

    async def get_database_version(self, cnx: AsyncConnection) -> DatabaseVersion:
        """Return the version of the database server.

        :param cnx: the connection to run on
        :returns: the parsed version
        :raises: ValueError when the server's version text has no version number
        """
        return DatabaseVersion.parse(await self._version_text(cnx))

    async def supports_schemas(self, cnx: AsyncConnection) -> bool:  # noqa: D102
        return self.dialect.supports_schemas

    async def supports_check_constraints(self, cnx: AsyncConnection) -> bool:  # noqa: D102
        return self.dialect.supports_check_constraints(*await self._capability_version(cnx))

    async def supports_ordered_keys_in_constraints(self, cnx: AsyncConnection) -> bool:  # noqa: D102
        return self.dialect.supports_ordered_keys(*await self._capability_version(cnx))

    def try_get_sql_type(self, descriptor: Union[HostTypeDescriptor, type]) -> Optional[SqlTypeDescriptor]:
        """Find the provider's SQL type for a host type, None when there is none."""
        return self.type_map.try_get_sql_type(descriptor)

    def try_get_host_type(self, sql_type: Union[SqlTypeDescriptor, str]) -> Optional[HostTypeDescriptor]:
        """Find the host type for one of the provider's SQL types, None when there is none."""
        return self.type_map.try_get_host_type(sql_type)

    def is_auto_increment(self, value) -> bool:
        """Interpret the auto increment marker the provider's catalog reports for a column."""
        return self.dialect.is_auto_increment(value)

    # Preparation

    def _schema(self, schema_name: Optional[str]) -> Optional[str]:
        return self.dialect.normalize_schema_name(schema_name)

    def _name(self, name: Optional[str]) -> Optional[str]:
        if name is not None and not name.strip():
            raise ValueError("A non-empty name is required")
        return self.dialect.normalize_name(name)

    def _like(self, name_filter: Optional[str]) -> str:
        return self.dialect.like_pattern(name_filter)

    def _sql_type_of(self, column: DmColumn) -> str:
        override = column.get_provider_data_type(self.provider_type)
        if override:
            return override
        descriptor = HostTypeDescriptor(
            column.host_type,
            length=column.length,
            precision=column.precision,
            scale=column.scale,
            is_auto_incrementing=column.is_auto_increment or None,
            is_unicode=column.is_unicode,
            is_fixed_length=column.is_fixed_length,
        )
        sql_type = self.type_map.try_get_sql_type(descriptor)
        if sql_type is None:
            raise UnmappedTypeError(
                f"Column '{column.table_name}.{column.column_name}' has host type {column.host_type!r} "
                f"which has no {self.provider_type.value} SQL type, give the column a provider data type"
            )
        return sql_type.sql_type_name

    def _normalize(self, obj, schema_name: Optional[str], table_name: str):
        """Return a copy of a column, constraint or index with normalized names, placed on the given table."""
        n = self.dialect.normalize_name

        def _keys(columns: List[DmOrderedColumn]) -> List[DmOrderedColumn]:
            return [DmOrderedColumn(n(c.column_name), c.order) for c in columns]

        common = {"schema_name": schema_name, "table_name": table_name}
        if isinstance(obj, DmColumn):
            return replace(
                obj,
                column_name=n(obj.column_name),
                referenced_table_name=n(obj.referenced_table_name),
                referenced_column_name=n(obj.referenced_column_name),
                **common,
            )
        if isinstance(obj, (DmPrimaryKeyConstraint, DmUniqueConstraint)):
            return replace(obj, constraint_name=n(obj.constraint_name), columns=_keys(obj.columns), **common)
        if isinstance(obj, (DmCheckConstraint, DmDefaultConstraint)):
            return replace(obj, constraint_name=n(obj.constraint_name), column_name=n(obj.column_name), **common)
        if isinstance(obj, DmForeignKeyConstraint):
            return replace(
                obj,
                constraint_name=n(obj.constraint_name),
                source_columns=_keys(obj.source_columns),
                referenced_table_name=n(obj.referenced_table_name),
                referenced_columns=_keys(obj.referenced_columns),
                **common,
            )
        if isinstance(obj, DmIndex):
            return replace(obj, index_name=n(obj.index_name), columns=_keys(obj.columns), **common)
        raise TypeError(f"Cannot place {type(obj).__name__} on a table")

    def prepare_table(self, table: DmTable) -> DmTable:
        """Return a copy of a table ready to be created.

        Names are normalized, and the column shortcuts (``is_primary_key``, ``is_unique``,
        ``check_expression``, ``default_expression``, ``is_foreign_key`` and ``is_indexed``) are expanded
        into constraints and indexes with generated names, unless the table already defines an equivalent.

        :param table: the table
        :returns: the prepared copy
        """
        schema_name = self._schema(table.schema_name)
        table_name = self._name(table.table_name)

        def _place(items):
            return [self._normalize(i, schema_name, table_name) for i in items]

        pk = table.primary_key_constraint
        prepared = DmTable(
            schema_name,
            table_name,
            _place(table.columns),
            primary_key_constraint=self._normalize(pk, schema_name, table_name) if pk is not None else None,
            check_constraints=_place(table.check_constraints),
            default_constraints=_place(table.default_constraints),
            unique_constraints=_place(table.unique_constraints),
            foreign_key_constraints=_place(table.foreign_key_constraints),
            indexes=_place(table.indexes),
        )
        self._expand_shortcuts(prepared)
        return prepared

    @staticmethod
    def _expand_shortcuts(table: DmTable):
        schema_name, table_name = table.schema_name, table.table_name
        if table.primary_key_constraint is None:
            key = [c.column_name for c in table.columns if c.is_primary_key]
            if key:
                name = generate_primary_key_name(table_name, key)
                table.primary_key_constraint = DmPrimaryKeyConstraint(schema_name, table_name, name, key)
        pk_columns = []
        if table.primary_key_constraint is not None:
            pk_columns = [c.lower() for c in table.primary_key_constraint.column_names]
        for column in table.columns:
            name = column.column_name
            key = [name]
            column.is_primary_key = name.lower() in pk_columns
            if column.is_unique and not _has_single_column_key(table, name):
                table.unique_constraints.append(
                    DmUniqueConstraint(schema_name, table_name, generate_unique_constraint_name(table_name, key), key)
                )
            if column.check_expression and not any(is_on_column(c, name) for c in table.check_constraints):
                table.check_constraints.append(
                    DmCheckConstraint(
                        schema_name,
                        table_name,
                        name,
                        generate_check_constraint_name(table_name, name),
                        column.check_expression,
                    )
                )
            if column.default_expression and not any(is_on_column(d, name) for d in table.default_constraints):
                table.default_constraints.append(
                    DmDefaultConstraint(
                        schema_name,
                        table_name,
                        name,
                        generate_default_constraint_name(table_name, name),
                        column.default_expression,
                    )
                )
            if column.is_foreign_key and not any(is_on_column(f, name) for f in table.foreign_key_constraints):
                referenced_key = [column.referenced_column_name]
                table.foreign_key_constraints.append(
                    DmForeignKeyConstraint(
                        schema_name,
                        table_name,
                        generate_foreign_key_name(table_name, key, column.referenced_table_name, referenced_key),
                        key,
                        column.referenced_table_name,
                        referenced_key,
                        column.on_delete or DmForeignKeyAction.NO_ACTION,
                        column.on_update or DmForeignKeyAction.NO_ACTION,
                    )
                )
            if column.is_indexed and not any(is_on_column(i, name) for i in table.indexes):
                table.indexes.append(DmIndex(schema_name, table_name, generate_index_name(table_name, key), key))

    @staticmethod
    def _without_shortcuts(table: DmTable) -> DmTable:
        """Copy an introspected table, leaving its constraint lists as the only source of its constraints."""
        table = table.copy()
        for column in table.columns:
            column.is_primary_key = False
            column.is_unique = False
            column.is_indexed = False
            column.is_foreign_key = False
            column.check_expression = None
            column.default_expression = None
        return table

    async def _create_table_statements(self, cnx: AsyncConnection, table: DmTable) -> List[str]:
        column_types = {c.column_name.lower(): self._sql_type_of(c) for c in table.columns}
        supports_checks = await self.supports_check_constraints(cnx)
        ordered_keys = await self.supports_ordered_keys_in_constraints(cnx)
        return self.dialect.create_table(table, column_types, supports_checks, ordered_keys)

    async def _run(self, cnx: AsyncConnection, statements: List[str]):
        for statement in statements:
            await executor.execute(cnx, statement)

    async def _apply(self, cnx: AsyncConnection, current: DmTable, desired: DmTable, statement: Optional[str]):
        """Run the statement making a change, or rebuild the table when the dialect gave none."""
        if statement is not None:
            await executor.execute(cnx, statement)
            return
        if self.rebuilder is None:
            raise ProviderError(f"The {self.provider_type.value} provider cannot apply this change in place")
        prepared = self.prepare_table(desired)
        statements = await self._create_table_statements(cnx, prepared)
        self.logger.info("Rebuilding table %s to apply a change", current.table_name)
        await self.rebuilder.rebuild(cnx, current, prepared, statements)

    # Schemas

    async def does_schema_exist(self, cnx: AsyncConnection, schema_name: str) -> bool:
        """Test whether a schema exists, always False where the provider has no schemas."""
        if not self.dialect.supports_schemas:
            return False
        schema_name = self._schema(schema_name)
        names = await self.catalog.get_schema_names(cnx, self._like(schema_name))
        return any(n.lower() == schema_name.lower() for n in names)

    async def create_schema_if_not_exists(self, cnx: AsyncConnection, schema_name: str) -> bool:
        """Create a schema.

        :param cnx: the connection to run on
        :param schema_name: the schema to create
        :returns: True when the schema was created, False when it exists or the provider has no schemas
        """
        if not self.dialect.supports_schemas or await self.does_schema_exist(cnx, schema_name):
            return False
        await executor.execute(cnx, self.dialect.create_schema(self._schema(schema_name)))
        return True

    async def get_schema_names(self, cnx: AsyncConnection, schema_name_filter: str = None) -> List[str]:
        """Return the names of the schemas matching a wildcard filter, all of them without a filter."""
        if not self.dialect.supports_schemas:
            return []
        name_filter = self.dialect.normalize_filter(schema_name_filter)
        names = await self.catalog.get_schema_names(cnx, self._like(name_filter))
        return [n for n in names if matches_filter(n, name_filter)]

    async def drop_schema_if_exists(self, cnx: AsyncConnection, schema_name: str) -> bool:
        """Drop a schema, returning False when it does not exist or the provider has no schemas."""
        if not self.dialect.supports_schemas or not await self.does_schema_exist(cnx, schema_name):
            return False
        await executor.execute(cnx, self.dialect.drop_schema(self._schema(schema_name)))
        return True

    # Tables

    async def does_table_exist(self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str) -> bool:
        """Test whether a table exists."""
        table_name = self._name(table_name)
        names = await self.catalog.get_table_names(cnx, self._schema(schema_name), self._like(table_name))
        return any(n.lower() == table_name.lower() for n in names)

    async def create_table_if_not_exists(self, cnx: AsyncConnection, table: DmTable) -> bool:
        """Create a table with its constraints and indexes.

        :param cnx: the connection to run on
        :param table: the table to create
        :returns: True when the table was created, False when it already exists
        :raises: UnmappedTypeError when a column's type cannot be rendered, before anything is run
        """
        prepared = self.prepare_table(table)
        statements = await self._create_table_statements(cnx, prepared)
        if await self.does_table_exist(cnx, prepared.schema_name, prepared.table_name):
            return False
        await self._run(cnx, statements)
        return True

    async def create_tables_if_not_exist(self, cnx: AsyncConnection, tables: List[DmTable]) -> List[bool]:
        """Create several tables in the given order, reporting for each whether it was created."""
        return [await self.create_table_if_not_exists(cnx, table) for table in tables]

    async def get_tables(
        self, cnx: AsyncConnection, schema_name: Optional[str] = None, table_name_filter: str = None
    ) -> List[DmTable]:
        """Return the tables whose names match a wildcard filter, all of them without a filter.

        :param cnx: the connection to run on
        :param schema_name: the schema to look in, defaults to the provider's default schema
        :param table_name_filter: a filter where ``*`` matches any run of characters and ``?`` one character
        :returns: the tables, with their columns, constraints and indexes
        """
        name_filter = self.dialect.normalize_filter(table_name_filter)
        tables = await self.catalog.get_tables(cnx, self._schema(schema_name), self._like(name_filter))
        return [t for t in tables if matches_filter(t.table_name, name_filter)]

    async def get_table(self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str) -> Optional[DmTable]:
        """Return a table, None when it does not exist."""
        table_name = self._name(table_name)
        tables = await self.get_tables(cnx, schema_name, table_name)
        return next((t for t in tables if t.table_name.lower() == table_name.lower()), None)

    async def get_table_names(
        self, cnx: AsyncConnection, schema_name: Optional[str] = None, table_name_filter: str = None
    ) -> List[str]:
        """Return the names of the tables matching a wildcard filter."""
        name_filter = self.dialect.normalize_filter(table_name_filter)
        names = await self.catalog.get_table_names(cnx, self._schema(schema_name), self._like(name_filter))
        return [n for n in names if matches_filter(n, name_filter)]

    async def drop_table_if_exists(self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str) -> bool:
        """Drop a table, returning False when it does not exist."""
        if not await self.does_table_exist(cnx, schema_name, table_name):
            return False
        await executor.execute(cnx, self.dialect.drop_table(self._schema(schema_name), self._name(table_name)))
        return True

    async def rename_table_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, new_table_name: str
    ) -> bool:
        """Rename a table.

        :returns: True when renamed, False when the table does not exist or the new name is taken
        """
        if not await self.does_table_exist(cnx, schema_name, table_name):
            return False
        if await self.does_table_exist(cnx, schema_name, new_table_name):
            return False
        statement = self.dialect.rename_table(
            self._schema(schema_name), self._name(table_name), self._name(new_table_name)
        )
        await executor.execute(cnx, statement)
        return True

    async def truncate_table_if_exists(self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str) -> bool:
        """Remove every row of a table, returning False when it does not exist."""
        if not await self.does_table_exist(cnx, schema_name, table_name):
            return False
        schema_name, table_name = self._schema(schema_name), self._name(table_name)
        statement = self.dialect.truncate_table(schema_name, table_name)
        if statement is None:
            await self.rebuilder.truncate(cnx, schema_name, table_name)
        else:
            await executor.execute(cnx, statement)
        return True

    async def alter_table(self, cnx: AsyncConnection, alteration: TableAlteration) -> bool:
        """Apply a batch of changes to a table.

        Steps run in a fixed order: foreign keys, indexes and the other constraints are dropped first,
        then columns are dropped, the table and its columns renamed, and finally columns, constraints,
        indexes and foreign keys added. Additions are made on the renamed table.

        :param cnx: the connection to run on
        :param alteration: the changes
        :returns: False when the table does not exist or its new name is taken, otherwise True
        :raises: ProviderError when the table cannot be renamed
        """
        schema_name = alteration.schema_name
        table_name = alteration.table_name
        if not await self.does_table_exist(cnx, schema_name, table_name):
            return False
        new_name = alteration.new_table_name
        if new_name and self._name(new_name).lower() != self._name(table_name).lower():
            if await self.does_table_exist(cnx, schema_name, new_name):
                return False

        def _placed(payload):
            return replace(payload, schema_name=schema_name, table_name=table_name)

        k = AlterationStepKind
        for step in alteration.steps():
            payload = step.payload
            if step.kind is k.DROP_FOREIGN_KEY:
                await self.drop_foreign_key_constraint_if_exists(cnx, schema_name, table_name, payload)
            elif step.kind is k.DROP_INDEX:
                await self.drop_index_if_exists(cnx, schema_name, table_name, payload)
            elif step.kind is k.DROP_UNIQUE:
                await self.drop_unique_constraint_if_exists(cnx, schema_name, table_name, payload)
            elif step.kind is k.DROP_CHECK:
                await self.drop_check_constraint_if_exists(cnx, schema_name, table_name, payload)
            elif step.kind is k.DROP_DEFAULT:
                await self.drop_default_constraint_if_exists(cnx, schema_name, table_name, payload)
            elif step.kind is k.DROP_PRIMARY_KEY:
                await self.drop_primary_key_constraint_if_exists(cnx, schema_name, table_name)
            elif step.kind is k.DROP_COLUMN:
                await self.drop_column_if_exists(cnx, schema_name, table_name, payload)
            elif step.kind is k.RENAME_TABLE:
                if self._name(payload[1]).lower() == self._name(table_name).lower():
                    continue
                if not await self.rename_table_if_exists(cnx, schema_name, table_name, payload[1]):
                    raise ProviderError(f"Could not rename table {table_name} to {payload[1]}")
                table_name = payload[1]
            elif step.kind is k.RENAME_COLUMN:
                await self.rename_column_if_exists(cnx, schema_name, table_name, *payload)
            elif step.kind is k.ADD_COLUMN:
                await self.create_column_if_not_exists(cnx, _placed(payload))
            elif step.kind is k.ADD_PRIMARY_KEY:
                await self.create_primary_key_constraint_if_not_exists(cnx, _placed(payload))
            elif step.kind is k.ADD_UNIQUE:
                await self.create_unique_constraint_if_not_exists(cnx, _placed(payload))
            elif step.kind is k.ADD_CHECK:
                await self.create_check_constraint_if_not_exists(cnx, _placed(payload))
            elif step.kind is k.ADD_DEFAULT:
                await self.create_default_constraint_if_not_exists(cnx, _placed(payload))
            elif step.kind is k.ADD_INDEX:
                await self.create_index_if_not_exists(cnx, _placed(payload))
            elif step.kind is k.ADD_FOREIGN_KEY:
                await self.create_foreign_key_constraint_if_not_exists(cnx, _placed(payload))
        return True

    # Columns

    async def does_column_exist(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Test whether a column exists."""
        return await self.get_column(cnx, schema_name, table_name, column_name) is not None

    async def create_column_if_not_exists(self, cnx: AsyncConnection, column: DmColumn) -> bool:
        """Add a column to an existing table, along with the constraints its shortcuts describe.

        :param cnx: the connection to run on
        :param column: the column, naming its table
        :returns: True when added, False when the column exists or the table does not
        """
        table = await self.get_table(cnx, column.schema_name, column.table_name)
        if table is None or table.get_column(self._name(column.column_name)) is not None:
            return False
        column = self._normalize(column, table.schema_name, table.table_name)
        desired = self._without_shortcuts(table)
        desired.columns.append(column)
        desired = self.prepare_table(desired)
        added = desired.get_column(column.column_name)
        default = next((d for d in desired.default_constraints if is_on_column(d, added.column_name)), None)
        statement = self.dialect.add_column(table, added, self._sql_type_of(added), default)
        if statement is None:
            await self._apply(cnx, table, desired, None)
            return True
        await self._run(cnx, [statement] + await self._added_objects(cnx, table, desired))
        return True

    async def _added_objects(self, cnx: AsyncConnection, current: DmTable, desired: DmTable) -> List[str]:
        """Return the statements adding the keys, constraints and indexes ``desired`` has beyond ``current``."""
        ordered = await self.supports_ordered_keys_in_constraints(cnx)
        existing = {object_name(o).lower() for o in self._table_objects(current)}

        def _new(items):
            return [i for i in items if object_name(i).lower() not in existing]

        statements = []
        if current.primary_key_constraint is None and desired.primary_key_constraint is not None:
            statements.append(self.dialect.add_primary_key(desired.primary_key_constraint, ordered))
        statements += [self.dialect.add_unique_constraint(c, ordered) for c in _new(desired.unique_constraints)]
        if await self.supports_check_constraints(cnx):
            statements += [self.dialect.add_check_constraint(c) for c in _new(desired.check_constraints)]
        statements += [self.dialect.create_index(i) for i in _new(desired.indexes)]
        statements += [self.dialect.add_foreign_key(c) for c in _new(desired.foreign_key_constraints)]
        return statements

    @staticmethod
    def _table_objects(table: DmTable) -> List[TableObject]:
        return (
            table.unique_constraints
            + table.check_constraints
            + table.default_constraints
            + table.foreign_key_constraints
            + table.indexes
        )

    async def get_columns(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name_filter: str = None
    ) -> List[DmColumn]:
        """Return the columns of a table matching a wildcard filter, none when the table does not exist."""
        table = await self.get_table(cnx, schema_name, table_name)
        if table is None:
            return []
        name_filter = self.dialect.normalize_filter(column_name_filter)
        return [c for c in table.columns if matches_filter(c.column_name, name_filter)]

    async def get_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> Optional[DmColumn]:
        """Return a column, None when it or its table does not exist."""
        table = await self.get_table(cnx, schema_name, table_name)
        return table.get_column(self._name(column_name)) if table is not None else None

    async def get_column_names(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name_filter: str = None
    ) -> List[str]:
        """Return the names of the columns of a table matching a wildcard filter."""
        return [c.column_name for c in await self.get_columns(cnx, schema_name, table_name, column_name_filter)]

    async def drop_column_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Drop a column, along with the constraints and indexes defined on it where the provider requires.

        :returns: True when dropped, False when the column or its table does not exist
        """
        table = await self.get_table(cnx, schema_name, table_name)
        column = table.get_column(self._name(column_name)) if table is not None else None
        if column is None:
            return False
        statement = self.dialect.drop_column(table, column.column_name)
        if statement is None:
            await self._apply(cnx, table, self._without_column(table, column.column_name), None)
            return True
        await self._run(cnx, self.dialect.column_dependents(table, column.column_name) + [statement])
        return True

    def _without_column(self, table: DmTable, column_name: str) -> DmTable:
        table = self._without_shortcuts(table)
        table.columns = [c for c in table.columns if c.column_name.lower() != column_name.lower()]
        pk = table.primary_key_constraint
        if pk is not None and is_on_column(pk, column_name):
            table.primary_key_constraint = None
        table.unique_constraints = [c for c in table.unique_constraints if not is_on_column(c, column_name)]
        table.check_constraints = [
            c
            for c in table.check_constraints
            if not is_on_column(c, column_name) and not references_column(c.expression, column_name)
        ]
        table.default_constraints = [c for c in table.default_constraints if not is_on_column(c, column_name)]
        table.foreign_key_constraints = [
            c for c in table.foreign_key_constraints if not is_on_column(c, column_name)
        ]
        table.indexes = [i for i in table.indexes if not is_on_column(i, column_name)]
        return table

    async def rename_column_if_exists(
        self,
        cnx: AsyncConnection,
        schema_name: Optional[str],
        table_name: str,
        column_name: str,
        new_column_name: str,
    ) -> bool:
        """Rename a column.

        :returns: True when renamed, False when the column does not exist or the new name is taken
        """
        table = await self.get_table(cnx, schema_name, table_name)
        column = table.get_column(self._name(column_name)) if table is not None else None
        new_column_name = self._name(new_column_name)
        if column is None or table.get_column(new_column_name) is not None:
            return False
        await executor.execute(cnx, self.dialect.rename_column(table, column.column_name, new_column_name))
        return True

    # Primary keys

    async def does_primary_key_constraint_exist(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str
    ) -> bool:
        """Test whether a table has a primary key."""
        return await self.get_primary_key_constraint(cnx, schema_name, table_name) is not None

    async def create_primary_key_constraint_if_not_exists(
        self, cnx: AsyncConnection, constraint: DmPrimaryKeyConstraint
    ) -> bool:
        """Add a primary key, returning False when the table has one or does not exist."""
        table = await self.get_table(cnx, constraint.schema_name, constraint.table_name)
        if table is None or table.primary_key_constraint is not None:
            return False
        constraint = self._normalize(constraint, table.schema_name, table.table_name)
        desired = self._without_shortcuts(table)
        desired.primary_key_constraint = constraint
        ordered = await self.supports_ordered_keys_in_constraints(cnx)
        await self._apply(cnx, table, desired, self.dialect.add_primary_key(constraint, ordered))
        return True

    async def get_primary_key_constraint(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str
    ) -> Optional[DmPrimaryKeyConstraint]:
        """Return the primary key of a table, None when it has none or does not exist."""
        table = await self.get_table(cnx, schema_name, table_name)
        return table.primary_key_constraint if table is not None else None

    async def drop_primary_key_constraint_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str
    ) -> bool:
        """Drop the primary key of a table, returning False when it has none or does not exist."""
        table = await self.get_table(cnx, schema_name, table_name)
        if table is None or table.primary_key_constraint is None:
            return False
        desired = self._without_shortcuts(table)
        desired.primary_key_constraint = None
        statement = self.dialect.drop_primary_key(
            table.schema_name, table.table_name, table.primary_key_constraint.constraint_name
        )
        await self._apply(cnx, table, desired, statement)
        return True

    # Shared constraint and index plumbing

    async def _objects(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, attr: str, name_filter: str = None
    ) -> list:
        table = await self.get_table(cnx, schema_name, table_name)
        if table is None:
            return []
        name_filter = self.dialect.normalize_filter(name_filter)
        return [o for o in getattr(table, attr) if matches_filter(object_name(o), name_filter)]

    async def _object(self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, attr: str, name: str):
        return _find(await self._objects(cnx, schema_name, table_name, attr), self._name(name))

    async def _objects_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, attr: str, column_name: str
    ) -> list:
        column_name = self._name(column_name)
        return [o for o in await self._objects(cnx, schema_name, table_name, attr) if is_on_column(o, column_name)]

    async def _object_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, attr: str, column_name: str
    ):
        return next(iter(await self._objects_on_column(cnx, schema_name, table_name, attr, column_name)), None)

    async def _create_object(self, cnx: AsyncConnection, obj: TableObject, attr: str, build: Callable) -> bool:
        """Add a constraint or index to its table, unless the table is missing or has one with the same name."""
        table = await self.get_table(cnx, obj.schema_name, obj.table_name)
        if table is None:
            return False
        obj = self._normalize(obj, table.schema_name, table.table_name)
        if _find(getattr(table, attr), object_name(obj)) is not None:
            return False
        desired = self._without_shortcuts(table)
        getattr(desired, attr).append(obj)
        await self._apply(cnx, table, desired, await build(obj))
        return True

    async def _drop_object(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, attr: str, find: Callable, build: Callable
    ) -> bool:
        """Drop the constraint or index ``find`` selects from a table, False when there is none."""
        table = await self.get_table(cnx, schema_name, table_name)
        obj = find(getattr(table, attr)) if table is not None else None
        if obj is None:
            return False
        desired = self._without_shortcuts(table)
        setattr(desired, attr, [o for o in getattr(desired, attr) if object_name(o).lower() != object_name(obj).lower()])
        await self._apply(cnx, table, desired, build(table, obj))
        return True

    def _named(self, name: str) -> Callable:
        name = self._name(name)
        return lambda items: _find(items, name)

    def _on_column(self, column_name: str) -> Callable:
        column_name = self._name(column_name)
        return lambda items: next((i for i in items if is_on_column(i, column_name)), None)

    # Unique constraints

    async def does_unique_constraint_exist(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> bool:
        """Test whether a table has a unique constraint with the given name."""
        return await self.get_unique_constraint(cnx, schema_name, table_name, constraint_name) is not None

    async def does_unique_constraint_exist_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Test whether a unique constraint includes the given column."""
        return await self.get_unique_constraint_on_column(cnx, schema_name, table_name, column_name) is not None

    async def create_unique_constraint_if_not_exists(self, cnx: AsyncConnection, constraint: DmUniqueConstraint) -> bool:
        """Add a unique constraint, returning False when its table is missing or the name is taken."""

        async def _build(c):
            return self.dialect.add_unique_constraint(c, await self.supports_ordered_keys_in_constraints(cnx))

        return await self._create_object(cnx, constraint, "unique_constraints", _build)

    async def get_unique_constraint(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> Optional[DmUniqueConstraint]:
        """Return a unique constraint by name, None when it does not exist."""
        return await self._object(cnx, schema_name, table_name, "unique_constraints", constraint_name)

    async def get_unique_constraint_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> Optional[DmUniqueConstraint]:
        """Return the first unique constraint including the given column."""
        return await self._object_on_column(cnx, schema_name, table_name, "unique_constraints", column_name)

    async def get_unique_constraints(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name_filter: str = None
    ) -> List[DmUniqueConstraint]:
        """Return the unique constraints of a table matching a wildcard filter."""
        return await self._objects(cnx, schema_name, table_name, "unique_constraints", constraint_name_filter)

    async def get_unique_constraint_names(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name_filter: str = None
    ) -> List[str]:
        """Return the names of the unique constraints of a table matching a wildcard filter."""
        constraints = await self.get_unique_constraints(cnx, schema_name, table_name, constraint_name_filter)
        return [c.constraint_name for c in constraints]

    async def get_unique_constraint_name_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> Optional[str]:
        """Return the name of the first unique constraint including the given column."""
        constraint = await self.get_unique_constraint_on_column(cnx, schema_name, table_name, column_name)
        return constraint.constraint_name if constraint is not None else None

    def _drop_unique_sql(self, table: DmTable, constraint: DmUniqueConstraint) -> Optional[str]:
        return self.dialect.drop_unique_constraint(table.schema_name, table.table_name, constraint.constraint_name)

    async def drop_unique_constraint_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> bool:
        """Drop a unique constraint by name, returning False when it does not exist."""
        return await self._drop_object(
            cnx, schema_name, table_name, "unique_constraints", self._named(constraint_name), self._drop_unique_sql
        )

    async def drop_unique_constraint_on_column_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Drop the first unique constraint including the given column."""
        return await self._drop_object(
            cnx, schema_name, table_name, "unique_constraints", self._on_column(column_name), self._drop_unique_sql
        )

    # Check constraints

    async def does_check_constraint_exist(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> bool:
        """Test whether a table has a check constraint with the given name."""
        return await self.get_check_constraint(cnx, schema_name, table_name, constraint_name) is not None

    async def does_check_constraint_exist_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Test whether a check constraint is scoped to the given column."""
        return await self.get_check_constraint_on_column(cnx, schema_name, table_name, column_name) is not None

    async def create_check_constraint_if_not_exists(self, cnx: AsyncConnection, constraint: DmCheckConstraint) -> bool:
        """Add a check constraint.

        :returns: True when added, False when the provider does not support check constraints, the table is
            missing or the name is taken
        """
        if not await self.supports_check_constraints(cnx):
            return False

        async def _build(c):
            return self.dialect.add_check_constraint(c)

        return await self._create_object(cnx, constraint, "check_constraints", _build)

    async def get_check_constraint(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> Optional[DmCheckConstraint]:
        """Return a check constraint by name, None when it does not exist."""
        return await self._object(cnx, schema_name, table_name, "check_constraints", constraint_name)

    async def get_check_constraint_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> Optional[DmCheckConstraint]:
        """Return the first check constraint scoped to the given column."""
        return await self._object_on_column(cnx, schema_name, table_name, "check_constraints", column_name)

    async def get_check_constraints(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name_filter: str = None
    ) -> List[DmCheckConstraint]:
        """Return the check constraints of a table matching a wildcard filter."""
        return await self._objects(cnx, schema_name, table_name, "check_constraints", constraint_name_filter)

    async def get_check_constraint_names(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name_filter: str = None
    ) -> List[str]:
        """Return the names of the check constraints of a table matching a wildcard filter."""
        constraints = await self.get_check_constraints(cnx, schema_name, table_name, constraint_name_filter)
        return [c.constraint_name for c in constraints]

    async def get_check_constraint_name_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> Optional[str]:
        """Return the name of the first check constraint scoped to the given column."""
        constraint = await self.get_check_constraint_on_column(cnx, schema_name, table_name, column_name)
        return constraint.constraint_name if constraint is not None else None

    def _drop_check_sql(self, table: DmTable, constraint: DmCheckConstraint) -> Optional[str]:
        return self.dialect.drop_check_constraint(table.schema_name, table.table_name, constraint.constraint_name)

    async def drop_check_constraint_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> bool:
        """Drop a check constraint by name, returning False when it does not exist."""
        return await self._drop_object(
            cnx, schema_name, table_name, "check_constraints", self._named(constraint_name), self._drop_check_sql
        )

    async def drop_check_constraint_on_column_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Drop the first check constraint scoped to the given column."""
        return await self._drop_object(
            cnx, schema_name, table_name, "check_constraints", self._on_column(column_name), self._drop_check_sql
        )

    # Default constraints

    async def does_default_constraint_exist(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> bool:
        """Test whether a table has a default constraint with the given name."""
        return await self.get_default_constraint(cnx, schema_name, table_name, constraint_name) is not None

    async def does_default_constraint_exist_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Test whether a column has a default."""
        return await self.get_default_constraint_on_column(cnx, schema_name, table_name, column_name) is not None

    async def create_default_constraint_if_not_exists(
        self, cnx: AsyncConnection, constraint: DmDefaultConstraint
    ) -> bool:
        """Give a column a default.

        :returns: True when added, False when the column is missing, already has a default, or the name is taken
        """
        table = await self.get_table(cnx, constraint.schema_name, constraint.table_name)
        if table is None or table.get_column(self._name(constraint.column_name)) is None:
            return False
        if any(is_on_column(d, self._name(constraint.column_name)) for d in table.default_constraints):
            return False

        async def _build(c):
            return self.dialect.add_default_constraint(c)

        return await self._create_object(cnx, constraint, "default_constraints", _build)

    async def get_default_constraint(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> Optional[DmDefaultConstraint]:
        """Return a default constraint by name, None when it does not exist."""
        return await self._object(cnx, schema_name, table_name, "default_constraints", constraint_name)

    async def get_default_constraint_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> Optional[DmDefaultConstraint]:
        """Return the default of a column, None when it has none."""
        return await self._object_on_column(cnx, schema_name, table_name, "default_constraints", column_name)

    async def get_default_constraints(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name_filter: str = None
    ) -> List[DmDefaultConstraint]:
        """Return the default constraints of a table matching a wildcard filter."""
        return await self._objects(cnx, schema_name, table_name, "default_constraints", constraint_name_filter)

    async def get_default_constraint_names(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name_filter: str = None
    ) -> List[str]:
        """Return the names of the default constraints of a table matching a wildcard filter."""
        constraints = await self.get_default_constraints(cnx, schema_name, table_name, constraint_name_filter)
        return [c.constraint_name for c in constraints]

    async def get_default_constraint_name_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> Optional[str]:
        """Return the name of the default constraint of a column."""
        constraint = await self.get_default_constraint_on_column(cnx, schema_name, table_name, column_name)
        return constraint.constraint_name if constraint is not None else None

    def _drop_default_sql(self, table: DmTable, constraint: DmDefaultConstraint) -> Optional[str]:
        return self.dialect.drop_default_constraint(constraint)

    async def drop_default_constraint_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> bool:
        """Drop a default constraint by name, returning False when it does not exist."""
        return await self._drop_object(
            cnx, schema_name, table_name, "default_constraints", self._named(constraint_name), self._drop_default_sql
        )

    async def drop_default_constraint_on_column_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Drop the default of a column, returning False when it has none."""
        return await self._drop_object(
            cnx, schema_name, table_name, "default_constraints", self._on_column(column_name), self._drop_default_sql
        )

    # Foreign key constraints

    async def does_foreign_key_constraint_exist(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> bool:
        """Test whether a table has a foreign key with the given name."""
        return await self.get_foreign_key_constraint(cnx, schema_name, table_name, constraint_name) is not None

    async def does_foreign_key_constraint_exist_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Test whether a foreign key includes the given column among its source columns."""
        found = await self.get_foreign_key_constraint_on_column(cnx, schema_name, table_name, column_name)
        return found is not None

    async def create_foreign_key_constraint_if_not_exists(
        self, cnx: AsyncConnection, constraint: DmForeignKeyConstraint
    ) -> bool:
        """Add a foreign key, returning False when its table is missing or the name is taken."""

        async def _build(c):
            return self.dialect.add_foreign_key(c)

        return await self._create_object(cnx, constraint, "foreign_key_constraints", _build)

    async def get_foreign_key_constraint(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> Optional[DmForeignKeyConstraint]:
        """Return a foreign key by name, None when it does not exist."""
        return await self._object(cnx, schema_name, table_name, "foreign_key_constraints", constraint_name)

    async def get_foreign_key_constraint_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> Optional[DmForeignKeyConstraint]:
        """Return the first foreign key including the given source column."""
        return await self._object_on_column(cnx, schema_name, table_name, "foreign_key_constraints", column_name)

    async def get_foreign_key_constraints(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name_filter: str = None
    ) -> List[DmForeignKeyConstraint]:
        """Return the foreign keys of a table matching a wildcard filter."""
        return await self._objects(cnx, schema_name, table_name, "foreign_key_constraints", constraint_name_filter)

    async def get_foreign_key_constraint_names(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name_filter: str = None
    ) -> List[str]:
        """Return the names of the foreign keys of a table matching a wildcard filter."""
        constraints = await self.get_foreign_key_constraints(cnx, schema_name, table_name, constraint_name_filter)
        return [c.constraint_name for c in constraints]

    async def get_foreign_key_constraint_name_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> Optional[str]:
        """Return the name of the first foreign key including the given source column."""
        constraint = await self.get_foreign_key_constraint_on_column(cnx, schema_name, table_name, column_name)
        return constraint.constraint_name if constraint is not None else None

    def _drop_foreign_key_sql(self, table: DmTable, constraint: DmForeignKeyConstraint) -> Optional[str]:
        return self.dialect.drop_foreign_key(table.schema_name, table.table_name, constraint.constraint_name)

    async def drop_foreign_key_constraint_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, constraint_name: str
    ) -> bool:
        """Drop a foreign key by name, returning False when it does not exist."""
        return await self._drop_object(
            cnx,
            schema_name,
            table_name,
            "foreign_key_constraints",
            self._named(constraint_name),
            self._drop_foreign_key_sql,
        )

    async def drop_foreign_key_constraint_on_column_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Drop the first foreign key including the given source column."""
        return await self._drop_object(
            cnx,
            schema_name,
            table_name,
            "foreign_key_constraints",
            self._on_column(column_name),
            self._drop_foreign_key_sql,
        )

    # Indexes

    async def does_index_exist(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, index_name: str
    ) -> bool:
        """Test whether a table has an index with the given name."""
        return await self.get_index(cnx, schema_name, table_name, index_name) is not None

    async def does_index_exist_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Test whether any index of a table includes the given column."""
        return bool(await self.get_indexes_on_column(cnx, schema_name, table_name, column_name))

    async def create_index_if_not_exists(self, cnx: AsyncConnection, index: DmIndex) -> bool:
        """Create an index, returning False when its table is missing or the name is taken."""

        async def _build(i):
            return self.dialect.create_index(i)

        return await self._create_object(cnx, index, "indexes", _build)

    async def get_index(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, index_name: str
    ) -> Optional[DmIndex]:
        """Return an index by name, None when it does not exist."""
        return await self._object(cnx, schema_name, table_name, "indexes", index_name)

    async def get_indexes(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, index_name_filter: str = None
    ) -> List[DmIndex]:
        """Return the indexes of a table matching a wildcard filter.

        Indexes backing primary keys and unique constraints are not included.
        """
        return await self._objects(cnx, schema_name, table_name, "indexes", index_name_filter)

    async def get_index_names(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, index_name_filter: str = None
    ) -> List[str]:
        """Return the names of the indexes of a table matching a wildcard filter."""
        return [i.index_name for i in await self.get_indexes(cnx, schema_name, table_name, index_name_filter)]

    async def get_indexes_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> List[DmIndex]:
        """Return the indexes including the given column."""
        return await self._objects_on_column(cnx, schema_name, table_name, "indexes", column_name)

    async def get_index_names_on_column(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> List[str]:
        """Return the names of the indexes including the given column."""
        return [i.index_name for i in await self.get_indexes_on_column(cnx, schema_name, table_name, column_name)]

    def _drop_index_sql(self, table: DmTable, index: DmIndex) -> str:
        return self.dialect.drop_index(table.schema_name, table.table_name, index.index_name)

    async def drop_index_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, index_name: str
    ) -> bool:
        """Drop an index by name, returning False when it does not exist."""
        return await self._drop_object(
            cnx, schema_name, table_name, "indexes", self._named(index_name), self._drop_index_sql
        )

    async def drop_indexes_on_column_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str, column_name: str
    ) -> bool:
        """Drop every index including the given column, returning False when there were none."""
        dropped = False
        for index in await self.get_indexes_on_column(cnx, schema_name, table_name, column_name):
            dropped = await self.drop_index_if_exists(cnx, schema_name, table_name, index.index_name) or dropped
        return dropped

    # Views

    async def does_view_exist(self, cnx: AsyncConnection, schema_name: Optional[str], view_name: str) -> bool:
        """Test whether a view exists."""
        view_name = self._name(view_name)
        names = await self.catalog.get_view_names(cnx, self._schema(schema_name), self._like(view_name))
        return any(n.lower() == view_name.lower() for n in names)

    async def create_view_if_not_exists(self, cnx: AsyncConnection, view: DmView) -> bool:
        """Create a view, returning False when it already exists."""
        if await self.does_view_exist(cnx, view.schema_name, view.view_name):
            return False
        view = DmView(self._schema(view.schema_name), self._name(view.view_name), view.definition)
        await executor.execute(cnx, self.dialect.create_view(view))
        return True

    async def get_views(
        self, cnx: AsyncConnection, schema_name: Optional[str] = None, view_name_filter: str = None
    ) -> List[DmView]:
        """Return the views whose names match a wildcard filter, all of them without a filter."""
        name_filter = self.dialect.normalize_filter(view_name_filter)
        views = await self.catalog.get_views(cnx, self._schema(schema_name), self._like(name_filter))
        return [v for v in views if matches_filter(v.view_name, name_filter)]

    async def get_view(self, cnx: AsyncConnection, schema_name: Optional[str], view_name: str) -> Optional[DmView]:
        """Return a view, None when it does not exist."""
        view_name = self._name(view_name)
        views = await self.get_views(cnx, schema_name, view_name)
        return next((v for v in views if v.view_name.lower() == view_name.lower()), None)

    async def get_view_names(
        self, cnx: AsyncConnection, schema_name: Optional[str] = None, view_name_filter: str = None
    ) -> List[str]:
        """Return the names of the views matching a wildcard filter."""
        name_filter = self.dialect.normalize_filter(view_name_filter)
        names = await self.catalog.get_view_names(cnx, self._schema(schema_name), self._like(name_filter))
        return [n for n in names if matches_filter(n, name_filter)]

    async def drop_view_if_exists(self, cnx: AsyncConnection, schema_name: Optional[str], view_name: str) -> bool:
        """Drop a view, returning False when it does not exist."""
        if not await self.does_view_exist(cnx, schema_name, view_name):
            return False
        await executor.execute(cnx, self.dialect.drop_view(self._schema(schema_name), self._name(view_name)))
        return True

    async def rename_view_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], view_name: str, new_view_name: str
    ) -> bool:
        """Rename a view by recreating it under the new name.

        :returns: True when renamed, False when the view does not exist or the new name is taken
        """
        view = await self.get_view(cnx, schema_name, view_name)
        if view is None or await self.does_view_exist(cnx, schema_name, new_view_name):
            return False
        await executor.execute(cnx, self.dialect.drop_view(view.schema_name, view.view_name))
        renamed = DmView(view.schema_name, self._name(new_view_name), view.definition)
        await executor.execute(cnx, self.dialect.create_view(renamed))
        return True

    async def update_view_if_exists(
        self, cnx: AsyncConnection, schema_name: Optional[str], view_name: str, definition: str
    ) -> bool:
        """Replace the definition of a view, returning False when it does not exist."""
        view = await self.get_view(cnx, schema_name, view_name)
        if view is None:
            return False
        await executor.execute(cnx, self.dialect.drop_view(view.schema_name, view.view_name))
        await executor.execute(cnx, self.dialect.create_view(DmView(view.schema_name, view.view_name, definition)))
        return True
