"""Applies the table changes SQLite's ALTER TABLE cannot make by copying the table into a new definition."""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from dbmatic.backend.base import AsyncConnection
from dbmatic.models import DmTable
from dbmatic.providers import executor
from dbmatic.providers.base import TableRebuilder
from dbmatic.providers.errors import ProviderError
from dbmatic.providers.sqlite.catalog import SqliteCatalog
from dbmatic.providers.sqlite.dialect import SqliteDialect

SAVEPOINT = "dbmatic_rebuild"


class SqliteTableRebuilder(TableRebuilder):
    """Rebuilds SQLite tables in a transaction of their own, or within the caller's open transaction.

    The table's rows are parked in a temporary table while the table is dropped and created again, then the
    columns both definitions share are copied back. Any failure rolls the whole rebuild back, and an open
    transaction is left for the caller to commit.
    """

    def __init__(self, dialect: SqliteDialect, catalog: SqliteCatalog):
        """Construct a rebuilder.

        :param dialect: quotes the names in the copy statements
        :param catalog: reads the stored statements a truncated table is created again from
        """
        self.logger = logging.getLogger(__name__)
        self.dialect = dialect
        self.catalog = catalog

    @asynccontextmanager
    async def _foreign_keys_off(self, cnx: AsyncConnection):
        # The pragma is a no-op inside a transaction, it is switched around it
        enabled = await executor.scalar(cnx, "PRAGMA foreign_keys")
        await executor.execute(cnx, "PRAGMA foreign_keys = 0")
        try:
            yield
        finally:
            await executor.execute(cnx, f"PRAGMA foreign_keys = {1 if enabled else 0}")

    async def _run_in_transaction(self, cnx: AsyncConnection, statements: List[str]):
        async with self._foreign_keys_off(cnx):
            await executor.execute(cnx, "BEGIN", commit=False)
            try:
                for statement in statements:
                    await executor.execute(cnx, statement, commit=False)
                await cnx.commit()
            except BaseException:
                await cnx.rollback()
                raise

    async def _run_in_savepoint(self, cnx: AsyncConnection, table_name: str, statements: List[str]):
        """Run the statements within the caller's transaction, leaving its commit or rollback to the caller.

        Enforcement cannot be switched off inside a transaction, so foreign key checks are deferred to the
        caller's commit instead. Dropping the table would still apply the delete actions of the tables that
        reference it, such rebuilds are refused.
        """
        if await executor.scalar(cnx, "PRAGMA foreign_keys"):
            referencing = await self.catalog.get_cascading_references(cnx, table_name)
            if referencing:
                raise ProviderError(
                    f"Cannot rebuild table {table_name} inside a transaction, deleting its rows would change "
                    f"the rows of {', '.join(referencing)}"
                )
            await executor.execute(cnx, "PRAGMA defer_foreign_keys = 1", commit=False)
        await executor.execute(cnx, f"SAVEPOINT {SAVEPOINT}", commit=False)
        try:
            for statement in statements:
                await executor.execute(cnx, statement, commit=False)
        except BaseException:
            await executor.execute(cnx, f"ROLLBACK TO {SAVEPOINT}", commit=False)
            await executor.execute(cnx, f"RELEASE {SAVEPOINT}", commit=False)
            raise
        await executor.execute(cnx, f"RELEASE {SAVEPOINT}", commit=False)

    async def _run(self, cnx: AsyncConnection, table_name: str, statements: List[str]):
        if getattr(cnx, "in_transaction", False):
            self.logger.debug("Rebuilding table %s within the open transaction", table_name)
            await self._run_in_savepoint(cnx, table_name, statements)
        else:
            await self._run_in_transaction(cnx, statements)

    async def rebuild(self, cnx: AsyncConnection, current: DmTable, desired: DmTable, create_statements: List[str]):
        """Replace a table with a new definition, keeping the data of the columns both definitions share.

        :param cnx: the connection to run on
        :param current: the table as it exists
        :param desired: the table as it should be
        :param create_statements: the statements creating the desired table and its indexes
        """
        q = self.dialect.quote
        table = q(current.table_name)
        temp = q(f"{current.table_name}_dbmatic_tmp")
        shared = [q(c.column_name) for c in current.columns if desired.get_column(c.column_name) is not None]
        statements = [f"CREATE TEMP TABLE {temp} AS SELECT * FROM {table}", f"DROP TABLE {table}"]
        statements += create_statements
        if shared:
            columns = ", ".join(shared)
            statements.append(f"INSERT INTO {q(desired.table_name)} ({columns}) SELECT {columns} FROM {temp}")
        statements.append(f"DROP TABLE {temp}")
        self.logger.debug("Rebuilding table %s with %d statement(s)", current.table_name, len(statements))
        await self._run(cnx, current.table_name, statements)

    async def truncate(self, cnx: AsyncConnection, schema_name: Optional[str], table_name: str):
        """Remove every row of a table by dropping it and creating it again from its stored statements.

        Recreating the table also resets its AUTOINCREMENT counter.
        """
        table_sql = await self.catalog.get_table_sql(cnx, table_name)
        if not table_sql:
            return
        index_sql = await self.catalog.get_index_sql(cnx, table_name)
        await self._run(cnx, table_name, [f"DROP TABLE {self.dialect.quote(table_name)}", table_sql] + index_sql)
