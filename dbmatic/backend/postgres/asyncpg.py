"""Implementation of the PostgreSQL backend using asyncpg."""

import asyncio
import re
import ssl as ssl_module
from contextlib import asynccontextmanager
from typing import List, Tuple

from dbmatic.backend.base import AsyncConnection, ColumnDescriptor
from dbmatic.backend.errors import BackendNotInstalledError
from dbmatic.backend.postgres.base import AsyncConnectionPoolPSQL
from dbmatic.mung import NumberedMungSymbolProvider


class AsyncpgResultSet:
    """Wraps asyncpg query results to conform to the result set interface."""

    def __init__(self, records: list, attributes: tuple):
        """Construct an asyncpg result set.

        :param records: a list of asyncpg Record objects returned from a query
        :param attributes: the attributes from a prepared statement describing result columns
        """
        self._records = list(records)
        self._attributes = attributes
        self._description = None
        self._index = 0

    async def fetchone(self) -> Tuple:
        """Fetch one result tuple from the result set, None once the results are exhausted."""
        if self._index >= len(self._records):
            return None
        record = self._records[self._index]
        self._index += 1
        return tuple(record)

    async def fetchall(self) -> List[Tuple]:
        """Fetch the remaining result tuples from the result set."""
        remaining = self._records[self._index :]  # noqa: E203
        self._index = len(self._records)
        return [tuple(r) for r in remaining]

    @property
    def description(self) -> Tuple[ColumnDescriptor]:
        """Return a sequence of column descriptions representing the result set."""
        if not self._description:
            self._description = tuple(
                ColumnDescriptor(name=attr.name, type_code=attr.type.oid) for attr in self._attributes
            )
        return self._description

    @property
    def rowcount(self) -> int:
        """Return the row count of the result set."""
        return len(self._records)


class ConnectionAsyncpg(AsyncConnection):
    """Async Connection implementation wrapping an asyncpg connection.

    asyncpg has no implicit transactions, so when autocommit is disabled an explicit transaction is
    started on first use and ended by ``commit`` or ``rollback``.
    """

    backend = "postgresql"

    def __init__(self, cnx, auto_commit: bool = True):
        """Construct an asyncpg connection wrapper.

        :param cnx: the underlying asyncpg connection
        :param auto_commit: should calls to execute() be automatically committed, defaults to True
        """
        super().__init__(cnx, auto_commit)
        self._transaction = None

    @property
    def mung_symbol(self) -> NumberedMungSymbolProvider:  # noqa: D102
        return NumberedMungSymbolProvider(1, "$")

    async def _ensure_transaction(self):
        if not self._auto_commit and self._transaction is None:
            self._transaction = self._cnx.transaction()
            await self._transaction.start()

    async def commit(self):
        """Commit the current explicit transaction if one is active."""
        if self._transaction is not None:
            await self._transaction.commit()
            self._transaction = None

    async def rollback(self):
        """Rollback the current explicit transaction if one is active."""
        if self._transaction is not None:
            await self._transaction.rollback()
            self._transaction = None

    @asynccontextmanager
    async def query(self, sql: str, params: tuple = None):
        """Execute the given SQL as a query and provide the results as context.

        :param sql: the SQL statement to execute
        :param params: the values to bind to the execution of the given SQL
        :returns: an async result set representing the query's results
        """
        await self._ensure_transaction()
        stmt = await self._cnx.prepare(sql)
        records = await stmt.fetch(*(params or ()))
        yield AsyncpgResultSet(records, stmt.get_attributes())

    async def execute(self, sql: str, params: tuple = None, commit: bool = None) -> int:
        """Execute the given SQL and return the affected row count.

        :param sql: the SQL statement to execute
        :param params: the values to bind to the execution of the given SQL
        :param commit: commit the changes after execution, defaults to value given in constructor
        """
        commit = commit if commit is not None else self._auto_commit
        await self._ensure_transaction()
        status = await self._cnx.execute(sql, *(params or ()))
        if commit:
            await self.commit()
        return self._parse_status(status)

    @staticmethod
    def _parse_status(status: str) -> int:
        """Extract the affected row count from a status string like "INSERT 0 1", 0 for DDL statuses."""
        match = re.search(r"(\d+)$", status or "")
        return int(match.group(1)) if match else 0


class AsyncConnectionPoolPSQLAsyncpg(AsyncConnectionPoolPSQL):
    """Async ConnectionPool implementation for asyncpg."""

    def __init__(self, db_url: str):
        """Construct an async connection pool for the given connection URL.

        The db_url is expected to be in the following format::

            "postgresql+asyncpg://{username}:{password}@{hostname}:{port}/{db_name}?{optional_args}"

        Supports the common PostgreSQL optional_args (schema, pool_min_conn,
        pool_max_conn, sslmode, sslrootcert).

        :param db_url: a url with the described format
        :raises: ConfigurationError, BackendNotInstalledError
        """
        super().__init__(db_url)
        try:
            import asyncpg  # noqa: F401  pylint: disable=import-outside-toplevel
        except ModuleNotFoundError:  # pragma: no cover
            issue = "Module asyncpg not installed, cannot create async connection pool"
            raise BackendNotInstalledError(issue)
        self._raise_for_unexpected_args()
        self._pool = None
        self._pool_lock = asyncio.Lock()
        self._pool_kwargs = self._make_pool_kwargs()

    def _make_pool_kwargs(self) -> dict:
        kwargs = {
            "database": self._cnx_kwargs["dbname"],
            "user": self._cnx_kwargs["user"],
            "password": self._cnx_kwargs["password"],
            "host": self._cnx_kwargs["host"],
            "port": self._cnx_kwargs["port"],
            "min_size": self._pool_min_conn,
            "max_size": self._pool_max_conn,
            "server_settings": {"search_path": self._search_path},
        }
        ssl_mode = self._cnx_kwargs.get("sslmode")
        ssl_root_cert = self._cnx_kwargs.get("sslrootcert")
        if ssl_mode or ssl_root_cert:
            ctx = ssl_module.create_default_context()
            if ssl_root_cert:
                ctx.load_verify_locations(ssl_root_cert)
            if ssl_mode == "prefer":
                ctx.check_hostname = False
                ctx.verify_mode = ssl_module.CERT_NONE
            kwargs["ssl"] = ctx
        return kwargs

    async def _ensure_pool(self):
        """Create the asyncpg pool on first use, the lock keeps concurrent first leases from creating two pools."""
        if self._pool is not None:
            return
        async with self._pool_lock:
            if self._pool is not None:  # pragma: no cover
                return
            import asyncpg  # pylint: disable=import-outside-toplevel

            self._pool = await asyncpg.create_pool(**self._pool_kwargs)

    async def lease(self) -> ConnectionAsyncpg:  # noqa: D102
        await self._ensure_pool()
        inner_cnx = await self._pool.acquire()
        return ConnectionAsyncpg(inner_cnx)

    async def release(self, cnx: ConnectionAsyncpg):  # noqa: D102
        await self._pool.release(cnx._cnx)

    async def dispose(self):  # noqa: D102
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
