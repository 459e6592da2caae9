"""Defines a thin async wrapper over DB API 2.0 style drivers, the connection abstraction DDL runs through."""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import List, Tuple
from urllib.parse import parse_qs, urlparse

from dbmatic.backend.errors import ConfigurationError
from dbmatic.mung import MungSymbolProvider


@dataclass
class ColumnDescriptor:
    """Describes a column in a result set."""

    name: str
    type_code: int
    display_size: int = None
    internal_size: int = None
    precision: int = None
    scale: int = None
    null_ok: bool = None


class AsyncResultSet:
    """Result set (a.k.a rows) returned from a query, wrapping an async DB API 2.0 style cursor."""

    def __init__(self, cursor):
        """Construct a result set.

        :param cursor: the underlying async cursor being wrapped by this object.
        """
        self._cursor = cursor
        self._description = None

    async def fetchone(self) -> Tuple:
        """Fetch one result tuple from the underlying cursor.

        If no results are left, None is returned.

        :returns: a tuple representing a result row or None
        """
        row = await self._cursor.fetchone()
        return tuple(row) if row is not None else None

    async def fetchall(self) -> List[Tuple]:
        """Fetch the *remaining* result tuples from the underlying cursor.

        If no results are left, an empty list is returned.

        :returns: a list of tuples that are the remaining results of the underlying cursor.
        """
        return [tuple(r) for r in await self._cursor.fetchall()]

    @property
    def description(self) -> Tuple[ColumnDescriptor]:
        """Return a sequence of column descriptions representing the result set.

        :returns: a tuple of ColumnDescriptors
        """
        if not self._description:
            self._description = tuple([ColumnDescriptor(*(tuple(d)[0:7])) for d in self._cursor.description])
        return self._description

    @property
    def rowcount(self) -> int:
        """Return the row count of the result set.

        :returns: the integer count of the rows in the result set
        """
        return self._cursor.rowcount


class AsyncConnection(ABC):
    """Basic interface definition for an async database connection.

    ``backend`` names the database family the connection talks to (e.g. "postgresql") and is what
    provider dispatch keys on, so wrappers around a connection should expose the wrapped value.
    """

    backend: str = None

    def __init__(self, cnx, auto_commit: bool = True):
        """Construct an AsyncConnection object.

        :param cnx: the inner driver connection this object wraps
        :param auto_commit: should calls to execute() be automatically committed, defaults to True
        """
        self.logger = logging.getLogger(__name__)
        self._cnx = cnx
        self._auto_commit = auto_commit

    @property
    def autocommit(self):
        """Whether commit is called after every call to execute(...)."""
        return self._auto_commit

    @autocommit.setter
    def autocommit(self, value: bool):
        self._auto_commit = value

    @property
    @abstractmethod
    def mung_symbol(self) -> MungSymbolProvider:
        """Return a fresh provider of the bound parameter placeholders this connection's driver expects."""
        pass  # pragma: no cover

    async def commit(self):
        """Commit changes for this connection / transaction to the database."""
        await self._cnx.commit()

    async def rollback(self):
        """Rollback changes for this connection / transaction to the database."""
        await self._cnx.rollback()

    async def _cursor(self):
        return self._cnx.cursor()

    async def _execute(self, cursor, sql: str, params: tuple = None):
        if params:
            await cursor.execute(sql, params)
            return
        await cursor.execute(sql)

    @asynccontextmanager
    async def query(self, sql: str, params: tuple = None):
        """Execute the given SQL as a statement with the given parameters. Provide the results as context.

        :param sql: the SQL statement to execute
        :param params: the values to bind to the execution of the given SQL
        :returns: an async result set representing the query's results
        """
        cursor = await self._cursor()
        try:
            await self._execute(cursor, sql, params)
            yield AsyncResultSet(cursor)
        finally:
            await cursor.close()

    async def execute(self, sql: str, params: tuple = None, commit: bool = None) -> int:
        """Execute the given SQL as a statement with the given parameters and return the affected row count.

        :param sql: the SQL statement to execute
        :param params: the values to bind to the execution of the given SQL
        :param commit: commit the changes to the database after execution, defaults to value given in constructor
        """
        commit = commit if commit is not None else self._auto_commit
        cursor = await self._cursor()
        try:
            await self._execute(cursor, sql, params)
            affected = cursor.rowcount
        finally:
            await cursor.close()
        if commit:
            await self.commit()
        return affected


class AsyncConnectionPool(ABC):
    """Basic interface definition for a pool of async database connections."""

    def __init__(self, db_url: str):
        """Construct a connection pool for the given connection URL.

        The db_url is expected to be in the following format::

            "{backend}+{driver}://{username}:{password}@{hostname}:{port}/{db_name}?{optional_args}"

        :param db_url: a url with the described format
        """
        self.logger = logging.getLogger(__name__)
        self._raw_db_url = db_url
        self._db_url = urlparse(self._raw_db_url)
        self._args = parse_qs(self._db_url.query, keep_blank_values=True)

    @staticmethod
    def _strict_bool(value: str):
        if value.lower() not in ["true", "false"]:
            raise ValueError(f"Cannot cast '{value}' to bool")
        return value.lower() == "true"

    def _raise_for_unexpected_args(self):
        unexpected = ",".join(self._args.keys())
        if unexpected:
            raise ConfigurationError(f"Unexpected argument(s): {unexpected}")

    def _get_arg(self, name: str, expected_type, default=None):
        if name not in self._args:
            self.logger.debug(f"No '{name}' specified, defaulting to {default}")
            return default
        caster = expected_type if expected_type is not bool else self._strict_bool
        try:
            if caster != list:
                if len(self._args.get(name)) != 1:
                    raise ConfigurationError(f"Invalid argument '{name}': only a single value must be specified")
                return caster(self._args.pop(name)[0])
            return self._args.pop(name)
        except ValueError as x:
            raise ConfigurationError(f"Invalid argument '{name}': must be {expected_type.__name__}") from x

    def _get_pool_size_args(self, default_min: int = 1, default_max: int = None) -> Tuple[int, int]:
        pool_min_conn = self._get_arg("pool_min_conn", int, default_min)
        pool_max_conn = self._get_arg("pool_max_conn", int, max(pool_min_conn, default_max or pool_min_conn))
        if pool_min_conn <= 0 or pool_max_conn <= 0:
            raise ConfigurationError("The pool_max_conn and pool_min_conn must be greater than 0")
        if pool_max_conn < pool_min_conn:
            raise ConfigurationError("The argument pool_max_conn must be greater or equal to pool_min_conn")
        return pool_min_conn, pool_max_conn

    def _require_db_name(self) -> str:
        dbname = self._db_url.path.strip("/")
        if not dbname:
            raise ConfigurationError("Database name is required but missing")
        return dbname

    @abstractmethod
    async def lease(self) -> AsyncConnection:
        """Lease a connection from the underlying pool."""
        pass  # pragma: no cover

    @abstractmethod
    async def release(self, cnx: AsyncConnection):
        """Release a connection back to the underlying pool."""
        pass  # pragma: no cover

    @abstractmethod
    async def dispose(self):
        """Close the pool and clean up any resources it was using."""
        pass  # pragma: no cover

    @asynccontextmanager
    async def connection(self):
        """Lease a connection for the duration of the context and release it afterwards."""
        cnx = await self.lease()
        try:
            yield cnx
        finally:
            await self.release(cnx)
