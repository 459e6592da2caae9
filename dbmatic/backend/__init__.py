"""Functionality abstracting the primitive async database backend interface."""

from urllib.parse import urlparse

from dbmatic.backend.base import AsyncConnection, AsyncConnectionPool, AsyncResultSet
from dbmatic.backend.errors import ConfigurationError, UnsupportedBackendError
from dbmatic.backend.mysql import AsyncConnectionPoolAiomysql
from dbmatic.backend.postgres import AsyncConnectionPoolPSQLAsyncpg, AsyncConnectionPoolPSQLPsycopg3
from dbmatic.backend.sqlite import AsyncConnectionPoolAiosqlite
from dbmatic.backend.sqlserver import AsyncConnectionPoolAioodbc

ENGINE_DEFAULTS = {
    "postgresql": "asyncpg",
    "sqlite3": "aiosqlite",
    "mysql": "aiomysql",
    "mariadb": "aiomysql",
    "mssql": "aioodbc",
}

_POOL_CLASSES = {
    ("postgresql", "asyncpg"): AsyncConnectionPoolPSQLAsyncpg,
    ("postgresql", "psycopg"): AsyncConnectionPoolPSQLPsycopg3,
    ("sqlite3", "aiosqlite"): AsyncConnectionPoolAiosqlite,
    ("mysql", "aiomysql"): AsyncConnectionPoolAiomysql,
    ("mariadb", "aiomysql"): AsyncConnectionPoolAiomysql,
    ("mssql", "aioodbc"): AsyncConnectionPoolAioodbc,
}


def create_connection_pool(db_url: str) -> AsyncConnectionPool:
    """Create an async connection pool for the given database connection URL.

    The db_url is expected to be in the following format::

        "{db_backend}+{driver}://{username}:{password}@{hostname}:{port}/{db_name}"

    With different db_backends / drivers supporting additional arguments. When the driver is omitted the
    default engine for the backend is used.

    :returns: An async connection pool based on the given database URL.
    :raises: ConfigurationError, UnsupportedBackendError
    """
    parsed_url = urlparse(db_url)
    backend = parsed_url.scheme
    if not backend:
        raise ConfigurationError("No database backend specified")
    backend = backend.split("+")
    engine = ENGINE_DEFAULTS.get(backend[0]) if len(backend) == 1 else backend[1]
    pool_class = _POOL_CLASSES.get((backend[0], engine))
    if pool_class is None:
        raise UnsupportedBackendError(f"The backend+engine '{parsed_url.scheme}' is not supported")
    return pool_class(db_url)


__all__ = [
    "AsyncConnection",
    "AsyncConnectionPool",
    "AsyncResultSet",
    "ENGINE_DEFAULTS",
    "create_connection_pool",
    "errors",
]
