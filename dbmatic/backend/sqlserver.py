"""Implementation of the SQL Server backend using aioodbc."""

import asyncio

from dbmatic.backend.base import AsyncConnection, AsyncConnectionPool
from dbmatic.backend.errors import BackendNotInstalledError, ConnectionPoolClosed
from dbmatic.mung import StaticMungSymbolProvider

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"


class ConnectionAioodbc(AsyncConnection):
    """Async Connection implementation wrapping an aioodbc connection."""

    backend = "mssql"
    _mung_symbol = StaticMungSymbolProvider("?")

    @property
    def mung_symbol(self) -> StaticMungSymbolProvider:  # noqa: D102
        return self._mung_symbol

    async def _cursor(self):
        return await self._cnx.cursor()


class AsyncConnectionPoolAioodbc(AsyncConnectionPool):
    """Async ConnectionPool implementation for aioodbc."""

    def __init__(self, db_url: str):
        """Construct an async connection pool for the given connection URL.

        The db_url is expected to be in the following format::

            "mssql+aioodbc://{username}:{password}@{hostname}:{port}/{db_name}?{optional_args}"

        Supported `optional_args` include:

            * driver, the name of the installed ODBC driver, defaults to "ODBC Driver 18 for SQL Server"
            * trust_server_certificate, a boolean to skip server certificate validation, defaults to False
            * pool_min_conn, an integer specifying the minimum connections to keep in the pool, defaults to 1
            * pool_max_conn, an integer specifying the maximum connections to keep in the pool, defaults to 5

        :param db_url: a url with the described format
        :raises: ConfigurationError, BackendNotInstalledError
        """
        super().__init__(db_url)
        try:
            import aioodbc  # noqa: F401
        except ModuleNotFoundError:  # pragma: no cover
            raise BackendNotInstalledError("Module aioodbc not installed, cannot create async connection pool")
        self._pool_kwargs = self._make_pool_kwargs()
        self._raise_for_unexpected_args()
        self._pool = None
        self._pool_lock = asyncio.Lock()
        self._closed = False

    def _make_dsn(self, dbname: str) -> str:
        driver = self._get_arg("driver", str, DEFAULT_ODBC_DRIVER)
        trust = self._get_arg("trust_server_certificate", bool, False)
        server = self._db_url.hostname
        if self._db_url.port:
            server = f"{server},{self._db_url.port}"
        parts = [
            f"DRIVER={{{driver}}}",
            f"SERVER={server}",
            f"DATABASE={dbname}",
            f"UID={self._db_url.username}",
            f"PWD={self._db_url.password}",
        ]
        if trust:
            parts.append("TrustServerCertificate=yes")
        return ";".join(parts)

    def _make_pool_kwargs(self) -> dict:
        dbname = self._require_db_name()
        pool_min_conn, pool_max_conn = self._get_pool_size_args(default_max=5)
        return {
            "dsn": self._make_dsn(dbname),
            "minsize": pool_min_conn,
            "maxsize": pool_max_conn,
            "autocommit": True,
        }

    async def lease(self) -> ConnectionAioodbc:  # noqa: D102
        if self._closed:
            raise ConnectionPoolClosed("Pool is closed")
        if self._pool is None:
            async with self._pool_lock:
                if self._pool is None:
                    import aioodbc

                    self._pool = await aioodbc.create_pool(**self._pool_kwargs)
        inner_cnx = await self._pool.acquire()
        return ConnectionAioodbc(inner_cnx)

    async def release(self, cnx: ConnectionAioodbc):  # noqa: D102
        await self._pool.release(cnx._cnx)

    async def dispose(self):  # noqa: D102
        self._closed = True
        if self._pool is not None:
            self._pool.close()
            await self._pool.wait_closed()
            self._pool = None
