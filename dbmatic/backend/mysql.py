"""Implementation of the MySQL / MariaDB backend using aiomysql."""

import asyncio

from dbmatic.backend.base import AsyncConnection, AsyncConnectionPool
from dbmatic.backend.errors import BackendNotInstalledError, ConnectionPoolClosed
from dbmatic.mung import StaticMungSymbolProvider


class ConnectionAiomysql(AsyncConnection):
    """Async Connection implementation wrapping an aiomysql connection."""

    backend = "mysql"
    _mung_symbol = StaticMungSymbolProvider("%s")

    @property
    def mung_symbol(self) -> StaticMungSymbolProvider:  # noqa: D102
        return self._mung_symbol

    async def _cursor(self):
        return await self._cnx.cursor()


class ConnectionAiomysqlMariaDB(ConnectionAiomysql):
    """Async Connection implementation for MariaDB servers reached through aiomysql."""

    backend = "mariadb"


class AsyncConnectionPoolAiomysql(AsyncConnectionPool):
    """Async ConnectionPool implementation for aiomysql, serving MySQL and MariaDB."""

    def __init__(self, db_url: str):
        """Construct an async connection pool for the given connection URL.

        The db_url is expected to be in the following format::

            "mysql+aiomysql://{username}:{password}@{hostname}:{port}/{db_name}?{optional_args}"

        A ``mariadb`` scheme yields connections reporting the ``mariadb`` backend. Supported `optional_args`:

            * pool_min_conn, an integer specifying the minimum connections to keep in the pool, defaults to 1
            * pool_max_conn, an integer specifying the maximum connections to keep in the pool, defaults to 5
            * charset, the connection character set, defaults to "utf8mb4"

        :param db_url: a url with the described format
        :raises: ConfigurationError, BackendNotInstalledError
        """
        super().__init__(db_url)
        try:
            import aiomysql  # noqa: F401
        except ModuleNotFoundError:  # pragma: no cover
            raise BackendNotInstalledError("Module aiomysql not installed, cannot create async connection pool")
        backend = self._db_url.scheme.split("+")[0]
        self._cnx_class = ConnectionAiomysqlMariaDB if backend == "mariadb" else ConnectionAiomysql
        self._pool_kwargs = self._make_pool_kwargs()
        self._raise_for_unexpected_args()
        self._pool = None
        self._pool_lock = asyncio.Lock()
        self._closed = False

    def _make_pool_kwargs(self) -> dict:
        dbname = self._require_db_name()
        pool_min_conn, pool_max_conn = self._get_pool_size_args(default_max=5)
        return {
            "db": dbname,
            "user": self._db_url.username,
            "password": self._db_url.password or "",
            "host": self._db_url.hostname,
            "port": self._db_url.port or 3306,
            "minsize": pool_min_conn,
            "maxsize": pool_max_conn,
            "charset": self._get_arg("charset", str, "utf8mb4"),
            "autocommit": True,
        }

    async def lease(self) -> ConnectionAiomysql:  # noqa: D102
        if self._closed:
            raise ConnectionPoolClosed("Pool is closed")
        if self._pool is None:
            async with self._pool_lock:
                if self._pool is None:
                    import aiomysql

                    self._pool = await aiomysql.create_pool(**self._pool_kwargs)
        inner_cnx = await self._pool.acquire()
        return self._cnx_class(inner_cnx)

    async def release(self, cnx: ConnectionAiomysql):  # noqa: D102
        await self._pool.release(cnx._cnx)

    async def dispose(self):  # noqa: D102
        self._closed = True
        if self._pool is not None:
            self._pool.close()
            await self._pool.wait_closed()
            self._pool = None
