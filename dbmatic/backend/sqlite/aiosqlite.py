"""Implementation of SQLite backend using aiosqlite."""

from dbmatic.backend.base import AsyncConnection, AsyncConnectionPool
from dbmatic.backend.errors import BackendNotInstalledError
from dbmatic.backend.sqlite.base import ConnectionPoolSQLiteMixin
from dbmatic.mung import StaticMungSymbolProvider


class ConnectionAiosqlite(AsyncConnection):
    """Async Connection implementation wrapping an aiosqlite connection."""

    backend = "sqlite3"
    _mung_symbol = StaticMungSymbolProvider("?")

    @property
    def mung_symbol(self) -> StaticMungSymbolProvider:  # noqa: D102
        return self._mung_symbol

    @property
    def in_transaction(self) -> bool:
        """Whether a transaction is open on the underlying connection."""
        return self._cnx.in_transaction

    async def _cursor(self):
        # aiosqlite's connection.cursor() is a coroutine
        return await self._cnx.cursor()


class AsyncConnectionPoolAiosqlite(ConnectionPoolSQLiteMixin, AsyncConnectionPool):
    """Async ConnectionPool implementation for aiosqlite."""

    def __init__(self, db_url: str):
        """Construct an async connection pool for the given connection URL.

        The db_url is expected to be in the following format::

            "sqlite3+aiosqlite://{filename}?{optional_args}"

        Supported `optional_args` include:

            * timeout, seconds to wait on a locked database, defaults to 5.0

        This is not a real pool; each call to ``lease()`` creates a new connection.

        :param db_url: a url with the described format
        :raises: ConfigurationError, BackendNotInstalledError
        """
        super().__init__(db_url)
        try:
            import aiosqlite  # noqa: F401
        except ModuleNotFoundError:  # pragma: no cover
            raise BackendNotInstalledError("Module aiosqlite not installed, cannot create async connection pool")
        self._cnx_kwargs = self._url_to_cnx_kwargs()
        self._raise_for_unexpected_args()

    async def lease(self) -> ConnectionAiosqlite:  # noqa: D102
        import aiosqlite

        inner_cnx = await aiosqlite.connect(**self._cnx_kwargs)
        return ConnectionAiosqlite(inner_cnx)

    async def release(self, cnx: ConnectionAiosqlite):  # noqa: D102
        await cnx._cnx.close()

    async def dispose(self):  # noqa: D102
        return
