"""Implementation of the PostgreSQL backend using psycopg (v3) and its async pool."""

from dbmatic.backend.errors import BackendNotInstalledError
from dbmatic.backend.postgres.base import AsyncConnectionPSQL, AsyncConnectionPoolPSQL


class AsyncConnectionPoolPSQLPsycopg3(AsyncConnectionPoolPSQL):
    """Async ConnectionPool implementation for psycopg (v3)."""

    def __init__(self, db_url: str):
        """Construct an async connection pool for the given connection URL.

        The db_url is expected to be in the following format::

            "postgresql+psycopg://{username}:{password}@{hostname}:{port}/{db_name}?{optional_args}"

        Supports the common PostgreSQL optional_args (schema, pool_min_conn,
        pool_max_conn, sslmode, sslrootcert).

        :param db_url: a url with the described format
        :raises: ConfigurationError, BackendNotInstalledError
        """
        super().__init__(db_url)
        try:
            import psycopg_pool  # pylint: disable=import-outside-toplevel
        except ModuleNotFoundError:  # pragma: no cover
            issue = "Module psycopg-pool not installed, cannot create async connection pool"
            raise BackendNotInstalledError(issue)
        self._raise_for_unexpected_args()
        self._pool = psycopg_pool.AsyncConnectionPool(
            min_size=self._pool_min_conn,
            max_size=self._pool_max_conn,
            kwargs=self._cnx_kwargs,
            open=False,
        )

    async def _open_pool(self):
        if self._pool.closed:
            await self._pool.open()

    async def lease(self) -> AsyncConnectionPSQL:  # noqa: D102
        await self._open_pool()
        inner_cnx = await self._pool.getconn()
        return AsyncConnectionPSQL(inner_cnx)

    async def release(self, cnx: AsyncConnectionPSQL):  # noqa: D102
        await self._pool.putconn(cnx._cnx)

    async def dispose(self):  # noqa: D102
        if not self._pool.closed:
            await self._pool.close()
