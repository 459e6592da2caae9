"""Shared base classes for SQLite backends."""

import os.path

from dbmatic.backend.errors import ConfigurationError

MEMORY_DATABASE = ":memory:"


class ConnectionPoolSQLiteMixin:
    """Mixin providing shared SQLite URL parsing and connection kwargs construction."""

    def _url_to_cnx_kwargs(self):
        """Parse the URL and construct connection keyword arguments.

        ``sqlite3+aiosqlite://:memory:`` opens a private in-memory database for each lease.

        :returns: a dictionary of connection keyword arguments
        :raises: ConfigurationError
        """
        location = self._db_url.netloc + self._db_url.path
        if location in ("", "/", MEMORY_DATABASE, f"/{MEMORY_DATABASE}"):
            database = MEMORY_DATABASE
        else:
            database = os.path.abspath(os.path.expanduser(location))
        timeout = self._get_arg("timeout", float, 5.0)
        if timeout < 0:
            raise ConfigurationError("The timeout must be zero or greater")
        return {"database": database, "timeout": timeout}
