"""Selects the provider methods for a connection."""

import logging
import threading
from typing import Callable, Iterable, List, Tuple

from dbmatic.backend.base import AsyncConnection
from dbmatic.providers.base import DatabaseMethods
from dbmatic.providers.errors import UnsupportedConnectionError


class MethodsFactory:
    """Builds the methods of one provider and recognizes the connections they apply to.

    A connection is recognized by its ``backend`` attribute. The methods are built once, on first use.
    """

    def __init__(self, backends: Iterable[str], builder: Callable[[], DatabaseMethods]):
        """Construct a factory.

        :param backends: the connection backend names the provider handles, e.g. ``("mysql", "mariadb")``
        :param builder: a callable returning the provider's methods
        """
        self.backends = tuple(b.lower() for b in backends)
        self._builder = builder
        self._methods = None
        self._lock = threading.Lock()

    def supports_connection(self, cnx: AsyncConnection) -> bool:  # noqa: D102
        backend = getattr(cnx, "backend", None)
        return isinstance(backend, str) and backend.lower() in self.backends

    def get_methods(self) -> DatabaseMethods:  # noqa: D102
        with self._lock:
            if self._methods is None:
                self._methods = self._builder()
            return self._methods


class MethodsRegistry:
    """An ordered set of named method factories, the first factory accepting a connection wins."""

    def __init__(self):
        """Construct an empty registry."""
        self.logger = logging.getLogger(__name__)
        self._factories: List[Tuple[str, MethodsFactory]] = []
        self._lock = threading.Lock()

    def register(self, name: str, factory: MethodsFactory):
        """Register a factory under a name.

        Registering a name again replaces the earlier factory, keeping its place in the evaluation order.

        :param name: the registration's name
        :param factory: the factory
        """
        with self._lock:
            for i, (existing, _) in enumerate(self._factories):
                if existing == name:
                    self._factories[i] = (name, factory)
                    return
            self._factories.append((name, factory))

    def unregister(self, name: str) -> bool:
        """Remove a registration, returning False when there was none with the name."""
        with self._lock:
            remaining = [(n, f) for n, f in self._factories if n != name]
            removed = len(remaining) != len(self._factories)
            self._factories = remaining
            return removed

    def names(self) -> List[str]:
        """Return the registered names in evaluation order."""
        with self._lock:
            return [n for n, _ in self._factories]

    def get_methods(self, cnx: AsyncConnection) -> DatabaseMethods:
        """Return the methods of the first registered provider that accepts the connection.

        :param cnx: the connection
        :returns: the provider's methods
        :raises: UnsupportedConnectionError
        """
        with self._lock:
            factories = list(self._factories)
        for name, factory in factories:
            if factory.supports_connection(cnx):
                self.logger.debug("Using %s methods for %s", name, type(cnx).__name__)
                return factory.get_methods()
        backend = getattr(cnx, "backend", None)
        raise UnsupportedConnectionError(f"No provider methods registered for {type(cnx).__name__} (backend {backend})")


def create_default_registry() -> MethodsRegistry:
    """Return a registry with the PostgreSQL, SQL Server, MySQL and SQLite providers registered."""
    from dbmatic.providers.mysql import create_methods as create_mysql  # pylint: disable=import-outside-toplevel
    from dbmatic.providers.postgres import create_methods as create_postgres  # pylint: disable=import-outside-toplevel
    from dbmatic.providers.sqlite import create_methods as create_sqlite  # pylint: disable=import-outside-toplevel
    from dbmatic.providers.sqlserver import (  # pylint: disable=import-outside-toplevel
        create_methods as create_sqlserver,
    )

    registry = MethodsRegistry()
    registry.register("postgresql", MethodsFactory(("postgresql",), create_postgres))
    registry.register("sqlserver", MethodsFactory(("mssql", "sqlserver"), create_sqlserver))
    registry.register("mysql", MethodsFactory(("mysql", "mariadb"), create_mysql))
    registry.register("sqlite", MethodsFactory(("sqlite3", "sqlite"), create_sqlite))
    return registry
