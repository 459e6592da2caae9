"""Tests for selecting provider methods from a connection."""

from dbmatic.models import ProviderType
from dbmatic.providers import MethodsFactory, MethodsRegistry, UnsupportedConnectionError, create_default_registry

import pytest

from tests.mocks import MockConnection, mock_methods


@pytest.mark.parametrize(
    "backend, ex_provider",
    [
        ("postgresql", ProviderType.POSTGRESQL),
        ("mssql", ProviderType.SQLSERVER),
        ("mysql", ProviderType.MYSQL),
        ("mariadb", ProviderType.MYSQL),
        ("MariaDB", ProviderType.MYSQL),
        ("sqlite3", ProviderType.SQLITE),
    ],
)
def test_default_registry_dispatch(backend: str, ex_provider: ProviderType):
    """Tests the default registry picks the provider matching a connection's backend."""
    registry = create_default_registry()
    methods = registry.get_methods(MockConnection(backend))
    assert methods.provider_type is ex_provider
    assert registry.get_methods(MockConnection(backend)) is methods


def test_sqlite_methods_rebuild():
    """Tests the SQLite methods come with a table rebuilder, the others without one."""
    registry = create_default_registry()
    assert registry.get_methods(MockConnection("sqlite3")).rebuilder is not None
    assert registry.get_methods(MockConnection("postgresql")).rebuilder is None


def test_unsupported_connection():
    """Tests a connection no provider accepts is rejected."""
    with pytest.raises(UnsupportedConnectionError, match="oracle"):
        create_default_registry().get_methods(MockConnection("oracle"))
    with pytest.raises(UnsupportedConnectionError):
        create_default_registry().get_methods(object())


def test_register_replaces_in_place():
    """Tests registering a name again replaces its factory without moving it."""
    registry = create_default_registry()
    assert registry.names() == ["postgresql", "sqlserver", "mysql", "sqlite"]
    replacement, _, _ = mock_methods(ProviderType.MYSQL)
    registry.register("mysql", MethodsFactory(("mysql",), lambda: replacement))
    assert registry.names() == ["postgresql", "sqlserver", "mysql", "sqlite"]
    assert registry.get_methods(MockConnection("mysql")) is replacement
    with pytest.raises(UnsupportedConnectionError):
        registry.get_methods(MockConnection("mariadb"))


def test_first_accepting_factory_wins():
    """Tests factories are asked in registration order."""
    first, _, _ = mock_methods(ProviderType.POSTGRESQL)
    second, _, _ = mock_methods(ProviderType.POSTGRESQL)
    registry = MethodsRegistry()
    registry.register("first", MethodsFactory(("postgresql",), lambda: first))
    registry.register("second", MethodsFactory(("postgresql",), lambda: second))
    assert registry.get_methods(MockConnection("postgresql")) is first
    assert registry.unregister("first")
    assert not registry.unregister("first")
    assert registry.get_methods(MockConnection("postgresql")) is second


def test_factory_builds_once():
    """Tests a factory calls its builder on first use only."""
    calls = []

    def _build():
        calls.append(1)
        return mock_methods(ProviderType.SQLITE)[0]

    factory = MethodsFactory(("sqlite3",), _build)
    assert factory.get_methods() is factory.get_methods()
    assert len(calls) == 1
    assert factory.supports_connection(MockConnection("SQLITE3"))
    assert not factory.supports_connection(MockConnection("postgresql"))
