"""Helpful fixtures shared by the dbmatic tests."""

import uuid

from dbmatic.models import ProviderType

import pytest

from tests.mocks import mock_methods


@pytest.fixture()
def rand_db_name() -> str:
    """Generate a random database name."""
    return f"test_{str(uuid.uuid4()).replace('-', '')}"


@pytest.fixture()
def tmp_sqlite3_db_url(tmpdir, rand_db_name) -> str:
    """Provide a DB Connection Pool URL for a temporary sqlite database."""
    yield f"sqlite3://{tmpdir}/{rand_db_name}.db"


@pytest.fixture()
def mocked_provider(request):
    """Fixture that yields provider methods reading a mock catalog, the catalog, and a mock connection.

    .. note::
        Use the `indirect` parametrize functionality to specify the ProviderType, defaults to PostgreSQL.
    """
    provider = getattr(request, "param", ProviderType.POSTGRESQL)
    yield mock_methods(provider)
