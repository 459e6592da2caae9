"""PostgreSQL provider."""

from dbmatic.models import ProviderType
from dbmatic.providers.base import DatabaseMethods
from dbmatic.providers.postgres.catalog import PostgresCatalog
from dbmatic.providers.postgres.dialect import PostgresDialect
from dbmatic.types import create_type_map


def create_methods() -> DatabaseMethods:
    """Build the PostgreSQL methods."""
    dialect = PostgresDialect()
    type_map = create_type_map(ProviderType.POSTGRESQL)
    return DatabaseMethods(dialect, PostgresCatalog(dialect, type_map), type_map)


__all__ = ["PostgresCatalog", "PostgresDialect", "create_methods"]
