"""SQL Server provider."""

from dbmatic.models import ProviderType
from dbmatic.providers.base import DatabaseMethods
from dbmatic.providers.sqlserver.catalog import SqlServerCatalog
from dbmatic.providers.sqlserver.dialect import SqlServerDialect
from dbmatic.types import create_type_map


def create_methods() -> DatabaseMethods:
    """Build the SQL Server methods."""
    dialect = SqlServerDialect()
    type_map = create_type_map(ProviderType.SQLSERVER)
    return DatabaseMethods(dialect, SqlServerCatalog(dialect, type_map), type_map)


__all__ = ["SqlServerCatalog", "SqlServerDialect", "create_methods"]
