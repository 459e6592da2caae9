"""MySQL and MariaDB provider."""

from dbmatic.models import ProviderType
from dbmatic.providers.base import DatabaseMethods
from dbmatic.providers.mysql.catalog import MySqlCatalog
from dbmatic.providers.mysql.dialect import MySqlDialect
from dbmatic.types import create_type_map


def create_methods() -> DatabaseMethods:
    """Build the MySQL methods, shared by MariaDB connections."""
    dialect = MySqlDialect()
    type_map = create_type_map(ProviderType.MYSQL)
    return DatabaseMethods(dialect, MySqlCatalog(dialect, type_map), type_map)


__all__ = ["MySqlCatalog", "MySqlDialect", "create_methods"]
