"""SQLite provider."""

from dbmatic.models import ProviderType
from dbmatic.providers.base import DatabaseMethods
from dbmatic.providers.sqlite.catalog import SqliteCatalog
from dbmatic.providers.sqlite.dialect import SqliteDialect
from dbmatic.providers.sqlite.parser import CreateTableParser
from dbmatic.providers.sqlite.rebuild import SqliteTableRebuilder
from dbmatic.types import create_type_map


def create_methods() -> DatabaseMethods:
    """Build the SQLite methods."""
    dialect = SqliteDialect()
    type_map = create_type_map(ProviderType.SQLITE)
    catalog = SqliteCatalog(dialect, type_map)
    return DatabaseMethods(dialect, catalog, type_map, SqliteTableRebuilder(dialect, catalog))


__all__ = ["CreateTableParser", "SqliteCatalog", "SqliteDialect", "SqliteTableRebuilder", "create_methods"]
