"""Provider methods: the DDL and introspection engine and its per provider dialects and catalogs."""

from dbmatic.providers.alteration import AlterationStep, AlterationStepKind, TableAlteration
from dbmatic.providers.base import DatabaseMethods, TableRebuilder
from dbmatic.providers.catalog import Catalog
from dbmatic.providers.dialect import Dialect
from dbmatic.providers.errors import (
    ProviderError,
    TableParseError,
    UnmappedTypeError,
    UnsupportedConnectionError,
    ViewDefinitionError,
)
from dbmatic.providers.executor import get_last_sql, get_last_sql_params
from dbmatic.providers.registry import MethodsFactory, MethodsRegistry, create_default_registry
from dbmatic.providers.version import DatabaseVersion

__all__ = [
    "AlterationStep",
    "AlterationStepKind",
    "Catalog",
    "DatabaseMethods",
    "DatabaseVersion",
    "Dialect",
    "MethodsFactory",
    "MethodsRegistry",
    "ProviderError",
    "TableAlteration",
    "TableParseError",
    "TableRebuilder",
    "UnmappedTypeError",
    "UnsupportedConnectionError",
    "ViewDefinitionError",
    "create_default_registry",
    "get_last_sql",
    "get_last_sql_params",
]
