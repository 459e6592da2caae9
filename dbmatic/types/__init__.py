"""Bidirectional mapping between host (Python) types and provider SQL types."""

from typing import Union

from dbmatic.models.enums import ProviderType
from dbmatic.types.base import ProviderTypeMap
from dbmatic.types.converters import TypeConverter
from dbmatic.types.descriptors import HostTypeDescriptor, HostTypeKind, SqlTypeDescriptor
from dbmatic.types.mysql import MySqlTypeMap
from dbmatic.types.postgres import PostgresTypeMap
from dbmatic.types.sqlite import SqliteTypeMap
from dbmatic.types.sqlserver import SqlServerTypeMap

_TYPE_MAP_CLASSES = {
    ProviderType.POSTGRESQL: PostgresTypeMap,
    ProviderType.SQLSERVER: SqlServerTypeMap,
    ProviderType.MYSQL: MySqlTypeMap,
    ProviderType.SQLITE: SqliteTypeMap,
}


def create_type_map(provider: Union[ProviderType, str], freeze: bool = True) -> ProviderTypeMap:
    """Build the type map for the given provider.

    :param provider: the provider, as a ProviderType or its value (e.g. ``"postgresql"``)
    :param freeze: freeze the map after the provider's converters are registered, defaults to True
    :returns: a new ``ProviderTypeMap`` for the provider
    :raises ValueError: if the provider is not supported
    """
    try:
        provider = ProviderType(provider)
    except ValueError as x:
        raise ValueError(f"Unsupported provider for type mapping: '{provider}'") from x
    return _TYPE_MAP_CLASSES[provider](freeze=freeze)


__all__ = [
    "HostTypeDescriptor",
    "HostTypeKind",
    "MySqlTypeMap",
    "PostgresTypeMap",
    "ProviderTypeMap",
    "SqlServerTypeMap",
    "SqlTypeDescriptor",
    "SqliteTypeMap",
    "TypeConverter",
    "create_type_map",
]
