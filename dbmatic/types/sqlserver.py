"""Type map for Microsoft SQL Server."""

import datetime
import uuid
from decimal import Decimal
from xml.etree.ElementTree import Element

from dbmatic.models.enums import ProviderType
from dbmatic.types.base import ProviderTypeMap
from dbmatic.types.defaults import MAX_LENGTH
from dbmatic.types.descriptors import HostTypeDescriptor, HostTypeKind, SqlTypeDescriptor
from dbmatic.types.helpers import (
    create_binary_type,
    create_datetime_type,
    create_decimal_type,
    create_enum_string_type,
    create_geometry_type,
    create_string_type,
    to_host,
    to_sql,
)
from dbmatic.types.hosts import (
    Float32,
    GEOMETRY_TYPE_NAMES,
    Int16,
    Int64,
    Int8,
    OffsetDateTime,
    UInt16,
    UInt32,
    UInt64,
    UInt8,
)


def _text(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
    is_unicode = descriptor.is_unicode is not False
    prefix = "n" if is_unicode else ""
    if descriptor.is_fixed_length and (descriptor.length or 0) < MAX_LENGTH:
        return create_string_type(f"{prefix}char", descriptor.length, is_unicode=is_unicode, is_fixed_length=True)
    return create_string_type(f"{prefix}varchar", descriptor.length, is_unicode=is_unicode)


def _binary(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
    if descriptor.is_fixed_length and descriptor.length and descriptor.length < MAX_LENGTH:
        return create_binary_type("binary", descriptor.length, is_fixed_length=True)
    return create_binary_type("varbinary", descriptor.length or MAX_LENGTH)


def _json_text(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
    return create_string_type("nvarchar", MAX_LENGTH, is_unicode=True)


def _datetime(name: str):
    def convert(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
        return create_datetime_type(name, descriptor.precision)

    return convert


class SqlServerTypeMap(ProviderTypeMap):
    """Maps host types to SQL Server types, storing documents and arrays as JSON in ``nvarchar(max)``."""

    provider_type = ProviderType.SQLSERVER

    def register_converters(self):  # noqa: D102
        self.register_host_converter(bool, to_sql("bit"))
        self.register_host_converter([Int8, UInt8], to_sql("tinyint"))
        self.register_host_converter([Int16, UInt16], to_sql("smallint"))
        self.register_host_converter([int, UInt32], to_sql("int"))
        self.register_host_converter([Int64, UInt64], to_sql("bigint"))
        self.register_host_converter(Float32, to_sql("real"))
        self.register_host_converter(float, to_sql("float"))
        self.register_host_converter(Decimal, lambda d: create_decimal_type("decimal", d.precision, d.scale))
        self.register_host_converter(str, _text)
        self.register_host_converter(uuid.UUID, to_sql("uniqueidentifier"))
        self.register_host_converter(OffsetDateTime, _datetime("datetimeoffset"))
        self.register_host_converter(datetime.datetime, to_sql("datetime"))
        self.register_host_converter(datetime.date, to_sql("date"))
        self.register_host_converter([datetime.time, datetime.timedelta], _datetime("time"))
        self.register_host_converter([bytes, bytearray, memoryview], _binary)
        self.register_host_converter(Element, to_sql("xml"))
        self.register_host_converter(object, to_sql("sql_variant"))
        self.register_host_converter(list(GEOMETRY_TYPE_NAMES), lambda d: create_geometry_type("geometry"))
        self.register_kind_converter(HostTypeKind.ENUM, lambda d: create_enum_string_type("varchar"))
        self.register_kind_converter(HostTypeKind.ARRAY, _json_text)
        self.register_kind_converter(HostTypeKind.COLLECTION, _json_text)
        self.register_kind_converter(HostTypeKind.OBJECT, _json_text)

        self.register_sql_converter("bit", to_host(bool, length=None, is_fixed_length=None))
        self.register_sql_converter("tinyint", to_host(UInt8))
        self.register_sql_converter("smallint", to_host(Int16))
        self.register_sql_converter("int", to_host(int))
        self.register_sql_converter("bigint", to_host(Int64))
        self.register_sql_converter(["decimal", "numeric"], to_host(Decimal))
        self.register_sql_converter("money", to_host(Decimal, precision=19, scale=4))
        self.register_sql_converter("smallmoney", to_host(Decimal, precision=10, scale=4))
        self.register_sql_converter("real", to_host(Float32))
        self.register_sql_converter("float", to_host(float, precision=None))
        self.register_sql_converter(["char", "nchar", "varchar", "nvarchar"], to_host(str))
        self.register_sql_converter(["text", "ntext"], to_host(str, length=MAX_LENGTH))
        self.register_sql_converter("uniqueidentifier", to_host(uuid.UUID))
        self.register_sql_converter(["datetime", "datetime2", "smalldatetime"], to_host(datetime.datetime))
        self.register_sql_converter("datetimeoffset", to_host(OffsetDateTime))
        self.register_sql_converter("date", to_host(datetime.date))
        self.register_sql_converter("time", to_host(datetime.time))
        self.register_sql_converter(["binary", "varbinary"], to_host(bytes))
        self.register_sql_converter(["image", "timestamp", "rowversion"], to_host(bytes, length=None))
        self.register_sql_converter("xml", to_host(Element))
        self.register_sql_converter(["sql_variant", "geometry", "geography", "hierarchyid"], to_host(object))
