"""Type map for SQLite.

SQLite accepts any type name and stores values by affinity, so the reverse map falls back to SQLite's own
affinity rules for declared types it does not recognize. Naive and offset timestamps share the ``datetime``
declaration, offsets are therefore not preserved by a round trip.
"""

import datetime
import uuid
from decimal import Decimal
from typing import Optional
from xml.etree.ElementTree import Element

from dbmatic.models.enums import ProviderType
from dbmatic.types.base import ProviderTypeMap
from dbmatic.types.defaults import DEFAULT_DECIMAL_PRECISION, DEFAULT_DECIMAL_SCALE, GUID_STRING_LENGTH, MAX_LENGTH
from dbmatic.types.descriptors import HostTypeDescriptor, HostTypeKind, SqlTypeDescriptor
from dbmatic.types.helpers import (
    create_decimal_type,
    create_enum_string_type,
    create_guid_string_type,
    create_json_type,
    create_lob_type,
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


def _integer(name: str):
    # AUTOINCREMENT is only accepted on a column declared exactly as INTEGER PRIMARY KEY
    def convert(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
        if descriptor.is_auto_incrementing:
            return SqlTypeDescriptor("integer", is_auto_incrementing=True)
        return SqlTypeDescriptor(name)

    return convert


def _text(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
    if descriptor.length is not None and descriptor.length >= MAX_LENGTH:
        return create_lob_type("text", is_unicode=bool(descriptor.is_unicode))
    prefix = "n" if descriptor.is_unicode else ""
    if descriptor.is_fixed_length:
        return create_string_type(
            f"{prefix}char", descriptor.length, is_unicode=bool(descriptor.is_unicode), is_fixed_length=True
        )
    return create_string_type(f"{prefix}varchar", descriptor.length, is_unicode=bool(descriptor.is_unicode))


def _json_text(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
    return create_json_type("text", is_text=True)


def _decimal(sql_type: SqlTypeDescriptor) -> HostTypeDescriptor:
    precision = sql_type.precision if sql_type.precision is not None else DEFAULT_DECIMAL_PRECISION
    scale = sql_type.scale if sql_type.scale is not None else DEFAULT_DECIMAL_SCALE
    return HostTypeDescriptor(Decimal, precision=precision, scale=scale)


def _guid(sql_type: SqlTypeDescriptor) -> Optional[HostTypeDescriptor]:
    if sql_type.length != GUID_STRING_LENGTH:
        return None
    return HostTypeDescriptor(uuid.UUID, length=GUID_STRING_LENGTH, is_fixed_length=sql_type.is_fixed_length)


class SqliteTypeMap(ProviderTypeMap):
    """Maps host types to SQLite declared types."""

    provider_type = ProviderType.SQLITE

    def register_converters(self):  # noqa: D102
        self.register_host_converter(bool, to_sql("boolean"))
        self.register_host_converter([Int8, UInt8], _integer("tinyint"))
        self.register_host_converter([Int16, UInt16], _integer("smallint"))
        self.register_host_converter([int, UInt32], _integer("int"))
        self.register_host_converter([Int64, UInt64], _integer("bigint"))
        self.register_host_converter(Float32, to_sql("real"))
        self.register_host_converter(float, to_sql("double"))
        self.register_host_converter(Decimal, lambda d: create_decimal_type("numeric", d.precision, d.scale))
        self.register_host_converter(str, _text)
        self.register_host_converter(uuid.UUID, lambda d: create_guid_string_type("varchar"))
        self.register_host_converter([datetime.datetime, OffsetDateTime], to_sql("datetime"))
        self.register_host_converter(datetime.date, to_sql("date"))
        self.register_host_converter([datetime.time, datetime.timedelta], to_sql("time"))
        self.register_host_converter([bytes, bytearray, memoryview], lambda d: create_lob_type("blob"))
        self.register_host_converter(Element, lambda d: create_lob_type("text"))
        self.register_host_converter(object, lambda d: create_lob_type("clob"))
        self.register_host_converter(list(GEOMETRY_TYPE_NAMES), lambda d: create_lob_type("text"))
        self.register_kind_converter(HostTypeKind.ENUM, lambda d: create_enum_string_type("varchar"))
        self.register_kind_converter(HostTypeKind.ARRAY, _json_text)
        self.register_kind_converter(HostTypeKind.COLLECTION, _json_text)
        self.register_kind_converter(HostTypeKind.OBJECT, _json_text)

        self.register_sql_converter(["boolean", "bool"], to_host(bool))
        self.register_sql_converter("tinyint", to_host(UInt8, precision=None))
        self.register_sql_converter(["smallint", "int2"], to_host(Int16, precision=None))
        self.register_sql_converter(["int", "int4", "integer", "mediumint"], to_host(int, precision=None))
        self.register_sql_converter(["bigint", "int8", "unsigned big int"], to_host(Int64, precision=None))
        self.register_sql_converter("real", to_host(Float32, precision=None, scale=None))
        self.register_sql_converter(["float", "double", "double precision"], to_host(float, precision=None, scale=None))
        self.register_sql_converter(["decimal", "numeric"], _decimal)
        self.register_sql_converter(["char", "varchar", "nchar", "nvarchar"], _guid)
        self.register_sql_converter(
            [
                "char",
                "varchar",
                "nchar",
                "nvarchar",
                "character",
                "varying character",
                "native character",
                "nvarchar2",
            ],
            to_host(str),
        )
        self.register_sql_converter(["text", "ntext"], to_host(str, length=MAX_LENGTH))
        self.register_sql_converter(["datetime", "timestamp"], to_host(datetime.datetime))
        self.register_sql_converter("date", to_host(datetime.date))
        self.register_sql_converter("time", to_host(datetime.time))
        self.register_sql_converter("year", to_host(int))
        self.register_sql_converter("blob", to_host(bytes, length=MAX_LENGTH, is_fixed_length=None))
        self.register_sql_converter("clob", to_host(object, length=None, is_unicode=None))
        self.register_sql_converter("json", to_host(dict))

    def affinity_host_type(self, descriptor: SqlTypeDescriptor) -> Optional[HostTypeDescriptor]:
        """Resolve an unrecognized declared type with SQLite's column affinity rules."""
        name = descriptor.base_type_name
        if "int" in name:
            return HostTypeDescriptor(Int64)
        if "char" in name or "clob" in name or "text" in name:
            return HostTypeDescriptor(str, length=descriptor.length)
        if "blob" in name or not name:
            return HostTypeDescriptor(bytes)
        if "real" in name or "floa" in name or "doub" in name:
            return HostTypeDescriptor(float)
        return HostTypeDescriptor(Decimal, precision=descriptor.precision, scale=descriptor.scale)
