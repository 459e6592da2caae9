"""Type map for MySQL and MariaDB."""

import datetime
import uuid
from decimal import Decimal
from typing import Optional
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
    create_guid_string_type,
    create_json_type,
    create_lob_type,
    create_string_type,
    to_host,
    to_sql,
)
from dbmatic.types.hosts import (
    Float32,
    Int16,
    Int64,
    Int8,
    OffsetDateTime,
    qualified_name,
    UInt16,
    UInt32,
    UInt64,
    UInt8,
)

_GEOMETRY_TYPES = {
    "shapely.geometry.base.BaseGeometry": "geometry",
    "shapely.geometry.point.Point": "point",
    "shapely.geometry.linestring.LineString": "linestring",
    "shapely.geometry.polygon.Polygon": "polygon",
    "shapely.geometry.multipoint.MultiPoint": "multipoint",
    "shapely.geometry.multilinestring.MultiLineString": "multilinestring",
    "shapely.geometry.multipolygon.MultiPolygon": "multipolygon",
    "shapely.geometry.collection.GeometryCollection": "geometrycollection",
}

_BIT_WIDTHS = {8: UInt8, 16: Int16, 32: int, 64: Int64}


def _text(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
    if descriptor.length is not None and descriptor.length >= MAX_LENGTH:
        return create_lob_type("text", is_unicode=True)
    if descriptor.is_fixed_length:
        return create_string_type("char", descriptor.length, is_unicode=True, is_fixed_length=True)
    return create_string_type("varchar", descriptor.length, is_unicode=True)


def _binary(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
    if descriptor.length is None or descriptor.length >= MAX_LENGTH:
        return create_lob_type("blob")
    if descriptor.is_fixed_length:
        return create_binary_type("binary", descriptor.length, is_fixed_length=True)
    return create_binary_type("varbinary", descriptor.length)


def _datetime(name: str):
    def convert(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
        return create_datetime_type(name, descriptor.precision)

    return convert


def _bit(sql_type: SqlTypeDescriptor) -> HostTypeDescriptor:
    if sql_type.length in (None, 1):
        return HostTypeDescriptor(bool)
    return HostTypeDescriptor(_BIT_WIDTHS.get(sql_type.length, Int64))


def _guid(sql_type: SqlTypeDescriptor) -> Optional[HostTypeDescriptor]:
    if sql_type.length != 36:
        return None
    return HostTypeDescriptor(uuid.UUID, length=36, is_fixed_length=sql_type.is_fixed_length)


def _geometry(descriptor: HostTypeDescriptor) -> Optional[SqlTypeDescriptor]:
    name = _GEOMETRY_TYPES.get(qualified_name(descriptor.host_type))
    return create_geometry_type(name) if name else None


class MySqlTypeMap(ProviderTypeMap):
    """Maps host types to MySQL / MariaDB types, storing documents and arrays in native ``json`` columns."""

    provider_type = ProviderType.MYSQL

    def register_converters(self):  # noqa: D102
        self.register_host_converter(bool, to_sql("bit(1)", length=1))
        self.register_host_converter(Int8, to_sql("tinyint"))
        self.register_host_converter(UInt8, to_sql("tinyint unsigned"))
        self.register_host_converter(Int16, to_sql("smallint"))
        self.register_host_converter(UInt16, to_sql("smallint unsigned"))
        self.register_host_converter(int, to_sql("int"))
        self.register_host_converter(UInt32, to_sql("int unsigned"))
        self.register_host_converter(Int64, to_sql("bigint"))
        self.register_host_converter(UInt64, to_sql("bigint unsigned"))
        self.register_host_converter(Float32, to_sql("float"))
        self.register_host_converter(float, to_sql("double"))
        self.register_host_converter(Decimal, lambda d: create_decimal_type("decimal", d.precision, d.scale))
        self.register_host_converter(str, _text)
        self.register_host_converter(uuid.UUID, lambda d: create_guid_string_type("char", is_fixed_length=True))
        self.register_host_converter(OffsetDateTime, _datetime("timestamp"))
        self.register_host_converter(datetime.datetime, _datetime("datetime"))
        self.register_host_converter(datetime.date, to_sql("date"))
        self.register_host_converter([datetime.time, datetime.timedelta], _datetime("time"))
        self.register_host_converter([bytes, bytearray, memoryview], _binary)
        self.register_host_converter(Element, lambda d: create_lob_type("text", is_unicode=True))
        self.register_host_converter(object, lambda d: create_json_type("json"))
        self.register_host_converter(list(_GEOMETRY_TYPES), _geometry)
        self.register_kind_converter(HostTypeKind.ENUM, lambda d: create_enum_string_type("varchar"))
        self.register_kind_converter(HostTypeKind.ARRAY, lambda d: create_json_type("json"))
        self.register_kind_converter(HostTypeKind.COLLECTION, lambda d: create_json_type("json"))
        self.register_kind_converter(HostTypeKind.OBJECT, lambda d: create_json_type("json"))

        self.register_sql_converter("bit", _bit)
        self.register_sql_converter("tinyint", to_host(Int8, precision=None))
        self.register_sql_converter("tinyint unsigned", to_host(UInt8, precision=None))
        self.register_sql_converter("smallint", to_host(Int16, precision=None))
        self.register_sql_converter("smallint unsigned", to_host(UInt16, precision=None))
        self.register_sql_converter(["mediumint", "mediumint unsigned", "int", "integer"], to_host(int, precision=None))
        self.register_sql_converter(["int unsigned", "integer unsigned"], to_host(UInt32, precision=None))
        self.register_sql_converter("serial", to_host(int, is_auto_incrementing=True))
        self.register_sql_converter("bigint", to_host(Int64, precision=None))
        self.register_sql_converter("bigint unsigned", to_host(UInt64, precision=None))
        self.register_sql_converter(["decimal", "dec", "fixed", "numeric"], to_host(Decimal))
        self.register_sql_converter("float", to_host(Float32, precision=None, scale=None))
        self.register_sql_converter(["double", "double precision", "real"], to_host(float, precision=None, scale=None))
        self.register_sql_converter("datetime", to_host(datetime.datetime))
        self.register_sql_converter("timestamp", to_host(OffsetDateTime))
        self.register_sql_converter("time", to_host(datetime.time))
        self.register_sql_converter("date", to_host(datetime.date))
        self.register_sql_converter("year", to_host(int, precision=None))
        self.register_sql_converter(["char", "varchar"], _guid)
        self.register_sql_converter(["char", "varchar"], to_host(str, is_unicode=True))
        self.register_sql_converter(
            ["tinytext", "text", "mediumtext", "longtext", "enum", "set"],
            to_host(str, length=MAX_LENGTH, is_unicode=True),
        )
        self.register_sql_converter("json", to_host(dict))
        self.register_sql_converter(["binary", "varbinary"], to_host(bytes))
        self.register_sql_converter(
            ["tinyblob", "blob", "mediumblob", "longblob"], to_host(bytes, length=MAX_LENGTH, is_fixed_length=None)
        )
        self.register_sql_converter(
            [
                "geometry",
                "point",
                "linestring",
                "polygon",
                "multipoint",
                "multilinestring",
                "multipolygon",
                "geometrycollection",
                "geomcollection",
            ],
            to_host(object),
        )
