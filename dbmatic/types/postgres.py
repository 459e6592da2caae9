"""Type map for PostgreSQL."""

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
    create_array_type,
    create_decimal_type,
    create_enum_string_type,
    create_geometry_type,
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

# Element types that are stored as a document rather than as a native array
_NON_ARRAY_ELEMENTS = {"bytea", "json", "jsonb", "xml"}


def _text(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
    if descriptor.length is not None and descriptor.length >= MAX_LENGTH:
        return create_lob_type("text", is_unicode=True)
    if descriptor.is_fixed_length:
        return create_string_type("char", descriptor.length, is_unicode=True, is_fixed_length=True)
    return create_string_type("varchar", descriptor.length, is_unicode=True)


def _timestamp(with_time_zone: bool):
    def convert(descriptor: HostTypeDescriptor) -> SqlTypeDescriptor:
        name = "timestamp"
        if descriptor.precision is not None:
            name = f"timestamp({descriptor.precision})"
        zone = "with time zone" if with_time_zone else "without time zone"
        return SqlTypeDescriptor(f"{name} {zone}", precision=descriptor.precision)

    return convert


class PostgresTypeMap(ProviderTypeMap):
    """Maps host types to PostgreSQL types, using native arrays for homogeneous tuples."""

    provider_type = ProviderType.POSTGRESQL

    def _array(self, descriptor: HostTypeDescriptor) -> Optional[SqlTypeDescriptor]:
        element = descriptor.element_descriptor()
        if element is None or element.kind is not HostTypeKind.PRIMITIVE:
            return create_json_type("jsonb")
        element_sql = self.try_get_sql_type(element)
        if element_sql is None:
            return None
        if element_sql.base_type_name in _NON_ARRAY_ELEMENTS:
            return create_json_type("jsonb")
        return create_array_type(element_sql)

    def register_converters(self):  # noqa: D102
        self._register_forward()
        self._register_reverse()

    def _register_forward(self):
        self.register_host_converter(bool, to_sql("boolean"))
        self.register_host_converter([Int8, UInt8, Int16], to_sql("smallint"))
        self.register_host_converter([int, UInt16], to_sql("integer"))
        self.register_host_converter([UInt32, Int64], to_sql("bigint"))
        self.register_host_converter(UInt64, lambda d: create_decimal_type("numeric", 20, 0))
        self.register_host_converter(Float32, to_sql("real"))
        self.register_host_converter(float, to_sql("double precision"))
        self.register_host_converter(Decimal, lambda d: create_decimal_type("numeric", d.precision, d.scale))
        self.register_host_converter(str, _text)
        self.register_host_converter(uuid.UUID, to_sql("uuid"))
        self.register_host_converter(OffsetDateTime, _timestamp(True))
        self.register_host_converter(datetime.datetime, _timestamp(False))
        self.register_host_converter(datetime.date, to_sql("date"))
        self.register_host_converter(datetime.time, to_sql("time"))
        self.register_host_converter(datetime.timedelta, to_sql("interval"))
        self.register_host_converter([bytes, bytearray, memoryview], to_sql("bytea"))
        self.register_host_converter(Element, to_sql("xml"))
        self.register_host_converter(object, lambda d: create_json_type("jsonb"))
        self.register_host_converter(list(GEOMETRY_TYPE_NAMES), lambda d: create_geometry_type("geometry"))
        self.register_kind_converter(HostTypeKind.ENUM, lambda d: create_enum_string_type("varchar"))
        self.register_kind_converter(HostTypeKind.ARRAY, self._array)
        self.register_kind_converter(HostTypeKind.COLLECTION, lambda d: create_json_type("jsonb"))
        self.register_kind_converter(HostTypeKind.OBJECT, lambda d: create_json_type("jsonb"))

    def _register_reverse(self):
        self.register_sql_converter(["boolean", "bool"], to_host(bool))
        self.register_sql_converter(["smallint", "int2"], to_host(Int16))
        self.register_sql_converter(["smallserial", "serial2"], to_host(Int16, is_auto_incrementing=True))
        self.register_sql_converter(["integer", "int", "int4"], to_host(int))
        self.register_sql_converter(["serial", "serial4"], to_host(int, is_auto_incrementing=True))
        self.register_sql_converter(["bigint", "int8"], to_host(Int64))
        self.register_sql_converter(["bigserial", "serial8"], to_host(Int64, is_auto_incrementing=True))
        self.register_sql_converter(["bit", "bit varying", "varbit"], to_host(int, length=None))
        self.register_sql_converter(["numeric", "decimal"], to_host(Decimal))
        self.register_sql_converter("money", to_host(Decimal, precision=19, scale=4))
        self.register_sql_converter(["real", "float4"], to_host(Float32))
        self.register_sql_converter(["double precision", "float8", "float"], to_host(float))
        self.register_sql_converter(
            ["character", "char", "bpchar"], to_host(str, is_unicode=True, is_fixed_length=True)
        )
        self.register_sql_converter(
            ["character varying", "varchar"], to_host(str, is_unicode=True, is_fixed_length=False)
        )
        self.register_sql_converter(["text", "citext", "name"], to_host(str, length=MAX_LENGTH, is_unicode=True))
        self.register_sql_converter(["json", "jsonb"], to_host(dict, length=None))
        self.register_sql_converter("xml", to_host(Element))
        self.register_sql_converter("uuid", to_host(uuid.UUID))
        self.register_sql_converter("date", to_host(datetime.date))
        self.register_sql_converter("interval", to_host(datetime.timedelta))
        self.register_sql_converter(
            ["time", "time without time zone", "time with time zone", "timetz"], to_host(datetime.time)
        )
        self.register_sql_converter(["timestamp", "timestamp without time zone"], to_host(datetime.datetime))
        self.register_sql_converter(["timestamp with time zone", "timestamptz"], to_host(OffsetDateTime))
        self.register_sql_converter("bytea", to_host(bytes))
        self.register_sql_converter(
            [
                "geometry",
                "geography",
                "point",
                "line",
                "lseg",
                "box",
                "path",
                "polygon",
                "circle",
                "cidr",
                "inet",
                "macaddr",
                "macaddr8",
                "tsvector",
                "tsquery",
                "hstore",
            ],
            to_host(object),
        )
