"""Tests for the host and SQL type descriptors."""

import datetime
import enum
import typing
import uuid
from dataclasses import dataclass
from decimal import Decimal

from dbmatic.types import HostTypeDescriptor, HostTypeKind, SqlTypeDescriptor, TypeConverter
from dbmatic.types.defaults import MAX_LENGTH
from dbmatic.types.descriptors import base_type_name_of, classify_host_type
from dbmatic.types.hosts import Int64, OffsetDateTime, is_geometry_type

import pytest


class Color(enum.Enum):
    """Dummy enum for classification tests."""

    RED = 1


@dataclass
class Address:
    """Dummy class for classification tests."""

    street: str


@pytest.mark.parametrize(
    "host_type, ex_kind, ex_element",
    [
        (int, HostTypeKind.PRIMITIVE, None),
        (bool, HostTypeKind.PRIMITIVE, None),
        (Int64, HostTypeKind.PRIMITIVE, None),
        (Decimal, HostTypeKind.PRIMITIVE, None),
        (uuid.UUID, HostTypeKind.PRIMITIVE, None),
        (OffsetDateTime, HostTypeKind.PRIMITIVE, None),
        (datetime.date, HostTypeKind.PRIMITIVE, None),
        (bytes, HostTypeKind.PRIMITIVE, None),
        (object, HostTypeKind.PRIMITIVE, None),
        (Color, HostTypeKind.ENUM, None),
        (typing.Tuple[int, ...], HostTypeKind.ARRAY, int),
        (typing.Tuple[int, str], HostTypeKind.COLLECTION, None),
        (typing.List[int], HostTypeKind.COLLECTION, None),
        (typing.Dict[str, int], HostTypeKind.COLLECTION, None),
        (dict, HostTypeKind.COLLECTION, None),
        (list, HostTypeKind.COLLECTION, None),
        (Address, HostTypeKind.OBJECT, None),
        (typing.Optional[int], HostTypeKind.OBJECT, None),
    ],
)
def test_classify_host_type(host_type, ex_kind: HostTypeKind, ex_element):
    """Tests host types are classified into the expected kinds."""
    assert classify_host_type(host_type) == (ex_kind, ex_element)
    descriptor = HostTypeDescriptor(host_type)
    assert descriptor.kind is ex_kind
    assert descriptor.element_type is ex_element


def test_host_descriptor_requires_type():
    """Tests a host descriptor cannot be built without a host type."""
    with pytest.raises(ValueError, match="requires a host type"):
        HostTypeDescriptor(None)


def test_host_descriptor_equality_ignores_kind():
    """Tests descriptors compare on the type and its facets, the derived kind is not compared."""
    assert HostTypeDescriptor(str, length=10) == HostTypeDescriptor(str, length=10)
    assert HostTypeDescriptor(str, length=10) != HostTypeDescriptor(str, length=11)
    assert hash(HostTypeDescriptor(int)) == hash(HostTypeDescriptor(int))


def test_element_descriptor():
    """Tests arrays expose their element type as a descriptor, other kinds do not."""
    element = HostTypeDescriptor(typing.Tuple[uuid.UUID, ...]).element_descriptor()
    assert element == HostTypeDescriptor(uuid.UUID)
    assert HostTypeDescriptor(list).element_descriptor() is None


def test_geometry_type_by_name():
    """Tests geometry types are recognised by qualified name, without the geometry library installed."""
    point = type("Point", (), {"__module__": "shapely.geometry.point"})
    assert is_geometry_type(point)
    assert classify_host_type(point) == (HostTypeKind.PRIMITIVE, None)
    assert not is_geometry_type(Address)


@pytest.mark.parametrize(
    "sql_type, ex_base",
    [
        ("numeric(10, 2)", "numeric"),
        ("time(5,2) without time zone", "time without time zone"),
        ("  Character   Varying(255) ", "character varying"),
        ("integer []", "integer[]"),
        ("NVARCHAR(MAX)", "nvarchar"),
    ],
)
def test_base_type_name_of(sql_type: str, ex_base: str):
    """Tests the base type name strips arguments and normalizes case and whitespace."""
    assert base_type_name_of(sql_type) == ex_base


@pytest.mark.parametrize(
    "sql_type, ex_fields",
    [
        ("nvarchar(max)", {"length": MAX_LENGTH, "is_unicode": True, "is_fixed_length": False}),
        ("varchar(-1)", {"length": MAX_LENGTH, "is_unicode": False, "is_fixed_length": False}),
        ("char(36)", {"length": 36, "is_fixed_length": True, "is_unicode": False}),
        ("nchar(10)", {"length": 10, "is_fixed_length": True, "is_unicode": True}),
        ("character varying(100)", {"length": 100, "is_fixed_length": False}),
        ("text", {"length": None, "is_fixed_length": False}),
        ("numeric(10, 2)", {"precision": 10, "scale": 2, "length": None}),
        ("decimal(16)", {"precision": 16, "scale": None}),
        ("time(5,2) without time zone", {"precision": 5, "scale": 2}),
        ("serial", {"is_auto_incrementing": True}),
        ("bigint", {"precision": None, "length": None, "is_auto_incrementing": None}),
    ],
)
def test_parse_sql_type(sql_type: str, ex_fields: dict):
    """Tests raw SQL type text is parsed into its length, precision, scale and flags."""
    descriptor = SqlTypeDescriptor.parse(sql_type)
    assert descriptor.sql_type_name == sql_type.strip()
    for name, value in ex_fields.items():
        assert getattr(descriptor, name) == value, name


@pytest.mark.parametrize("sql_type", ["", "   ", None])
def test_parse_empty_sql_type(sql_type):
    """Tests empty SQL type text is rejected."""
    with pytest.raises(ValueError):
        SqlTypeDescriptor.parse(sql_type)


def test_sql_descriptor_derives_base_name():
    """Tests the base type name is derived from the declaration when not given."""
    assert SqlTypeDescriptor("numeric(16,4)", precision=16, scale=4).base_type_name == "numeric"
    with pytest.raises(ValueError, match="non-empty SQL type name"):
        SqlTypeDescriptor(" ")


def test_type_converter():
    """Tests a converter reports failure when its function returns None."""
    converter = TypeConverter(lambda d: SqlTypeDescriptor("text") if d.host_type is str else None)
    assert converter.try_convert(HostTypeDescriptor(str)) == (SqlTypeDescriptor("text"), True)
    assert converter.try_convert(HostTypeDescriptor(int)) == (None, False)
    with pytest.raises(ValueError, match="None source"):
        converter.try_convert(None)
