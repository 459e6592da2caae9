"""Helpers for building SQL type descriptors with consistent default handling."""

from typing import Optional

from dbmatic.types.defaults import (
    DEFAULT_BINARY_LENGTH,
    DEFAULT_DECIMAL_PRECISION,
    DEFAULT_DECIMAL_SCALE,
    DEFAULT_ENUM_LENGTH,
    DEFAULT_STRING_LENGTH,
    GUID_STRING_LENGTH,
    MAX_LENGTH,
)
from dbmatic.types.descriptors import HostTypeDescriptor, SqlTypeDescriptor


def create_simple_type(sql_type_name: str, **kwargs) -> SqlTypeDescriptor:
    """Create a descriptor for a type that takes no length, precision or scale."""
    return SqlTypeDescriptor(sql_type_name, **kwargs)


def create_decimal_type(
    sql_type_name: str,
    precision: Optional[int] = None,
    scale: Optional[int] = None,
) -> SqlTypeDescriptor:
    """Create an exact numeric type rendered as ``name(precision,scale)``.

    :param sql_type_name: the base type name, e.g. "numeric"
    :param precision: the precision, defaults to DEFAULT_DECIMAL_PRECISION
    :param scale: the scale, defaults to DEFAULT_DECIMAL_SCALE
    :returns: the descriptor
    """
    precision = precision if precision is not None else DEFAULT_DECIMAL_PRECISION
    scale = scale if scale is not None else DEFAULT_DECIMAL_SCALE
    return SqlTypeDescriptor(f"{sql_type_name}({precision},{scale})", precision=precision, scale=scale)


def create_string_type(
    sql_type_name: str,
    length: Optional[int] = None,
    is_unicode: bool = False,
    is_fixed_length: bool = False,
) -> SqlTypeDescriptor:
    """Create a character type rendered as ``name(length)`` or ``name(max)``.

    :param sql_type_name: the base type name, e.g. "nvarchar"
    :param length: the length, defaults to DEFAULT_STRING_LENGTH, MAX_LENGTH renders as "max"
    :param is_unicode: whether the type stores unicode text
    :param is_fixed_length: whether the type is padded to a fixed length
    :returns: the descriptor
    """
    length = length if length else DEFAULT_STRING_LENGTH
    rendered = "max" if length >= MAX_LENGTH else str(length)
    return SqlTypeDescriptor(
        f"{sql_type_name}({rendered})",
        length=length,
        is_unicode=is_unicode,
        is_fixed_length=is_fixed_length,
    )


def create_lob_type(sql_type_name: str, is_unicode: bool = False) -> SqlTypeDescriptor:
    """Create an unbounded text or binary type such as ``text`` or ``blob``."""
    return SqlTypeDescriptor(sql_type_name, length=MAX_LENGTH, is_unicode=is_unicode)


def create_guid_string_type(sql_type_name: str = "varchar", is_fixed_length: bool = False) -> SqlTypeDescriptor:
    """Create a character type wide enough for a hyphenated UUID."""
    return SqlTypeDescriptor(
        f"{sql_type_name}({GUID_STRING_LENGTH})",
        length=GUID_STRING_LENGTH,
        is_unicode=False,
        is_fixed_length=is_fixed_length,
    )


def create_enum_string_type(sql_type_name: str = "varchar") -> SqlTypeDescriptor:
    """Create the bounded character type enums are stored as."""
    return SqlTypeDescriptor(f"{sql_type_name}({DEFAULT_ENUM_LENGTH})", length=DEFAULT_ENUM_LENGTH)


def create_binary_type(
    sql_type_name: str,
    length: Optional[int] = None,
    is_fixed_length: bool = False,
) -> SqlTypeDescriptor:
    """Create a binary type rendered as ``name(length)`` or ``name(max)``."""
    length = length if length else DEFAULT_BINARY_LENGTH
    rendered = "max" if length >= MAX_LENGTH else str(length)
    return SqlTypeDescriptor(f"{sql_type_name}({rendered})", length=length, is_fixed_length=is_fixed_length)


def create_json_type(sql_type_name: str = "json", is_text: bool = False) -> SqlTypeDescriptor:
    """Create the type JSON documents are stored as, ``is_text`` marks a plain text column holding JSON."""
    if is_text:
        return SqlTypeDescriptor(sql_type_name, length=MAX_LENGTH, is_unicode=True)
    return SqlTypeDescriptor(sql_type_name)


def create_datetime_type(sql_type_name: str, precision: Optional[int] = None) -> SqlTypeDescriptor:
    """Create a temporal type, with fractional second precision when one is supplied."""
    if precision is None:
        return SqlTypeDescriptor(sql_type_name)
    return SqlTypeDescriptor(f"{sql_type_name}({precision})", precision=precision)


def create_geometry_type(sql_type_name: str = "geometry") -> SqlTypeDescriptor:
    """Create a spatial type."""
    return SqlTypeDescriptor(sql_type_name)


def create_array_type(element: SqlTypeDescriptor) -> SqlTypeDescriptor:
    """Create a native array of the given element type, e.g. ``integer[]``."""
    return SqlTypeDescriptor(
        f"{element.sql_type_name}[]",
        length=element.length,
        precision=element.precision,
        scale=element.scale,
    )


def to_host(host_type, **overrides):
    """Build a reverse converter producing the given host type.

    Length, precision, scale and the unicode / fixed length / auto increment flags parsed from the SQL type
    are carried onto the host descriptor unless overridden.

    :param host_type: the host type the converter produces
    :param overrides: descriptor fields forced to a value, e.g. ``precision=19``
    :returns: a function of a SqlTypeDescriptor
    """

    def convert(sql_type: SqlTypeDescriptor) -> HostTypeDescriptor:
        kwargs = {
            "length": sql_type.length,
            "precision": sql_type.precision,
            "scale": sql_type.scale,
            "is_unicode": sql_type.is_unicode,
            "is_fixed_length": sql_type.is_fixed_length,
            "is_auto_incrementing": sql_type.is_auto_incrementing,
        }
        kwargs.update(overrides)
        return HostTypeDescriptor(host_type, **kwargs)

    return convert


def to_sql(sql_type_name: str, **kwargs):
    """Build a forward converter that always produces the same simple SQL type."""
    descriptor = create_simple_type(sql_type_name, **kwargs)
    return lambda _: descriptor
