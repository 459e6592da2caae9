"""Host type hints for widths and flavours that Python's builtin types do not distinguish.

Python has a single arbitrary precision ``int`` and a single double precision ``float``. The classes here
are plain subclasses used purely as annotations on columns so that a type map can pick a narrower or wider
SQL type. A plain ``int`` maps to a 32 bit integer type and a plain ``float`` to a 64 bit one.
"""

import datetime


class Int8(int):
    """Signed 8 bit integer."""


class UInt8(int):
    """Unsigned 8 bit integer (a byte)."""


class Int16(int):
    """Signed 16 bit integer."""


class UInt16(int):
    """Unsigned 16 bit integer."""


class UInt32(int):
    """Unsigned 32 bit integer."""


class Int64(int):
    """Signed 64 bit integer."""


class UInt64(int):
    """Unsigned 64 bit integer."""


class Float32(float):
    """Single precision floating point."""


class OffsetDateTime(datetime.datetime):
    """A timestamp that carries its UTC offset."""


# Geometry types are matched by qualified class name so that no geometry library needs to be installed
GEOMETRY_TYPE_NAMES = frozenset(
    [
        "shapely.geometry.base.BaseGeometry",
        "shapely.geometry.point.Point",
        "shapely.geometry.linestring.LineString",
        "shapely.geometry.polygon.Polygon",
        "shapely.geometry.multipoint.MultiPoint",
        "shapely.geometry.multilinestring.MultiLineString",
        "shapely.geometry.multipolygon.MultiPolygon",
        "shapely.geometry.collection.GeometryCollection",
    ]
)


def qualified_name(host_type) -> str:
    """Return the dotted module path and qualified name of a type.

    :param host_type: the type to name
    :returns: a string like ``shapely.geometry.point.Point``
    """
    return f"{getattr(host_type, '__module__', '')}.{getattr(host_type, '__qualname__', repr(host_type))}"


def is_geometry_type(host_type) -> bool:
    """Test whether the host type is a known geometry type.

    :param host_type: the type to test
    :returns: True if the type's qualified name is a known geometry class
    """
    return qualified_name(host_type) in GEOMETRY_TYPE_NAMES
