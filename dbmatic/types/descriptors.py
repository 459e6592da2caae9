"""Descriptors exchanged between host (Python) types and provider SQL types."""

import collections.abc
import datetime
import enum
import inspect
import re
import typing
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from xml.etree.ElementTree import Element

from dbmatic.types.defaults import MAX_LENGTH
from dbmatic.types.hosts import is_geometry_type


class HostTypeKind(enum.Enum):
    """The shape of a host type, used to pick a fallback converter when no exact registration exists."""

    PRIMITIVE = "primitive"
    ENUM = "enum"
    ARRAY = "array"
    COLLECTION = "collection"
    OBJECT = "object"


PRIMITIVE_TYPES = (
    bool,
    int,
    float,
    Decimal,
    str,
    uuid.UUID,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    bytes,
    bytearray,
    memoryview,
    Element,
    object,
)

COLLECTION_TYPES = (
    list,
    tuple,
    set,
    frozenset,
    dict,
    collections.abc.Iterable,
    collections.abc.Collection,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def classify_host_type(host_type) -> typing.Tuple[HostTypeKind, typing.Optional[typing.Any]]:
    """Determine the kind of a host type and, for arrays, its element type.

    Homogeneous variable length tuples (``Tuple[int, ...]``) are arrays, any other parameterised or bare
    collection is a collection, classes that are not primitives are objects.

    :param host_type: the type to classify
    :returns: a tuple of the kind and the element type (None unless the kind is ARRAY)
    """
    origin = typing.get_origin(host_type)
    args = typing.get_args(host_type)
    if origin is not None:
        if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
            return HostTypeKind.ARRAY, args[0]
        if origin in COLLECTION_TYPES:
            return HostTypeKind.COLLECTION, None
        return HostTypeKind.OBJECT, None
    if inspect.isclass(host_type) and issubclass(host_type, enum.Enum):
        return HostTypeKind.ENUM, None
    if host_type in COLLECTION_TYPES:
        return HostTypeKind.COLLECTION, None
    if inspect.isclass(host_type) and (issubclass(host_type, PRIMITIVE_TYPES[:-1]) or host_type is object):
        return HostTypeKind.PRIMITIVE, None
    if is_geometry_type(host_type):
        return HostTypeKind.PRIMITIVE, None
    return HostTypeKind.OBJECT, None


@dataclass(frozen=True)
class HostTypeDescriptor:
    """Describes what a caller's type looks like, independently of any SQL dialect."""

    host_type: typing.Any
    length: typing.Optional[int] = None
    precision: typing.Optional[int] = None
    scale: typing.Optional[int] = None
    is_auto_incrementing: typing.Optional[bool] = None
    is_unicode: typing.Optional[bool] = None
    is_fixed_length: typing.Optional[bool] = None
    kind: HostTypeKind = field(default=None, compare=False)
    element_type: typing.Any = field(default=None, compare=False)

    def __post_init__(self):
        if self.host_type is None:
            raise ValueError("A host type descriptor requires a host type")
        if self.kind is None:
            kind, element_type = classify_host_type(self.host_type)
            object.__setattr__(self, "kind", kind)
            if self.element_type is None:
                object.__setattr__(self, "element_type", element_type)

    def element_descriptor(self) -> typing.Optional["HostTypeDescriptor"]:
        """Return a descriptor for the element type of an array, or None for other kinds."""
        if self.kind is not HostTypeKind.ARRAY or self.element_type is None:
            return None
        return HostTypeDescriptor(self.element_type)


_PAREN_CLAUSE = re.compile(r"\(([^)]*)\)")
_WHITESPACE = re.compile(r"\s+")
_LENGTH_WORDS = ("char", "text", "binary", "bit", "varbit")


def base_type_name_of(sql_type_name: str) -> str:
    """Strip length, precision and scale from a SQL type name and normalize it for lookups.

    For example ``"time(5,2) without time zone"`` becomes ``"time without time zone"``.

    :param sql_type_name: the raw SQL type name
    :returns: the lower-cased base name with collapsed whitespace
    """
    base = _PAREN_CLAUSE.sub("", sql_type_name)
    base = _WHITESPACE.sub(" ", base).strip().lower()
    return base.replace(" []", "[]")


@dataclass(frozen=True)
class SqlTypeDescriptor:
    """Describes a fully formed, dialect specific SQL type declaration such as ``numeric(16,4)``.

    ``sql_type_name`` is rendered directly into DDL, so it must already embed the length, precision and
    scale that the other fields describe.
    """

    sql_type_name: str
    base_type_name: str = None
    length: typing.Optional[int] = None
    precision: typing.Optional[int] = None
    scale: typing.Optional[int] = None
    is_auto_incrementing: typing.Optional[bool] = None
    is_unicode: typing.Optional[bool] = None
    is_fixed_length: typing.Optional[bool] = None

    def __post_init__(self):
        if not self.sql_type_name or not self.sql_type_name.strip():
            raise ValueError("A SQL type descriptor requires a non-empty SQL type name")
        if self.base_type_name is None:
            object.__setattr__(self, "base_type_name", base_type_name_of(self.sql_type_name))

    @classmethod
    def parse(cls, sql_type_name: str) -> "SqlTypeDescriptor":
        """Build a descriptor from raw SQL type text, such as a catalog's column type.

        :param sql_type_name: text like ``"nvarchar(max)"``, ``"numeric(10, 2)"`` or ``"integer[]"``
        :returns: a descriptor with the length, precision and scale parsed out of the text
        :raises: ValueError
        """
        if not sql_type_name or not sql_type_name.strip():
            raise ValueError("Cannot parse an empty SQL type name")
        sql_type_name = sql_type_name.strip()
        base = base_type_name_of(sql_type_name)
        element = base[:-2] if base.endswith("[]") else base
        kwargs = {"base_type_name": base}
        match = _PAREN_CLAUSE.search(sql_type_name)
        numbers = []
        if match:
            for raw in match.group(1).split(","):
                raw = raw.strip().lower()
                if raw in ("max", "-1"):
                    numbers.append(MAX_LENGTH)
                elif raw.isdigit():
                    numbers.append(int(raw))
        if any(word in element for word in _LENGTH_WORDS):
            if numbers:
                kwargs["length"] = numbers[0]
            is_variable = "var" in element or "text" in element or "varying" in element
            kwargs["is_fixed_length"] = not is_variable and ("char" in element or "binary" in element)
            kwargs["is_unicode"] = element.startswith("n") or element.startswith("national")
        elif numbers:
            kwargs["precision"] = numbers[0]
            if len(numbers) > 1:
                kwargs["scale"] = numbers[1]
        if "serial" in element or "identity" in element or "auto_increment" in element:
            kwargs["is_auto_incrementing"] = True
        return cls(sql_type_name, **kwargs)
