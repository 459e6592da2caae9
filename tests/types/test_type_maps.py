"""Tests for the per provider type maps, in both mapping directions."""

import datetime
import enum
import typing
import uuid
from decimal import Decimal

from dbmatic.models import ProviderType
from dbmatic.types import HostTypeDescriptor, HostTypeKind, SqlTypeDescriptor, create_type_map
from dbmatic.types.defaults import MAX_LENGTH
from dbmatic.types.errors import TypeMapFrozenError
from dbmatic.types.hosts import Float32, Int16, Int64, OffsetDateTime, UInt32, UInt8

import pytest


class Status(enum.Enum):
    """Dummy enum for mapping tests."""

    ACTIVE = "active"
    RETIRED = "retired"


class Customer:
    """Dummy class for mapping tests."""

    pass


def _sql_name(provider: ProviderType, descriptor) -> typing.Optional[str]:
    result = create_type_map(provider).try_get_sql_type(descriptor)
    return result.sql_type_name if result else None


@pytest.mark.parametrize(
    "descriptor, ex_sql",
    [
        (HostTypeDescriptor(int), "integer"),
        (HostTypeDescriptor(bool), "boolean"),
        (HostTypeDescriptor(Int16), "smallint"),
        (HostTypeDescriptor(Int64), "bigint"),
        (HostTypeDescriptor(float), "double precision"),
        (HostTypeDescriptor(Float32), "real"),
        (HostTypeDescriptor(str), "varchar(255)"),
        (HostTypeDescriptor(str, length=40), "varchar(40)"),
        (HostTypeDescriptor(str, length=MAX_LENGTH), "text"),
        (HostTypeDescriptor(str, length=2, is_fixed_length=True), "char(2)"),
        (HostTypeDescriptor(Decimal), "numeric(16,4)"),
        (HostTypeDescriptor(Decimal, precision=10, scale=2), "numeric(10,2)"),
        (HostTypeDescriptor(uuid.UUID), "uuid"),
        (HostTypeDescriptor(datetime.datetime), "timestamp without time zone"),
        (HostTypeDescriptor(OffsetDateTime), "timestamp with time zone"),
        (HostTypeDescriptor(datetime.datetime, precision=3), "timestamp(3) without time zone"),
        (HostTypeDescriptor(datetime.date), "date"),
        (HostTypeDescriptor(datetime.timedelta), "interval"),
        (HostTypeDescriptor(bytes), "bytea"),
        (HostTypeDescriptor(typing.Tuple[int, ...]), "integer[]"),
        (HostTypeDescriptor(typing.Tuple[str, ...]), "varchar(255)[]"),
        (HostTypeDescriptor(typing.Tuple[bytes, ...]), "jsonb"),
        (HostTypeDescriptor(typing.List[int]), "jsonb"),
        (HostTypeDescriptor(dict), "jsonb"),
        (HostTypeDescriptor(Customer), "jsonb"),
        (HostTypeDescriptor(Status), "varchar(128)"),
    ],
)
def test_postgres_host_to_sql(descriptor: HostTypeDescriptor, ex_sql: str):
    """Tests host types map to the expected PostgreSQL types."""
    assert _sql_name(ProviderType.POSTGRESQL, descriptor) == ex_sql


@pytest.mark.parametrize(
    "sql_type, ex_host",
    [
        ("integer", HostTypeDescriptor(int)),
        ("int4", HostTypeDescriptor(int)),
        ("serial", HostTypeDescriptor(int, is_auto_incrementing=True)),
        ("bigserial", HostTypeDescriptor(Int64, is_auto_incrementing=True)),
        ("boolean", HostTypeDescriptor(bool)),
        ("character varying(50)", HostTypeDescriptor(str, length=50, is_unicode=True, is_fixed_length=False)),
        ("text", HostTypeDescriptor(str, length=MAX_LENGTH, is_unicode=True, is_fixed_length=False)),
        ("numeric(10,2)", HostTypeDescriptor(Decimal, precision=10, scale=2)),
        ("money", HostTypeDescriptor(Decimal, precision=19, scale=4)),
        ("uuid", HostTypeDescriptor(uuid.UUID)),
        ("timestamp without time zone", HostTypeDescriptor(datetime.datetime)),
        ("timestamp with time zone", HostTypeDescriptor(OffsetDateTime)),
        ("jsonb", HostTypeDescriptor(dict)),
        ("integer[]", HostTypeDescriptor(typing.Tuple[int, ...])),
        ("bytea", HostTypeDescriptor(bytes)),
        ("no_such_type", None),
        ("no_such_type[]", None),
    ],
)
def test_postgres_sql_to_host(sql_type: str, ex_host: HostTypeDescriptor):
    """Tests PostgreSQL types map back to the expected host types."""
    assert create_type_map(ProviderType.POSTGRESQL).try_get_host_type(sql_type) == ex_host


@pytest.mark.parametrize(
    "descriptor, ex_sql",
    [
        (HostTypeDescriptor(int), "int"),
        (HostTypeDescriptor(bool), "bit"),
        (HostTypeDescriptor(UInt8), "tinyint"),
        (HostTypeDescriptor(str), "nvarchar(255)"),
        (HostTypeDescriptor(str, is_unicode=False), "varchar(255)"),
        (HostTypeDescriptor(str, length=MAX_LENGTH), "nvarchar(max)"),
        (HostTypeDescriptor(str, length=3, is_fixed_length=True), "nchar(3)"),
        (HostTypeDescriptor(uuid.UUID), "uniqueidentifier"),
        (HostTypeDescriptor(bytes), "varbinary(max)"),
        (HostTypeDescriptor(bytes, length=16, is_fixed_length=True), "binary(16)"),
        (HostTypeDescriptor(datetime.datetime), "datetime"),
        (HostTypeDescriptor(OffsetDateTime), "datetimeoffset"),
        (HostTypeDescriptor(OffsetDateTime, precision=7), "datetimeoffset(7)"),
        (HostTypeDescriptor(Decimal), "decimal(16,4)"),
        (HostTypeDescriptor(dict), "nvarchar(max)"),
        (HostTypeDescriptor(typing.Tuple[int, ...]), "nvarchar(max)"),
        (HostTypeDescriptor(Status), "varchar(128)"),
    ],
)
def test_sqlserver_host_to_sql(descriptor: HostTypeDescriptor, ex_sql: str):
    """Tests host types map to the expected SQL Server types."""
    assert _sql_name(ProviderType.SQLSERVER, descriptor) == ex_sql


@pytest.mark.parametrize(
    "sql_type, ex_host",
    [
        ("bit", HostTypeDescriptor(bool, is_unicode=False)),
        ("int", HostTypeDescriptor(int)),
        ("nvarchar(max)", HostTypeDescriptor(str, length=MAX_LENGTH, is_unicode=True, is_fixed_length=False)),
        ("uniqueidentifier", HostTypeDescriptor(uuid.UUID)),
        ("datetimeoffset", HostTypeDescriptor(OffsetDateTime)),
        ("decimal(18,2)", HostTypeDescriptor(Decimal, precision=18, scale=2)),
        ("rowversion", HostTypeDescriptor(bytes)),
    ],
)
def test_sqlserver_sql_to_host(sql_type: str, ex_host: HostTypeDescriptor):
    """Tests SQL Server types map back to the expected host types."""
    assert create_type_map(ProviderType.SQLSERVER).try_get_host_type(sql_type) == ex_host


@pytest.mark.parametrize(
    "descriptor, ex_sql",
    [
        (HostTypeDescriptor(int), "int"),
        (HostTypeDescriptor(bool), "bit(1)"),
        (HostTypeDescriptor(UInt32), "int unsigned"),
        (HostTypeDescriptor(Int64), "bigint"),
        (HostTypeDescriptor(uuid.UUID), "char(36)"),
        (HostTypeDescriptor(str), "varchar(255)"),
        (HostTypeDescriptor(str, length=MAX_LENGTH), "text"),
        (HostTypeDescriptor(dict), "json"),
        (HostTypeDescriptor(typing.Tuple[int, ...]), "json"),
        (HostTypeDescriptor(datetime.datetime), "datetime"),
        (HostTypeDescriptor(datetime.datetime, precision=6), "datetime(6)"),
        (HostTypeDescriptor(OffsetDateTime), "timestamp"),
        (HostTypeDescriptor(bytes), "blob"),
        (HostTypeDescriptor(bytes, length=16), "varbinary(16)"),
        (HostTypeDescriptor(Decimal, precision=12, scale=3), "decimal(12,3)"),
    ],
)
def test_mysql_host_to_sql(descriptor: HostTypeDescriptor, ex_sql: str):
    """Tests host types map to the expected MySQL types."""
    assert _sql_name(ProviderType.MYSQL, descriptor) == ex_sql


@pytest.mark.parametrize(
    "sql_type, ex_host_type",
    [
        ("char(36)", uuid.UUID),
        ("varchar(36)", uuid.UUID),
        ("varchar(50)", str),
        ("json", dict),
        ("bit(1)", bool),
        ("bit(8)", UInt8),
        ("int(11)", int),
        ("int unsigned", UInt32),
        ("longtext", str),
        ("timestamp", OffsetDateTime),
        ("longblob", bytes),
    ],
)
def test_mysql_sql_to_host(sql_type: str, ex_host_type):
    """Tests MySQL types map back to the expected host types."""
    assert create_type_map(ProviderType.MYSQL).try_get_host_type(sql_type).host_type is ex_host_type


def test_mysql_varchar_keeps_length():
    """Tests the declared length survives the reverse mapping of a non GUID string."""
    host = create_type_map(ProviderType.MYSQL).try_get_host_type("varchar(50)")
    assert host.length == 50
    assert host.is_fixed_length is False


@pytest.mark.parametrize("provider", [ProviderType.POSTGRESQL, ProviderType.MYSQL])
def test_unicode_strings_map_back_as_unicode(provider: ProviderType):
    """Tests character types read back as unicode on providers whose character types always are."""
    type_map = create_type_map(provider)
    descriptor = HostTypeDescriptor(str, length=50, is_unicode=True, is_fixed_length=True)
    sql_type = type_map.try_get_sql_type(descriptor)
    assert sql_type.sql_type_name == "char(50)"
    assert type_map.try_get_host_type(sql_type.sql_type_name) == descriptor
    assert type_map.try_get_host_type("varchar(20)").is_unicode


@pytest.mark.parametrize(
    "descriptor, ex_sql",
    [
        (HostTypeDescriptor(int), "int"),
        (HostTypeDescriptor(int, is_auto_incrementing=True), "integer"),
        (HostTypeDescriptor(Int64, is_auto_incrementing=True), "integer"),
        (HostTypeDescriptor(bool), "boolean"),
        (HostTypeDescriptor(str), "varchar(255)"),
        (HostTypeDescriptor(str, is_unicode=True), "nvarchar(255)"),
        (HostTypeDescriptor(uuid.UUID), "varchar(36)"),
        (HostTypeDescriptor(dict), "text"),
        (HostTypeDescriptor(typing.Tuple[int, ...]), "text"),
        (HostTypeDescriptor(Decimal), "numeric(16,4)"),
        (HostTypeDescriptor(datetime.datetime), "datetime"),
        (HostTypeDescriptor(OffsetDateTime), "datetime"),
        (HostTypeDescriptor(bytes), "blob"),
    ],
)
def test_sqlite_host_to_sql(descriptor: HostTypeDescriptor, ex_sql: str):
    """Tests host types map to the expected SQLite declared types."""
    assert _sql_name(ProviderType.SQLITE, descriptor) == ex_sql


@pytest.mark.parametrize(
    "sql_type, ex_host",
    [
        ("varchar(36)", HostTypeDescriptor(uuid.UUID, length=36, is_fixed_length=False)),
        ("integer", HostTypeDescriptor(int)),
        ("blob", HostTypeDescriptor(bytes, length=MAX_LENGTH)),
        ("numeric", HostTypeDescriptor(Decimal, precision=16, scale=4)),
        ("numeric(8,2)", HostTypeDescriptor(Decimal, precision=8, scale=2)),
        ("unsigned integer", HostTypeDescriptor(Int64)),
        ("varchar2(10)", HostTypeDescriptor(str, length=10)),
        ("float4", HostTypeDescriptor(float)),
        ("money", HostTypeDescriptor(Decimal)),
    ],
)
def test_sqlite_sql_to_host(sql_type: str, ex_host: HostTypeDescriptor):
    """Tests SQLite declared types map back by exact name first, then by column affinity."""
    assert create_type_map(ProviderType.SQLITE).try_get_host_type(sql_type) == ex_host


def test_create_type_map_accepts_value():
    """Tests a type map can be created from the provider's string value."""
    type_map = create_type_map("postgresql")
    assert type_map.provider_type is ProviderType.POSTGRESQL
    assert type_map.frozen


def test_create_type_map_unknown_provider():
    """Tests an unknown provider is rejected."""
    with pytest.raises(ValueError, match="Unsupported provider"):
        create_type_map("oracle")


def test_frozen_type_map_rejects_registration():
    """Tests converters cannot be registered once a map is frozen."""
    type_map = create_type_map(ProviderType.SQLITE)
    with pytest.raises(TypeMapFrozenError):
        type_map.register_host_converter(str, lambda d: SqlTypeDescriptor("text"))
    with pytest.raises(TypeMapFrozenError):
        type_map.register_sql_converter("text", lambda d: HostTypeDescriptor(str))


def test_prepended_converter_wins():
    """Tests a prepended converter is tried before the provider's own, an appended one after it."""
    type_map = create_type_map(ProviderType.POSTGRESQL, freeze=False)
    type_map.register_host_converter(str, lambda d: SqlTypeDescriptor("varchar(1)"))
    assert type_map.try_get_sql_type(str).sql_type_name == "varchar(255)"
    type_map.register_host_converter(str, lambda d: SqlTypeDescriptor("citext"), prepend=True)
    assert type_map.try_get_sql_type(str).sql_type_name == "citext"
    type_map.freeze()
    assert type_map.frozen


def test_converter_declining_falls_through():
    """Tests a converter returning None lets the next registered converter produce the result."""
    type_map = create_type_map(ProviderType.SQLSERVER, freeze=False)
    type_map.register_host_converter(str, lambda d: SqlTypeDescriptor("text") if d.length == 1 else None, True)
    assert type_map.try_get_sql_type(HostTypeDescriptor(str, length=1)).sql_type_name == "text"
    assert type_map.try_get_sql_type(HostTypeDescriptor(str, length=2)).sql_type_name == "nvarchar(2)"


def test_kind_converter_registration():
    """Tests a kind converter can be registered to handle every enum."""
    type_map = create_type_map(ProviderType.MYSQL, freeze=False)
    type_map.register_kind_converter(HostTypeKind.ENUM, lambda d: SqlTypeDescriptor("varchar(16)"), prepend=True)
    assert type_map.try_get_sql_type(Status).sql_type_name == "varchar(16)"


def test_lookup_requires_a_value():
    """Tests lookups reject missing descriptors."""
    type_map = create_type_map(ProviderType.POSTGRESQL)
    with pytest.raises(ValueError):
        type_map.try_get_sql_type(None)
    with pytest.raises(ValueError):
        type_map.try_get_host_type(None)
    with pytest.raises(ValueError):
        type_map.try_get_host_type("")


@pytest.mark.parametrize("provider", list(ProviderType))
def test_registered_types_are_reported(provider: ProviderType):
    """Tests every map reports its exact registrations."""
    type_map = create_type_map(provider)
    assert str in type_map.registered_host_types()
    assert "date" in type_map.registered_sql_types()
