"""Defines errors raised by the provider methods engine."""


class ProviderError(Exception):
    """Base exception for errors raised while generating or introspecting DDL."""

    pass


class UnsupportedConnectionError(ProviderError):
    """Raised when no registered provider accepts a connection."""

    pass


class ViewDefinitionError(ProviderError):
    """Raised when the SELECT statement of a view cannot be extracted from its stored definition."""

    pass


class TableParseError(ProviderError):
    """Raised when a stored CREATE TABLE statement cannot be parsed."""

    pass


class UnmappedTypeError(ProviderError):
    """Raised when a column's host type has no SQL type on the provider and no override was given."""

    pass
