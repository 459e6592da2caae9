"""Defines errors raised by the type mapping registries."""


class TypeMapError(Exception):
    """Base exception for type map errors."""

    pass


class TypeMapFrozenError(TypeMapError):
    """Raised when a converter is registered on a type map that has already been frozen."""

    pass
