"""Database agnostic DDL, introspection and type mapping for async database drivers."""

from dbmatic.__version__ import __version__

__all__ = ["__version__"]
