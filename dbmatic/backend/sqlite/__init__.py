"""Implementation of SQLite backends."""

from dbmatic.backend.sqlite.aiosqlite import AsyncConnectionPoolAiosqlite, ConnectionAiosqlite

__all__ = [
    "AsyncConnectionPoolAiosqlite",
    "ConnectionAiosqlite",
]
