"""Implementation of PostgreSQL backends."""

from dbmatic.backend.postgres.asyncpg import AsyncConnectionPoolPSQLAsyncpg, ConnectionAsyncpg
from dbmatic.backend.postgres.base import AsyncConnectionPSQL, AsyncConnectionPoolPSQL
from dbmatic.backend.postgres.psycopg3 import AsyncConnectionPoolPSQLPsycopg3

__all__ = [
    "AsyncConnectionPSQL",
    "AsyncConnectionPoolPSQL",
    "AsyncConnectionPoolPSQLAsyncpg",
    "AsyncConnectionPoolPSQLPsycopg3",
    "ConnectionAsyncpg",
]
