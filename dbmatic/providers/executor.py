"""Runs catalog queries and DDL on a connection, logging every statement and recording the last one."""

import logging
from contextvars import ContextVar
from typing import Any, List, Optional, Tuple, Union

from dbmatic.backend.base import AsyncConnection
from dbmatic.templating import Template

logger = logging.getLogger(__name__)

_last_sql: ContextVar[Tuple[str, Optional[tuple]]] = ContextVar("dbmatic_last_sql", default=("", None))

Statement = Union[Template, str]


def get_last_sql() -> str:
    """Return the last statement run by the current task (or thread), an empty string if none was run."""
    return _last_sql.get()[0]


def get_last_sql_params() -> Tuple[str, Optional[tuple]]:
    """Return the last statement run by the current task (or thread) together with its bound parameters."""
    return _last_sql.get()


def _render(cnx: AsyncConnection, statement: Statement, kwargs: dict) -> Tuple[str, Optional[tuple]]:
    if isinstance(statement, Template):
        sql, params = statement.render(cnx.mung_symbol, kwargs)
        return sql, params or None
    return statement, None


def _record(sql: str, params: Optional[tuple]):
    _last_sql.set((sql, params))
    logger.debug("Running SQL: %s; params: %s", sql, params)


async def execute(cnx: AsyncConnection, statement: Statement, commit: bool = None, **kwargs) -> int:
    """Render and execute a statement, returning the affected row count.

    Plain strings are executed as they are, templates are rendered with the connection's placeholders.

    :param cnx: the connection to run the statement on
    :param statement: a Template or raw SQL text
    :param commit: commit after execution, defaults to the connection's autocommit setting
    :param kwargs: template parameter values
    :returns: number of rows affected
    """
    sql, params = _render(cnx, statement, kwargs)
    _record(sql, params)
    return await cnx.execute(sql, params, commit=commit)


async def query(cnx: AsyncConnection, statement: Statement, **kwargs) -> List[dict]:
    """Render and execute a query, returning results as a list of dicts keyed by column name.

    :param cnx: the connection to run the query on
    :param statement: a Template or raw SQL text
    :param kwargs: template parameter values
    :returns: list of dictionaries mapping column names to values
    """
    sql, params = _render(cnx, statement, kwargs)
    _record(sql, params)
    async with cnx.query(sql, params) as results:
        rows = await results.fetchall()
        description = results.description if rows else ()
        return [{d.name.lower(): row[i] for i, d in enumerate(description)} for row in rows]


async def scalar(cnx: AsyncConnection, statement: Statement, **kwargs) -> Any:
    """Render and execute a query, returning the first column of the first row, or None without rows.

    :param cnx: the connection to run the query on
    :param statement: a Template or raw SQL text
    :param kwargs: template parameter values
    """
    sql, params = _render(cnx, statement, kwargs)
    _record(sql, params)
    async with cnx.query(sql, params) as results:
        row = await results.fetchone()
        return row[0] if row else None
