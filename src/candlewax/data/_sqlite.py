"""Async SQLite connection using stdlib sqlite3 + anyio.

Runs every blocking sqlite3 call in an anyio worker thread so the event
loop never waits on disk I/O.

``check_same_thread=False`` is required because ``anyio.to_thread``
dispatches to a pool and consecutive calls may land on different
threads. ``Database`` serialises access with an ``anyio.Lock``.
"""

import sqlite3
from collections.abc import Callable, Sequence
from typing import Any

import anyio


def _run_sync(func: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking call in an anyio worker thread."""
    return anyio.to_thread.run_sync(func, *args)  # type: ignore[union-attr]


class SQLiteCursor:
    """Async view of an executed ``sqlite3.Cursor``."""

    __slots__ = ("_cursor",)

    def __init__(self, cursor: sqlite3.Cursor) -> None:
        self._cursor = cursor

    @property
    def columns(self) -> list[str]:
        if self._cursor.description is None:
            return []
        return [desc[0] for desc in self._cursor.description]

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount

    async def fetchall(self) -> list[dict[str, Any]]:
        rows = await _run_sync(self._cursor.fetchall)
        columns = self.columns
        # Duplicate column names (joined reads) keep the last occurrence.
        return [dict(zip(columns, row, strict=True)) for row in rows]

    async def fetchone(self) -> dict[str, Any] | None:
        row = await _run_sync(self._cursor.fetchone)
        if row is None:
            return None
        return dict(zip(self.columns, row, strict=True))


class SQLiteConnection:
    """Async wrapper around ``sqlite3.Connection``."""

    __slots__ = ("_conn",)

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> SQLiteCursor:
        cursor = await _run_sync(lambda: self._conn.execute(sql, tuple(params)))
        return SQLiteCursor(cursor)

    async def executescript(self, sql: str) -> None:
        """Run several ``;``-separated statements (schema setup).

        Commits any pending transaction before running.
        """
        await _run_sync(lambda: self._conn.executescript(sql))

    async def begin(self) -> None:
        await _run_sync(lambda: self._conn.execute("BEGIN"))

    async def commit(self) -> None:
        await _run_sync(lambda: self._conn.execute("COMMIT"))

    async def rollback(self) -> None:
        await _run_sync(lambda: self._conn.execute("ROLLBACK"))

    async def close(self) -> None:
        await _run_sync(self._conn.close)


async def connect(path: str, *, timeout: float) -> SQLiteConnection:
    """Open an async SQLite connection.

    ``isolation_level=None`` leaves sqlite3 in autocommit mode; explicit
    ``BEGIN`` statements open transactions. ``timeout`` bounds how long a
    statement waits on a locked database file.
    """
    conn = await _run_sync(
        lambda: sqlite3.connect(
            path,
            timeout=timeout,
            isolation_level=None,
            check_same_thread=False,
        )
    )
    return SQLiteConnection(conn)
