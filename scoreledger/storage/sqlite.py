"""SQLite persistence for scores."""

from __future__ import annotations

import asyncio
import sqlite3
import threading
from typing import Any, Callable

from scoreledger.ledger.errors import StoreUnavailable
from scoreledger.ledger.records import ScoreRecord
from scoreledger.log import setup_logger
from scoreledger.storage.base import ScoreStore

logger = setup_logger(__name__)


class SqliteStore(ScoreStore):
    """Score table on a single shared ``sqlite3`` connection.

    Statements run on worker threads so the event loop never blocks on disk
    or on another process holding the database lock. The connection is in
    autocommit mode: each statement is its own transaction, which is what
    makes ``insert_if_absent`` and ``update_if_greater`` atomic.
    """

    def __init__(self, path: str, timeout: float = 10.0):
        self.path = path
        self.timeout = float(timeout)
        self.conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    async def open(self) -> None:
        await self._run(self._open_sync, check=False)
        logger.info("opened sqlite store at %s", self.path)

    def _open_sync(self) -> None:
        if self.conn is not None:
            return
        conn = sqlite3.connect(
            self.path,
            timeout=self.timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        try:
            if self.path != ":memory:":
                conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS scores (
                  user_name TEXT PRIMARY KEY,
                  score INTEGER NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS scores_score_desc ON scores (score DESC)")
        except sqlite3.Error:
            conn.close()
            raise
        self.conn = conn

    async def close(self) -> None:
        if await asyncio.to_thread(self._close_sync):
            logger.info("closed sqlite store at %s", self.path)

    def _close_sync(self) -> bool:
        with self._lock:
            if not self.conn:
                return False
            self.conn.close()
            self.conn = None
            return True

    async def _run(self, fn: Callable[..., Any], *args: Any, check: bool = True) -> Any:
        state = _CallState()

        def call():
            with self._lock:
                with state.guard:
                    if state.abandoned:
                        raise StoreUnavailable("sqlite call abandoned after timeout")
                    state.conn = self.conn
                if check and self.conn is None:
                    raise StoreUnavailable("sqlite store is not open")
                try:
                    return fn(*args)
                finally:
                    with state.guard:
                        state.conn = None
                        state.finished = True

        task = asyncio.ensure_future(asyncio.to_thread(call))
        # Retrieve the error of a worker we stopped waiting for.
        task.add_done_callback(lambda t: t.cancelled() or t.exception())
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout)
            if done:
                return task.result()
            if not self._abandon(state):
                raise StoreUnavailable(f"sqlite call timed out after {self.timeout:g}s")
            try:
                # An interrupted statement rolls back; one that still completes is reported as applied.
                return await task
            except sqlite3.OperationalError:
                raise StoreUnavailable(f"sqlite call timed out after {self.timeout:g}s") from None
        except asyncio.CancelledError:
            self._abandon(state)
            raise
        except sqlite3.Error as e:
            raise StoreUnavailable(f"sqlite error: {e}") from e

    @staticmethod
    def _abandon(state: "_CallState") -> bool:
        """Stop a timed-out call. Returns True when its statement was already running."""
        with state.guard:
            state.abandoned = True
            if state.finished or state.conn is None:
                return False
            # The worker still holds the store lock, so no other statement
            # can be running on this connection.
            try:
                state.conn.interrupt()
            except sqlite3.ProgrammingError:
                return False
            return True

    async def ping(self) -> bool:
        return await self._run(lambda: self.conn.execute("SELECT 1").fetchone() == (1,))

    async def get_by_key(self, user_name: str) -> ScoreRecord | None:
        def q():
            rows = self.conn.execute("SELECT user_name, score FROM scores WHERE user_name = ?", (user_name,)).fetchall()
            return ScoreRecord(rows[0][0], rows[0][1]) if rows else None

        return await self._run(q)

    async def put(self, record: ScoreRecord) -> None:
        await self._run(
            self._execute,
            """
            INSERT INTO scores (user_name, score) VALUES (?, ?)
            ON CONFLICT(user_name) DO UPDATE SET score=excluded.score
            """,
            (record.user_name, int(record.score)),
        )

    async def insert_if_absent(self, record: ScoreRecord) -> bool:
        cur = await self._run(
            self._execute,
            "INSERT INTO scores (user_name, score) VALUES (?, ?) ON CONFLICT(user_name) DO NOTHING",
            (record.user_name, int(record.score)),
        )
        return cur.rowcount == 1

    async def update_if_greater(self, user_name: str, candidate: int) -> bool:
        cur = await self._run(
            self._execute,
            "UPDATE scores SET score = ? WHERE user_name = ? AND score < ?",
            (int(candidate), user_name, int(candidate)),
        )
        return cur.rowcount == 1

    async def query_top_n(self, n: int) -> list[ScoreRecord]:
        def q():
            cur = self.conn.execute(
                "SELECT user_name, score FROM scores ORDER BY score DESC, user_name ASC LIMIT ?",
                (int(n),),
            )
            return [ScoreRecord(row[0], row[1]) for row in cur.fetchall()]

        return await self._run(q)

    async def count(self) -> int:
        return await self._run(lambda: self.conn.execute("SELECT COUNT(*) FROM scores").fetchone()[0])

    def _execute(self, sql: str, params: tuple) -> sqlite3.Cursor:
        return self.conn.execute(sql, params)


class _CallState:
    """Hand-off between ``_run`` and the worker thread executing one call."""

    def __init__(self):
        self.guard = threading.Lock()
        self.abandoned = False
        self.finished = False
        self.conn: sqlite3.Connection | None = None
