"""In-memory store for tests and throwaway runs."""

from __future__ import annotations

from scoreledger.ledger.errors import StoreUnavailable
from scoreledger.ledger.records import ScoreRecord
from scoreledger.storage.base import ScoreStore


class MemoryStore(ScoreStore):
    # No method awaits, so each one runs to completion on the event loop
    # without interleaving.

    def __init__(self):
        self._scores: dict[str, int] = {}
        self._open = False

    async def open(self) -> None:
        self._open = True

    async def close(self) -> None:
        self._open = False

    def _check(self) -> None:
        if not self._open:
            raise StoreUnavailable("memory store is closed")

    async def ping(self) -> bool:
        return self._open

    async def get_by_key(self, user_name: str) -> ScoreRecord | None:
        self._check()
        score = self._scores.get(user_name)
        if score is None:
            return None
        return ScoreRecord(user_name, score)

    async def put(self, record: ScoreRecord) -> None:
        self._check()
        self._scores[record.user_name] = int(record.score)

    async def insert_if_absent(self, record: ScoreRecord) -> bool:
        self._check()
        if record.user_name in self._scores:
            return False
        self._scores[record.user_name] = int(record.score)
        return True

    async def update_if_greater(self, user_name: str, candidate: int) -> bool:
        self._check()
        cur = self._scores.get(user_name)
        if cur is None or candidate <= cur:
            return False
        self._scores[user_name] = int(candidate)
        return True

    async def query_top_n(self, n: int) -> list[ScoreRecord]:
        self._check()
        vals = sorted(self._scores.items(), key=lambda kv: (-kv[1], kv[0]))
        return [ScoreRecord(name, score) for name, score in vals[: int(n)]]

    async def count(self) -> int:
        self._check()
        return len(self._scores)
