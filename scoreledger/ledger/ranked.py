"""Top-N read path."""

from __future__ import annotations

from scoreledger.ledger.errors import ValidationError
from scoreledger.ledger.records import ScoreRecord
from scoreledger.storage.base import ScoreStore

DEFAULT_LIMIT = 5
MAX_LIMIT = 100


class RankedView:
    def __init__(self, store: ScoreStore, default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT):
        self.store = store
        self.default_limit = default_limit
        self.max_limit = max_limit

    async def top_scores(self, limit: int | None = None) -> list[ScoreRecord]:
        """Highest scores first; equal scores ordered by userName ascending."""
        if limit is None:
            limit = self.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValidationError("limit must be a positive integer")
        if limit > self.max_limit:
            raise ValidationError(f"limit must be at most {self.max_limit}")
        return await self.store.query_top_n(limit)
