"""Accept-if-better upsert policy."""

from __future__ import annotations

from scoreledger.ledger.records import ScoreRecord, SubmitOutcome, validate_score, validate_user_name
from scoreledger.log import setup_logger
from scoreledger.storage.base import ScoreStore

logger = setup_logger(__name__)


class ScoreLedger:
    """Keeps each player's best score.

    A stored score only moves up: a submission replaces it when strictly
    greater, and ties or lower scores leave the store untouched. The
    comparison happens inside the store (``update_if_greater``), so two
    concurrent submissions for the same player always settle on the larger
    one. Store errors propagate to the caller; nothing is retried here.
    """

    def __init__(self, store: ScoreStore):
        self.store = store

    async def submit(self, user_name: str, score: int) -> SubmitOutcome:
        user_name = validate_user_name(user_name)
        score = validate_score(score)

        existing = await self.store.get_by_key(user_name)
        if existing is None:
            if await self.store.insert_if_absent(ScoreRecord(user_name, score)):
                logger.debug("created %s at %d", user_name, score)
                return SubmitOutcome.CREATED
            # Lost the insert to a concurrent first submission.
        elif existing.score >= score:
            return SubmitOutcome.UNCHANGED

        if await self.store.update_if_greater(user_name, score):
            logger.debug("raised %s to %d", user_name, score)
            return SubmitOutcome.UPDATED
        return SubmitOutcome.UNCHANGED
