"""
Tests for the top-N view.
"""

import pytest

from scoreledger.ledger.errors import StoreUnavailable, ValidationError
from scoreledger.ledger.ledger import ScoreLedger
from scoreledger.ledger.ranked import RankedView
from scoreledger.ledger.records import ScoreRecord


@pytest.fixture
def view(store):
    return RankedView(store)


async def seed(store, pairs):
    ledger = ScoreLedger(store)
    for name, score in pairs:
        await ledger.submit(name, score)


class TestTopScores:
    async def test_bob_carol_dave_scenario(self, store, view):
        await seed(store, [("bob", 3), ("carol", 9), ("dave", 5)])
        assert await view.top_scores(2) == [ScoreRecord("carol", 9), ScoreRecord("dave", 5)]

    async def test_default_limit_is_five(self, store, view):
        await seed(store, [(f"p{i}", i) for i in range(8)])
        top = await view.top_scores()
        assert [r.score for r in top] == [7, 6, 5, 4, 3]

    async def test_fewer_records_than_limit(self, store, view):
        await seed(store, [("alice", 1)])
        assert await view.top_scores(10) == [ScoreRecord("alice", 1)]

    async def test_empty(self, view):
        assert await view.top_scores(3) == []

    async def test_ties_ordered_by_user_name(self, store, view):
        await seed(store, [("zed", 5), ("amy", 5), ("max", 9), ("bea", 5)])
        top = await view.top_scores(4)
        assert [r.user_name for r in top] == ["max", "amy", "bea", "zed"]

    async def test_result_is_sorted_subset(self, store, view):
        pairs = [(f"u{i}", (i * 37) % 23) for i in range(30)]
        await seed(store, pairs)
        top = await view.top_scores(7)
        everything = {ScoreRecord(n, s) for n, s in pairs}
        assert len(top) == 7
        assert set(top) <= everything
        assert [r.score for r in top] == sorted((r.score for r in top), reverse=True)
        assert top[-1].score >= max(s for n, s in pairs if ScoreRecord(n, s) not in top)

    async def test_reflects_improvements(self, store, view):
        await seed(store, [("alice", 1), ("bob", 2)])
        await ScoreLedger(store).submit("alice", 3)
        assert [r.user_name for r in await view.top_scores(2)] == ["alice", "bob"]


class TestLimits:
    @pytest.mark.parametrize("limit", [0, -1, True, 2.0, "3"])
    async def test_bad_limit(self, view, limit):
        with pytest.raises(ValidationError):
            await view.top_scores(limit)

    async def test_limit_above_cap(self, store):
        view = RankedView(store, max_limit=10)
        await view.top_scores(10)
        with pytest.raises(ValidationError):
            await view.top_scores(11)

    async def test_custom_default(self, store):
        await seed(store, [(f"p{i}", i) for i in range(4)])
        view = RankedView(store, default_limit=2)
        assert len(await view.top_scores()) == 2


async def test_store_errors_propagate(unreachable_store):
    with pytest.raises(StoreUnavailable):
        await RankedView(unreachable_store).top_scores()
