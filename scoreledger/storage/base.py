"""Store contract used by the ledger and the ranked view."""

from __future__ import annotations

from abc import ABC, abstractmethod

from scoreledger.ledger.records import ScoreRecord


class ScoreStore(ABC):
    """Persistent mapping of userName -> best score.

    Implementations raise ``StoreUnavailable`` for any connectivity, timeout
    or driver failure. A missing key is ``None``, not an error. Instances are
    safe to share between concurrent requests.
    """

    async def open(self) -> None:
        pass

    async def close(self) -> None:
        pass

    @abstractmethod
    async def ping(self) -> bool:
        ...

    @abstractmethod
    async def get_by_key(self, user_name: str) -> ScoreRecord | None:
        ...

    @abstractmethod
    async def put(self, record: ScoreRecord) -> None:
        """Create or replace unconditionally."""

    @abstractmethod
    async def insert_if_absent(self, record: ScoreRecord) -> bool:
        """Create the record unless the key exists. Returns whether it was created."""

    @abstractmethod
    async def update_if_greater(self, user_name: str, candidate: int) -> bool:
        """Atomically set score to ``candidate`` if the record exists with a lower score."""

    @abstractmethod
    async def query_top_n(self, n: int) -> list[ScoreRecord]:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...
