"""Score records + submission validation.

Wire format:
  {"userName": "alice", "score": 10}
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from scoreledger.ledger.errors import ValidationError

MAX_USER_NAME_LEN = 64

# Integer domain of the backing stores (SQLite INTEGER).
MIN_SCORE = -(2**63)
MAX_SCORE = 2**63 - 1


class SubmitOutcome(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ScoreRecord:
    user_name: str
    score: int

    def to_json(self) -> dict[str, Any]:
        return {"userName": self.user_name, "score": self.score}


def validate_user_name(v: Any) -> str:
    if not isinstance(v, str) or not v.strip():
        raise ValidationError("userName must be a non-empty string")
    if len(v) > MAX_USER_NAME_LEN:
        raise ValidationError(f"userName longer than {MAX_USER_NAME_LEN} characters")
    try:
        v.encode("utf-8")
    except UnicodeEncodeError:
        raise ValidationError("userName must be valid unicode text") from None
    return v


def validate_score(v: Any) -> int:
    # bool is an int subclass; JSON true/false is not a score.
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValidationError("score must be an integer")
    if v < MIN_SCORE or v > MAX_SCORE:
        raise ValidationError("score out of range")
    return v


@dataclass
class Submission:
    userName: str
    score: int

    @classmethod
    def parse(cls, data: Any) -> "Submission":
        if not isinstance(data, dict):
            raise ValidationError("submission must be an object")
        return cls(
            userName=validate_user_name(data.get("userName")),
            score=validate_score(data.get("score")),
        )
