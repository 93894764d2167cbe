"""Domain models for tw_award — pure dataclasses."""

from dataclasses import dataclass, field
from enum import Enum


class AwardStatus(str, Enum):
    AWARDED = "awarded"
    ALREADY_AWARDED = "already_awarded"
    FAILED = "failed"


@dataclass(frozen=True)
class WinnerAward:
    user_id: str
    amount: int          # cents, must be > 0
    position: int


def award_reference(tournament_id: str, user_id: str, position: int) -> str:
    """Ledger reference for one prize; unique per tournament, winner and placing."""
    return f"{tournament_id}:{user_id}:{position}"


@dataclass(frozen=True)
class WinnerResult:
    user_id: str
    position: int
    amount: int
    status: AwardStatus
    ledger_entry_id: int | None = None
    winning_balance: int | None = None
    total_balance: int | None = None
    error: str | None = None
    error_code: int | None = None


@dataclass
class AwardBatchResult:
    tournament_id: str
    results: list[WinnerResult] = field(default_factory=list)

    def count(self, status: AwardStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def total_awarded(self) -> int:
        return sum(r.amount for r in self.results if r.status is AwardStatus.AWARDED)
