"""Pydantic schemas for tw_award API."""

from pydantic import BaseModel, Field

from src.tw_award.domain.models import AwardBatchResult, WinnerAward, WinnerResult


class WinnerIn(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    # Positive amounts are enforced per winner so one bad line fails alone
    amount_cents: int
    position: int = Field(..., ge=1)

    def to_domain(self) -> WinnerAward:
        return WinnerAward(user_id=self.user_id, amount=self.amount_cents, position=self.position)


class AwardRequest(BaseModel):
    winners: list[WinnerIn] = Field(..., min_length=1)


class WinnerResultOut(BaseModel):
    user_id: str
    position: int
    amount_cents: int
    status: str
    ledger_entry_id: int | None
    winning_balance_cents: int | None
    total_balance_cents: int | None
    error: str | None
    error_code: int | None

    @classmethod
    def from_domain(cls, result: WinnerResult) -> "WinnerResultOut":
        return cls(
            user_id=result.user_id,
            position=result.position,
            amount_cents=result.amount,
            status=result.status.value,
            ledger_entry_id=result.ledger_entry_id,
            winning_balance_cents=result.winning_balance,
            total_balance_cents=result.total_balance,
            error=result.error,
            error_code=result.error_code,
        )


class AwardResponse(BaseModel):
    tournament_id: str
    total_awarded_cents: int
    results: list[WinnerResultOut]

    @classmethod
    def from_batch(cls, batch: AwardBatchResult) -> "AwardResponse":
        return cls(
            tournament_id=batch.tournament_id,
            total_awarded_cents=batch.total_awarded,
            results=[WinnerResultOut.from_domain(r) for r in batch.results],
        )
