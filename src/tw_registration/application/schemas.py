"""Pydantic schemas for tw_registration API."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.tw_common.cents import cents_to_display
from src.tw_common.enums import TeamSelection
from src.tw_registration.domain.models import Registration, RegistrationOutcome
from src.tw_tournament.domain.capacity import RegistrationInput


class RegisterRequest(BaseModel):
    # Shape only; the Free Fire ID and terms rules are checked by CapacityGuard
    # so every problem comes back in one error.
    free_fire_id: str = Field("", max_length=32)
    terms_accepted: bool = False
    team_selection: TeamSelection | None = None

    def to_input(self) -> RegistrationInput:
        return RegistrationInput(
            free_fire_id=self.free_fire_id,
            terms_accepted=self.terms_accepted,
            team_selection=self.team_selection,
        )


class RegistrationOutcomeResponse(BaseModel):
    registration_id: str
    tournament_id: str
    amount_paid_cents: int
    from_deposit_cents: int
    from_winning_cents: int
    deposit_balance_cents: int
    winning_balance_cents: int
    total_balance_cents: int
    total_balance_display: str
    team_selection: str | None
    ledger_entry_id: int

    @classmethod
    def from_outcome(cls, outcome: RegistrationOutcome) -> "RegistrationOutcomeResponse":
        return cls(
            registration_id=outcome.registration_id,
            tournament_id=outcome.tournament_id,
            amount_paid_cents=outcome.amount_paid,
            from_deposit_cents=outcome.from_deposit,
            from_winning_cents=outcome.from_winning,
            deposit_balance_cents=outcome.deposit_balance,
            winning_balance_cents=outcome.winning_balance,
            total_balance_cents=outcome.total_balance,
            total_balance_display=cents_to_display(outcome.total_balance),
            team_selection=outcome.team_selection,
            ledger_entry_id=outcome.ledger_entry_id,
        )


class RegistrationResponse(BaseModel):
    id: str
    tournament_id: str
    tournament_code: str
    free_fire_id: str
    team_selection: str | None
    status: str
    payment_method: str
    amount_paid_cents: int
    from_deposit_cents: int
    from_winning_cents: int
    start_time: datetime
    created_at: datetime | None

    @classmethod
    def from_domain(cls, registration: Registration) -> "RegistrationResponse":
        return cls(
            id=registration.id,
            tournament_id=registration.tournament_id,
            tournament_code=registration.tournament_snapshot.code,
            free_fire_id=registration.free_fire_id,
            team_selection=registration.team_selection,
            status=registration.status,
            payment_method=registration.payment_method,
            amount_paid_cents=registration.amount_paid,
            from_deposit_cents=registration.from_deposit,
            from_winning_cents=registration.from_winning,
            start_time=registration.tournament_snapshot.start_time,
            created_at=registration.created_at,
        )
