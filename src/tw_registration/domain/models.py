"""Domain models for tw_registration — pure dataclasses."""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from src.tw_common.enums import PaymentMethod, RegistrationStatus


@dataclass(frozen=True)
class UserSnapshot:
    """User details as they were at sign-up time."""

    fullname: str
    email: str
    mobile: str = ""
    age: int | None = None
    state: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TournamentSnapshot:
    code: str
    mode: str
    team_size: str | None
    map: str
    start_time: datetime

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["start_time"] = self.start_time.isoformat()
        return data


@dataclass
class Registration:
    id: str
    user_id: str
    tournament_id: str
    free_fire_id: str
    team_selection: str | None
    amount_paid: int                 # cents
    from_deposit: int                # cents
    from_winning: int                # cents
    ledger_entry_id: int | None
    user_snapshot: UserSnapshot
    tournament_snapshot: TournamentSnapshot
    status: str = RegistrationStatus.REGISTERED.value
    payment_method: str = PaymentMethod.WALLET.value
    created_at: datetime | None = None


@dataclass(frozen=True)
class RegistrationOutcome:
    """What a successful registration returns to the caller."""

    registration_id: str
    tournament_id: str
    amount_paid: int
    from_deposit: int
    from_winning: int
    deposit_balance: int
    winning_balance: int
    total_balance: int
    team_selection: str | None
    ledger_entry_id: int
