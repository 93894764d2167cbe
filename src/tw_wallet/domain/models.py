"""Domain models for tw_wallet — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.tw_common.enums import TransactionStatus


@dataclass(frozen=True)
class BalanceSplit:
    """How one fee is drawn from the two sub-balances."""

    from_deposit: int    # cents
    from_winning: int    # cents

    def __post_init__(self) -> None:
        if self.from_deposit < 0 or self.from_winning < 0:
            raise ValueError(f"Split parts must be >= 0, got {self}")

    @property
    def total(self) -> int:
        return self.from_deposit + self.from_winning


@dataclass
class BalanceAccount:
    """The two-sub-balance monetary state embedded in a user row."""

    user_id: str
    deposit_balance: int     # cents
    winning_balance: int     # cents
    version: int = 0

    def __post_init__(self) -> None:
        if self.deposit_balance < 0 or self.winning_balance < 0:
            raise ValueError(
                f"Balances must be >= 0 (user {self.user_id}: "
                f"deposit={self.deposit_balance}, winning={self.winning_balance})"
            )

    @property
    def total_balance(self) -> int:
        return self.deposit_balance + self.winning_balance


@dataclass
class UserAccount:
    """User identity fields the core snapshots, plus the embedded balance."""

    id: str
    fullname: str
    email: str
    balance: BalanceAccount
    mobile: str = ""
    age: int | None = None
    state: str = ""


@dataclass(frozen=True)
class LedgerEntry:
    id: int                          # BIGSERIAL
    user_id: str
    kind: str                        # TransactionKind value
    amount: int                      # cents, positive=credit negative=debit
    description: str
    reference: str
    reference_type: str              # ReferenceType value
    status: str = TransactionStatus.COMPLETED.value
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

    @property
    def dedupe_key(self) -> tuple[str, str, str]:
        return (self.user_id, self.reference, self.reference_type)
