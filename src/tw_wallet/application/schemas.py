"""Pydantic schemas for tw_wallet API."""

from pydantic import BaseModel, Field

from src.tw_common.cents import cents_to_display
from src.tw_common.enums import ReferenceType, TransactionKind
from src.tw_wallet.domain.models import BalanceAccount, LedgerEntry

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ConfirmDepositRequest(BaseModel):
    """A deposit already verified by the payment gateway layer."""

    user_id: str = Field(..., min_length=1, max_length=64)
    amount_cents: int = Field(..., gt=0, description="Verified amount in cents")
    payment_id: str = Field(..., min_length=1, max_length=128)
    gateway_order_id: str | None = Field(None, max_length=128)


class ManualTransactionRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    kind: TransactionKind
    amount_cents: int = Field(..., gt=0, description="Magnitude in cents; sign follows kind")
    description: str = Field(..., min_length=1, max_length=500)
    reference: str = Field(..., min_length=1, max_length=128)
    reference_type: ReferenceType


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    user_id: str
    deposit_balance_cents: int
    winning_balance_cents: int
    total_balance_cents: int
    total_balance_display: str

    @classmethod
    def from_account(cls, account: BalanceAccount) -> "BalanceResponse":
        return cls(
            user_id=account.user_id,
            deposit_balance_cents=account.deposit_balance,
            winning_balance_cents=account.winning_balance,
            total_balance_cents=account.total_balance,
            total_balance_display=cents_to_display(account.total_balance),
        )


class WalletTransactionResponse(BaseModel):
    ledger_entry_id: int
    kind: str
    amount_cents: int
    reference: str
    reference_type: str
    duplicate: bool             # True: reference already recorded, nothing changed
    deposit_balance_cents: int
    winning_balance_cents: int
    total_balance_cents: int

    @classmethod
    def from_result(
        cls, entry: LedgerEntry, account: BalanceAccount, created: bool
    ) -> "WalletTransactionResponse":
        return cls(
            ledger_entry_id=entry.id,
            kind=entry.kind,
            amount_cents=entry.amount,
            reference=entry.reference,
            reference_type=entry.reference_type,
            duplicate=not created,
            deposit_balance_cents=account.deposit_balance,
            winning_balance_cents=account.winning_balance,
            total_balance_cents=account.total_balance,
        )
