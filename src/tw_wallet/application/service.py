"""WalletApplicationService — deposits, manual adjustments, balance reads.

Every money-moving call is one transaction: balance change + ledger append
commit together or not at all. A reference that is already in the ledger
short-circuits before any balance change, so gateway retries and repeated
admin submissions are harmless.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.enums import CREDIT_KINDS, ReferenceType, TransactionKind
from src.tw_common.errors import InvalidAmountError, TransientConflictError, UserNotFoundError
from src.tw_common.retry import retry_on_conflict
from src.tw_wallet.application.ledger import TransactionLedger
from src.tw_wallet.application.schemas import BalanceResponse, WalletTransactionResponse
from src.tw_wallet.domain.deduction import compute_split
from src.tw_wallet.domain.repository import AccountRepositoryProtocol
from src.tw_wallet.infrastructure.persistence import AccountRepository

logger = logging.getLogger(__name__)


class WalletApplicationService:
    def __init__(
        self,
        repo: AccountRepositoryProtocol | None = None,
        ledger: TransactionLedger | None = None,
        max_attempts: int = 3,
        backoff_seconds: float = 0.05,
    ) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()
        self._ledger = ledger or TransactionLedger()
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        user = await self._repo.get_user_account(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return BalanceResponse.from_account(user.balance)

    async def confirm_deposit(
        self,
        db: AsyncSession,
        user_id: str,
        amount_cents: int,
        payment_id: str,
        gateway_order_id: str | None = None,
    ) -> WalletTransactionResponse:
        """Credit a gateway-verified deposit, keyed by the payment id."""
        metadata = {"payment_id": payment_id}
        if gateway_order_id:
            metadata["gateway_order_id"] = gateway_order_id
        return await self.record_transaction(
            db,
            user_id=user_id,
            kind=TransactionKind.DEPOSIT,
            amount_cents=amount_cents,
            description="Wallet deposit via payment gateway",
            reference=payment_id,
            reference_type=ReferenceType.PAYMENT_ID,
            metadata=metadata,
        )

    async def record_transaction(
        self,
        db: AsyncSession,
        user_id: str,
        kind: TransactionKind,
        amount_cents: int,
        description: str,
        reference: str,
        reference_type: ReferenceType,
        metadata: dict[str, Any] | None = None,
    ) -> WalletTransactionResponse:
        """Apply one credit or debit and log it.

        `amount_cents` is the magnitude; debits are stored negative. Debits
        split deposit-first and retry on version conflicts.
        """
        if amount_cents <= 0:
            raise InvalidAmountError(f"amount must be > 0 cents, got {amount_cents}")

        async def attempt() -> WalletTransactionResponse:
            try:
                response = await self._apply(
                    db, user_id, TransactionKind(kind), amount_cents,
                    description, reference, ReferenceType(reference_type), metadata or {},
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
            return response

        return await retry_on_conflict(
            attempt,
            max_attempts=self._max_attempts,
            backoff_seconds=self._backoff_seconds,
            label=f"wallet {kind} user={user_id} ref={reference}",
        )

    async def _apply(
        self,
        db: AsyncSession,
        user_id: str,
        kind: TransactionKind,
        amount_cents: int,
        description: str,
        reference: str,
        reference_type: ReferenceType,
        metadata: dict[str, Any],
    ) -> WalletTransactionResponse:
        user = await self._repo.get_user_account(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        existing = await self._ledger.find(db, user_id, reference, reference_type)
        if existing is not None:
            logger.info("Wallet %s already recorded: user=%s ref=%s", kind.value, user_id, reference)
            return WalletTransactionResponse.from_result(existing, user.balance, created=False)

        if kind in CREDIT_KINDS:
            credit = (
                self._repo.credit_deposit
                if kind is TransactionKind.DEPOSIT
                else self._repo.credit_winning
            )
            balance = await credit(db, user_id, amount_cents)
            if balance is None:
                raise UserNotFoundError(user_id)
            signed_amount = amount_cents
        else:
            split = compute_split(
                user.balance.deposit_balance, user.balance.winning_balance, amount_cents
            )
            balance = await self._repo.apply_debit(db, user.balance, split)
            if balance is None:
                raise TransientConflictError(f"balance of user {user_id} changed")
            signed_amount = -amount_cents

        entry, created = await self._ledger.append(
            db, user_id, kind, signed_amount, description, reference, reference_type, metadata,
        )
        if not created:
            # Lost the race to a concurrent writer of the same reference; roll
            # back our balance change and let the retry return their entry.
            raise TransientConflictError(f"ledger reference {reference} recorded concurrently")
        return WalletTransactionResponse.from_result(entry, balance, created=True)
