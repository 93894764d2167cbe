"""Repository Protocols — dependency inversion for testability.

Unit tests inject fakes that conform to these Protocols.
Infrastructure layer provides the real implementations.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_wallet.domain.models import BalanceAccount, BalanceSplit, LedgerEntry, UserAccount


class AccountRepositoryProtocol(Protocol):
    async def get_user_account(
        self, db: AsyncSession, user_id: str
    ) -> UserAccount | None: ...

    async def apply_debit(
        self, db: AsyncSession, account: BalanceAccount, split: BalanceSplit
    ) -> BalanceAccount | None:
        """Apply `split` iff the stored version still equals `account.version`.

        Returns None on a version mismatch (concurrent writer).
        """
        ...

    async def credit_deposit(
        self, db: AsyncSession, user_id: str, amount: int
    ) -> BalanceAccount | None: ...

    async def credit_winning(
        self, db: AsyncSession, user_id: str, amount: int
    ) -> BalanceAccount | None: ...


class LedgerRepositoryProtocol(Protocol):
    async def find_by_reference(
        self,
        db: AsyncSession,
        user_id: str,
        reference: str,
        reference_type: str,
    ) -> LedgerEntry | None: ...

    async def insert_entry(
        self,
        db: AsyncSession,
        user_id: str,
        kind: str,
        amount: int,
        description: str,
        reference: str,
        reference_type: str,
        metadata: dict[str, Any],
    ) -> LedgerEntry:
        """Insert one entry. Raises DuplicateReferenceError if the key exists."""
        ...
