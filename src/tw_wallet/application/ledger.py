"""TransactionLedger — idempotent append of monetary events.

The (user_id, reference, reference_type) triple is the only dedupe key:
  1. look the key up; a hit returns the stored entry unchanged
  2. otherwise insert; the UNIQUE index is the race backstop, and a lost race
     (DuplicateReferenceError) is answered with the winner's entry

The ledger never moves money. Callers mutate balances in the same
transaction before or after appending.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.enums import CREDIT_KINDS, ReferenceType, TransactionKind
from src.tw_common.errors import DuplicateReferenceError, InternalError, InvalidAmountError
from src.tw_wallet.domain.models import LedgerEntry
from src.tw_wallet.domain.repository import LedgerRepositoryProtocol
from src.tw_wallet.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)


def _check_sign(kind: TransactionKind, amount: int) -> None:
    if kind in CREDIT_KINDS:
        if amount <= 0:
            raise InvalidAmountError(f"{kind.value} amount must be > 0, got {amount}")
    elif amount > 0:
        raise InvalidAmountError(f"{kind.value} amount must be <= 0, got {amount}")


class TransactionLedger:
    def __init__(self, repo: LedgerRepositoryProtocol | None = None) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()

    async def find(
        self,
        db: AsyncSession,
        user_id: str,
        reference: str,
        reference_type: ReferenceType | str,
    ) -> LedgerEntry | None:
        return await self._repo.find_by_reference(
            db, user_id, reference, ReferenceType(reference_type).value
        )

    async def append(
        self,
        db: AsyncSession,
        user_id: str,
        kind: TransactionKind | str,
        amount: int,
        description: str,
        reference: str,
        reference_type: ReferenceType | str,
        metadata: dict[str, Any] | None = None,
    ) -> tuple[LedgerEntry, bool]:
        """Record one event. Returns (entry, created).

        created=False means the key was already present; the returned entry is
        the stored one and nothing was written.
        """
        kind = TransactionKind(kind)
        ref_type = ReferenceType(reference_type).value
        if not reference:
            raise InvalidAmountError("ledger reference must not be empty")
        _check_sign(kind, amount)

        existing = await self._repo.find_by_reference(db, user_id, reference, ref_type)
        if existing is not None:
            logger.info(
                "Ledger dedupe hit: user=%s ref=%s/%s entry=%s",
                user_id, ref_type, reference, existing.id,
            )
            return existing, False

        try:
            entry = await self._repo.insert_entry(
                db,
                user_id=user_id,
                kind=kind.value,
                amount=amount,
                description=description,
                reference=reference,
                reference_type=ref_type,
                metadata=metadata or {},
            )
        except DuplicateReferenceError:
            winner = await self._repo.find_by_reference(db, user_id, reference, ref_type)
            if winner is None:
                raise InternalError(
                    f"Ledger key {ref_type}/{reference} conflicted but no entry is visible"
                ) from None
            logger.info(
                "Ledger append lost race: user=%s ref=%s/%s entry=%s",
                user_id, ref_type, reference, winner.id,
            )
            return winner, False

        logger.info(
            "Ledger entry recorded: user=%s kind=%s amount=%d ref=%s/%s entry=%s",
            user_id, kind.value, amount, ref_type, reference, entry.id,
        )
        return entry, True
