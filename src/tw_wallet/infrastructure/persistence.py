"""AccountRepository and LedgerRepository — raw SQL implementations.

Balance mutations are single atomic `UPDATE ... RETURNING` statements.
A result of 0 rows means a guard predicate failed (version moved, balance
would go negative, user missing).

Transaction ownership: the CALLER (application service / coordinator) commits
or rolls back. Nothing here commits.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.errors import DuplicateReferenceError
from src.tw_wallet.domain.models import BalanceAccount, BalanceSplit, LedgerEntry, UserAccount

# ---------------------------------------------------------------------------
# SQL: users (embedded balance)
# ---------------------------------------------------------------------------

_GET_USER_SQL = text("""
    SELECT id, fullname, email, mobile, age, state,
           deposit_balance, winning_balance, version
    FROM users
    WHERE id = :user_id
""")

_DEBIT_SQL = text("""
    UPDATE users
    SET deposit_balance = deposit_balance - :from_deposit,
        winning_balance = winning_balance - :from_winning,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :user_id
      AND version = :expected_version
      AND deposit_balance >= :from_deposit
      AND winning_balance >= :from_winning
    RETURNING id, deposit_balance, winning_balance, version
""")

_CREDIT_DEPOSIT_SQL = text("""
    UPDATE users
    SET deposit_balance = deposit_balance + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :user_id
    RETURNING id, deposit_balance, winning_balance, version
""")

_CREDIT_WINNING_SQL = text("""
    UPDATE users
    SET winning_balance = winning_balance + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :user_id
    RETURNING id, deposit_balance, winning_balance, version
""")

# ---------------------------------------------------------------------------
# SQL: ledger_entries (append-only)
# ---------------------------------------------------------------------------

_LEDGER_COLUMNS = """
    id, user_id, kind, amount, description, reference, reference_type,
    status, metadata, created_at
"""

_FIND_LEDGER_SQL = text(f"""
    SELECT {_LEDGER_COLUMNS}
    FROM ledger_entries
    WHERE user_id = :user_id
      AND reference = :reference
      AND reference_type = :reference_type
""")

# ON CONFLICT keeps the transaction usable when a concurrent append won the
# unique key; an empty RETURNING is the duplicate signal.
_INSERT_LEDGER_SQL = text(f"""
    INSERT INTO ledger_entries
        (user_id, kind, amount, description, reference, reference_type, metadata)
    VALUES
        (:user_id, :kind, :amount, :description, :reference, :reference_type,
         CAST(:metadata AS JSONB))
    ON CONFLICT (user_id, reference, reference_type) DO NOTHING
    RETURNING {_LEDGER_COLUMNS}
""")


def _row_to_balance(row: object) -> BalanceAccount:
    return BalanceAccount(
        user_id=str(row.id),  # type: ignore[attr-defined]
        deposit_balance=row.deposit_balance,  # type: ignore[attr-defined]
        winning_balance=row.winning_balance,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
    )


def _row_to_user(row: object) -> UserAccount:
    return UserAccount(
        id=str(row.id),  # type: ignore[attr-defined]
        fullname=row.fullname,  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        mobile=row.mobile or "",  # type: ignore[attr-defined]
        age=row.age,  # type: ignore[attr-defined]
        state=row.state or "",  # type: ignore[attr-defined]
        balance=_row_to_balance(row),
    )


def _load_metadata(raw: Any) -> dict[str, Any]:
    # asyncpg hands JSONB back as text when the statement carries no type info
    if raw is None:
        return {}
    if isinstance(raw, str):
        return dict(json.loads(raw))
    return dict(raw)


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        kind=row.kind,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        reference=row.reference,  # type: ignore[attr-defined]
        reference_type=row.reference_type,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        metadata=_load_metadata(row.metadata),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Concrete repository — every balance change is one guarded UPDATE."""

    async def get_user_account(
        self, db: AsyncSession, user_id: str
    ) -> UserAccount | None:
        result = await db.execute(_GET_USER_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_user(row) if row else None

    async def apply_debit(
        self, db: AsyncSession, account: BalanceAccount, split: BalanceSplit
    ) -> BalanceAccount | None:
        result = await db.execute(
            _DEBIT_SQL,
            {
                "user_id": account.user_id,
                "from_deposit": split.from_deposit,
                "from_winning": split.from_winning,
                "expected_version": account.version,
            },
        )
        row = result.fetchone()
        return _row_to_balance(row) if row else None

    async def credit_deposit(
        self, db: AsyncSession, user_id: str, amount: int
    ) -> BalanceAccount | None:
        result = await db.execute(_CREDIT_DEPOSIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        return _row_to_balance(row) if row else None

    async def credit_winning(
        self, db: AsyncSession, user_id: str, amount: int
    ) -> BalanceAccount | None:
        result = await db.execute(_CREDIT_WINNING_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        return _row_to_balance(row) if row else None


class LedgerRepository:
    """Concrete ledger store. UNIQUE (user_id, reference, reference_type) is the backstop."""

    async def find_by_reference(
        self,
        db: AsyncSession,
        user_id: str,
        reference: str,
        reference_type: str,
    ) -> LedgerEntry | None:
        result = await db.execute(
            _FIND_LEDGER_SQL,
            {"user_id": user_id, "reference": reference, "reference_type": reference_type},
        )
        row = result.fetchone()
        return _row_to_ledger(row) if row else None

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
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "user_id": user_id,
                "kind": kind,
                "amount": amount,
                "description": description,
                "reference": reference,
                "reference_type": reference_type,
                "metadata": json.dumps(metadata, default=str),
            },
        )
        row = result.fetchone()
        if row is None:
            raise DuplicateReferenceError(reference, reference_type)
        return _row_to_ledger(row)
