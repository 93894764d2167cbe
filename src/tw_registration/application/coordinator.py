"""RegistrationCoordinator — the atomic paid-entry workflow.

One attempt runs in a single database transaction:

  1. load tournament + user, pre-check admission, validate the form and
     check the Free Fire ID
  2. reserve a seat (guarded UPDATE on the tournament row)
  3. split the fee deposit-first from the balances read in this transaction
  4. debit the user, guarded on the version read in step 1
  5. append the entry_fee ledger entry keyed by the tournament id
  6. insert the registration with user and tournament snapshots
  7. commit

Any failure rolls the whole transaction back, so a rejected attempt leaves
no seat, no debit and no ledger row behind. TransientConflictError (version
moved under us, or a seat race we cannot attribute) re-runs the attempt from
step 1 with backoff.
"""

import logging
import uuid
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.enums import PaymentMethod, ReferenceType, TransactionKind
from src.tw_common.errors import (
    AlreadyRegisteredError,
    FreeFireIdTakenError,
    TournamentNotFoundError,
    TransientConflictError,
    UserNotFoundError,
)
from src.tw_common.retry import retry_on_conflict
from src.tw_registration.domain.models import (
    Registration,
    RegistrationOutcome,
    TournamentSnapshot,
    UserSnapshot,
)
from src.tw_registration.domain.repository import RegistrationRepositoryProtocol
from src.tw_registration.infrastructure.persistence import RegistrationRepository
from src.tw_tournament.domain.capacity import CapacityGuard, RegistrationInput
from src.tw_tournament.domain.repository import TournamentRepositoryProtocol
from src.tw_tournament.infrastructure.persistence import TournamentRepository
from src.tw_wallet.application.ledger import TransactionLedger
from src.tw_wallet.domain.deduction import compute_split
from src.tw_wallet.domain.repository import AccountRepositoryProtocol
from src.tw_wallet.infrastructure.persistence import AccountRepository

logger = logging.getLogger(__name__)


def _new_registration_id() -> str:
    return str(uuid.uuid4())


class RegistrationCoordinator:
    def __init__(
        self,
        tournaments: TournamentRepositoryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
        ledger: TransactionLedger | None = None,
        registrations: RegistrationRepositoryProtocol | None = None,
        max_attempts: int = 3,
        backoff_seconds: float = 0.05,
        id_factory: Callable[[], str] = _new_registration_id,
    ) -> None:
        self._tournaments: TournamentRepositoryProtocol = tournaments or TournamentRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._ledger = ledger or TransactionLedger()
        self._registrations: RegistrationRepositoryProtocol = (
            registrations or RegistrationRepository()
        )
        self._guard = CapacityGuard(self._tournaments)
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self._id_factory = id_factory

    async def register(
        self,
        db: AsyncSession,
        user_id: str,
        tournament_id: str,
        form: RegistrationInput,
    ) -> RegistrationOutcome:
        async def attempt() -> RegistrationOutcome:
            try:
                outcome = await self._register_once(db, user_id, tournament_id, form)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
            return outcome

        outcome = await retry_on_conflict(
            attempt,
            max_attempts=self._max_attempts,
            backoff_seconds=self._backoff_seconds,
            label=f"register user={user_id} tournament={tournament_id}",
        )
        logger.info(
            "Registration complete: user=%s tournament=%s reg=%s "
            "fee=%d (deposit=%d winning=%d) balance_after=%d",
            user_id, tournament_id, outcome.registration_id, outcome.amount_paid,
            outcome.from_deposit, outcome.from_winning, outcome.total_balance,
        )
        return outcome

    async def _register_once(
        self,
        db: AsyncSession,
        user_id: str,
        tournament_id: str,
        form: RegistrationInput,
    ) -> RegistrationOutcome:
        tournament = await self._tournaments.get_tournament(db, tournament_id)
        if tournament is None:
            raise TournamentNotFoundError(tournament_id)
        user = await self._accounts.get_user_account(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        CapacityGuard.check_admission(tournament, user_id).raise_for_rejection()
        checked = CapacityGuard.require_valid_input(tournament, form)
        if await self._registrations.free_fire_id_taken(
            db, tournament_id, checked.free_fire_id
        ):
            raise FreeFireIdTakenError(checked.free_fire_id)

        reserved = await self._guard.reserve(db, tournament, user_id)

        fee = reserved.entry_fee
        split = compute_split(user.balance.deposit_balance, user.balance.winning_balance, fee)
        balance = await self._accounts.apply_debit(db, user.balance, split)
        if balance is None:
            raise TransientConflictError(f"balance of user {user_id} changed")

        entry, created = await self._ledger.append(
            db,
            user_id=user_id,
            kind=TransactionKind.ENTRY_FEE,
            amount=-fee,
            description=f"Entry fee for tournament {reserved.code}",
            reference=tournament_id,
            reference_type=ReferenceType.TOURNAMENT_ID,
            metadata={
                "tournament_code": reserved.code,
                "from_deposit": split.from_deposit,
                "from_winning": split.from_winning,
            },
        )
        if not created:
            # The fee for this tournament was charged before: this user is
            # already in, whatever the occupancy array says.
            raise AlreadyRegisteredError(tournament_id)

        registration = await self._registrations.insert_registration(
            db,
            Registration(
                id=self._id_factory(),
                user_id=user_id,
                tournament_id=tournament_id,
                free_fire_id=checked.free_fire_id,
                team_selection=checked.team_selection.value if checked.team_selection else None,
                amount_paid=fee,
                from_deposit=split.from_deposit,
                from_winning=split.from_winning,
                ledger_entry_id=entry.id,
                payment_method=PaymentMethod.WALLET.value,
                user_snapshot=UserSnapshot(
                    fullname=user.fullname,
                    email=user.email,
                    mobile=user.mobile,
                    age=user.age,
                    state=user.state,
                ),
                tournament_snapshot=TournamentSnapshot(
                    code=reserved.code,
                    mode=reserved.mode,
                    team_size=reserved.team_size,
                    map=reserved.map,
                    start_time=reserved.start_time,
                ),
            ),
        )

        return RegistrationOutcome(
            registration_id=registration.id,
            tournament_id=tournament_id,
            amount_paid=fee,
            from_deposit=split.from_deposit,
            from_winning=split.from_winning,
            deposit_balance=balance.deposit_balance,
            winning_balance=balance.winning_balance,
            total_balance=balance.total_balance,
            team_selection=registration.team_selection,
            ledger_entry_id=entry.id,
        )
