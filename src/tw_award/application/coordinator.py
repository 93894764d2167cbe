"""AwardCoordinator — credit prize money for a completed tournament.

The batch is checked once (tournament exists and is completed), then every
winner gets its own transaction. A failing winner is rolled back and
reported; the rest of the batch still runs. Re-submitting a batch is safe:
each prize has its own ledger reference and a known reference credits
nothing.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_award.domain.models import (
    AwardBatchResult,
    AwardStatus,
    WinnerAward,
    WinnerResult,
    award_reference,
)
from src.tw_common.enums import ReferenceType, TournamentStatus, TransactionKind
from src.tw_common.errors import (
    AppError,
    InternalError,
    InvalidAmountError,
    TournamentNotCompletedError,
    TournamentNotFoundError,
    UserNotFoundError,
)
from src.tw_tournament.domain.models import Tournament
from src.tw_tournament.domain.repository import TournamentRepositoryProtocol
from src.tw_tournament.infrastructure.persistence import TournamentRepository
from src.tw_wallet.application.ledger import TransactionLedger
from src.tw_wallet.domain.repository import AccountRepositoryProtocol
from src.tw_wallet.infrastructure.persistence import AccountRepository

logger = logging.getLogger(__name__)


class AwardCoordinator:
    def __init__(
        self,
        tournaments: TournamentRepositoryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
        ledger: TransactionLedger | None = None,
    ) -> None:
        self._tournaments: TournamentRepositoryProtocol = tournaments or TournamentRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._ledger = ledger or TransactionLedger()

    async def award(
        self, db: AsyncSession, tournament_id: str, winners: list[WinnerAward]
    ) -> AwardBatchResult:
        tournament = await self._tournaments.get_tournament(db, tournament_id)
        if tournament is None:
            raise TournamentNotFoundError(tournament_id)
        if tournament.status != TournamentStatus.COMPLETED.value:
            raise TournamentNotCompletedError(tournament_id)

        batch = AwardBatchResult(tournament_id=tournament_id)
        for winner in winners:
            batch.results.append(await self._award_one(db, tournament, winner))

        logger.info(
            "Award batch done: tournament=%s awarded=%d already=%d failed=%d total=%d",
            tournament_id,
            batch.count(AwardStatus.AWARDED),
            batch.count(AwardStatus.ALREADY_AWARDED),
            batch.count(AwardStatus.FAILED),
            batch.total_awarded,
        )
        return batch

    async def _award_one(
        self, db: AsyncSession, tournament: Tournament, winner: WinnerAward
    ) -> WinnerResult:
        try:
            result = await self._credit(db, tournament, winner)
            if result.status is AwardStatus.AWARDED:
                await db.commit()
            else:
                await db.rollback()
            return result
        except AppError as exc:
            await db.rollback()
            logger.warning(
                "Award failed: tournament=%s user=%s position=%d: %s",
                tournament.id, winner.user_id, winner.position, exc.message,
            )
            return self._failed(winner, exc.message, exc.code)
        except SQLAlchemyError:
            await db.rollback()
            logger.exception(
                "Award failed on storage: tournament=%s user=%s position=%d",
                tournament.id, winner.user_id, winner.position,
            )
            storage = InternalError("storage error while crediting winnings")
            return self._failed(winner, storage.message, storage.code)

    async def _credit(
        self, db: AsyncSession, tournament: Tournament, winner: WinnerAward
    ) -> WinnerResult:
        if winner.amount <= 0:
            raise InvalidAmountError(f"prize must be > 0 cents, got {winner.amount}")

        user = await self._accounts.get_user_account(db, winner.user_id)
        if user is None:
            raise UserNotFoundError(winner.user_id)

        reference = award_reference(tournament.id, winner.user_id, winner.position)
        existing = await self._ledger.find(
            db, winner.user_id, reference, ReferenceType.TOURNAMENT_ID
        )
        if existing is not None:
            return WinnerResult(
                user_id=winner.user_id,
                position=winner.position,
                amount=winner.amount,
                status=AwardStatus.ALREADY_AWARDED,
                ledger_entry_id=existing.id,
                winning_balance=user.balance.winning_balance,
                total_balance=user.balance.total_balance,
            )

        balance = await self._accounts.credit_winning(db, winner.user_id, winner.amount)
        if balance is None:
            raise UserNotFoundError(winner.user_id)

        entry, created = await self._ledger.append(
            db,
            user_id=winner.user_id,
            kind=TransactionKind.WINNING,
            amount=winner.amount,
            description=f"Winnings for tournament {tournament.code} (position {winner.position})",
            reference=reference,
            reference_type=ReferenceType.TOURNAMENT_ID,
            metadata={"tournament_id": tournament.id, "position": winner.position},
        )
        if not created:
            # A concurrent award wrote this reference first; the caller rolls
            # our credit back.
            return WinnerResult(
                user_id=winner.user_id,
                position=winner.position,
                amount=winner.amount,
                status=AwardStatus.ALREADY_AWARDED,
                ledger_entry_id=entry.id,
                winning_balance=user.balance.winning_balance,
                total_balance=user.balance.total_balance,
            )

        return WinnerResult(
            user_id=winner.user_id,
            position=winner.position,
            amount=winner.amount,
            status=AwardStatus.AWARDED,
            ledger_entry_id=entry.id,
            winning_balance=balance.winning_balance,
            total_balance=balance.total_balance,
        )

    @staticmethod
    def _failed(winner: WinnerAward, error: str, error_code: int) -> WinnerResult:
        return WinnerResult(
            user_id=winner.user_id,
            position=winner.position,
            amount=winner.amount,
            status=AwardStatus.FAILED,
            error=error,
            error_code=error_code,
        )
