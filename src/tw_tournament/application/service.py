"""TournamentApplicationService — admin definition and lifecycle of tournaments,
plus the room and prize details handed to registered players.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.errors import (
    InvalidStatusTransitionError,
    InvalidTournamentError,
    TournamentNotFoundError,
)
from src.tw_tournament.application.schemas import RoomResponse, TournamentResponse
from src.tw_tournament.domain.models import (
    PrizeTableUpdate,
    RoomDetailsUpdate,
    TournamentDefinition,
)
from src.tw_tournament.domain.repository import TournamentRepositoryProtocol
from src.tw_tournament.domain.rules import (
    can_transition,
    check_room_access,
    validate_definition,
    validate_prize_update,
    validate_room_update,
)
from src.tw_tournament.infrastructure.persistence import TournamentRepository

logger = logging.getLogger(__name__)


class TournamentApplicationService:
    def __init__(self, repo: TournamentRepositoryProtocol | None = None) -> None:
        self._repo: TournamentRepositoryProtocol = repo or TournamentRepository()

    async def get_tournament(self, db: AsyncSession, tournament_id: str) -> TournamentResponse:
        tournament = await self._repo.get_tournament(db, tournament_id)
        if tournament is None:
            raise TournamentNotFoundError(tournament_id)
        return TournamentResponse.from_domain(tournament)

    async def create_tournament(
        self, db: AsyncSession, definition: TournamentDefinition
    ) -> TournamentResponse:
        problems = validate_definition(definition)
        if problems:
            raise InvalidTournamentError(problems)

        try:
            tournament = await self._repo.create_tournament(db, definition)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Tournament created: id=%s code=%s mode=%s slots=%d",
            tournament.id, tournament.code, tournament.mode, tournament.max_slots,
        )
        return TournamentResponse.from_domain(tournament)

    async def update_status(
        self, db: AsyncSession, tournament_id: str, new_status: str
    ) -> TournamentResponse:
        try:
            current = await self._repo.get_tournament(db, tournament_id)
            if current is None:
                raise TournamentNotFoundError(tournament_id)
            if not can_transition(current.status, new_status):
                raise InvalidStatusTransitionError(current.status, new_status)

            # Guarded on the status we validated against; a concurrent change
            # shows up as a miss and is re-reported against the fresh status.
            updated = await self._repo.update_status(
                db, tournament_id, current.status, new_status
            )
            if updated is None:
                fresh = await self._repo.get_tournament(db, tournament_id)
                raise InvalidStatusTransitionError(
                    fresh.status if fresh else current.status, new_status
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Tournament status changed: id=%s %s -> %s",
            tournament_id, current.status, updated.status,
        )
        return TournamentResponse.from_domain(updated)

    async def update_room_details(
        self, db: AsyncSession, tournament_id: str, update: RoomDetailsUpdate
    ) -> RoomResponse:
        problems = validate_room_update(update)
        if problems:
            raise InvalidTournamentError(problems)

        try:
            current = await self._repo.get_tournament(db, tournament_id)
            if current is None:
                raise TournamentNotFoundError(tournament_id)
            updated = await self._repo.update_room_details(
                db, tournament_id, update.apply(current.room)
            )
            if updated is None:
                raise TournamentNotFoundError(tournament_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Tournament room updated: id=%s room_id=%s", tournament_id, updated.room.room_id
        )
        return RoomResponse.from_domain(updated)

    async def update_prizes(
        self, db: AsyncSession, tournament_id: str, update: PrizeTableUpdate
    ) -> RoomResponse:
        problems = validate_prize_update(update)
        if problems:
            raise InvalidTournamentError(problems)

        try:
            current = await self._repo.get_tournament(db, tournament_id)
            if current is None:
                raise TournamentNotFoundError(tournament_id)
            updated = await self._repo.update_prizes(
                db, tournament_id, update.apply(current.prizes)
            )
            if updated is None:
                raise TournamentNotFoundError(tournament_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Tournament prizes updated: id=%s", tournament_id)
        return RoomResponse.from_domain(updated)

    async def get_room(self, db: AsyncSession, tournament_id: str, user_id: str) -> RoomResponse:
        tournament = await self._repo.get_tournament(db, tournament_id)
        if tournament is None:
            raise TournamentNotFoundError(tournament_id)
        check_room_access(tournament, user_id)
        return RoomResponse.from_domain(tournament)
