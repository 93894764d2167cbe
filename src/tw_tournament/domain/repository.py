"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_tournament.domain.models import (
    PrizeTable,
    RoomDetails,
    Tournament,
    TournamentDefinition,
)


class TournamentRepositoryProtocol(Protocol):
    async def get_tournament(
        self, db: AsyncSession, tournament_id: str
    ) -> Tournament | None: ...

    async def reserve_slot(
        self, db: AsyncSession, tournament_id: str, user_id: str
    ) -> Tournament | None:
        """Atomically admit `user_id` if upcoming, not full and not yet in.

        Check and increment happen in one statement. Returns None when any
        guard fails.
        """
        ...

    async def create_tournament(
        self, db: AsyncSession, definition: TournamentDefinition
    ) -> Tournament: ...

    async def update_status(
        self, db: AsyncSession, tournament_id: str, expected_status: str, new_status: str
    ) -> Tournament | None: ...

    async def update_room_details(
        self, db: AsyncSession, tournament_id: str, room: RoomDetails
    ) -> Tournament | None: ...

    async def update_prizes(
        self, db: AsyncSession, tournament_id: str, prizes: PrizeTable
    ) -> Tournament | None: ...
