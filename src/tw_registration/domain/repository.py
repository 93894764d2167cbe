"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_registration.domain.models import Registration


class RegistrationRepositoryProtocol(Protocol):
    async def insert_registration(
        self, db: AsyncSession, registration: Registration
    ) -> Registration:
        """Insert one row.

        Raises AlreadyRegisteredError on (user_id, tournament_id) and
        FreeFireIdTakenError on (tournament_id, free_fire_id) uniqueness.
        """
        ...

    async def free_fire_id_taken(
        self, db: AsyncSession, tournament_id: str, free_fire_id: str
    ) -> bool: ...

    async def get_by_user_tournament(
        self, db: AsyncSession, user_id: str, tournament_id: str
    ) -> Registration | None: ...
