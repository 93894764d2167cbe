"""RegistrationApplicationService — thin read side of registrations."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.errors import RegistrationNotFoundError
from src.tw_registration.application.schemas import RegistrationResponse
from src.tw_registration.domain.repository import RegistrationRepositoryProtocol
from src.tw_registration.infrastructure.persistence import RegistrationRepository


class RegistrationApplicationService:
    def __init__(self, repo: RegistrationRepositoryProtocol | None = None) -> None:
        self._repo: RegistrationRepositoryProtocol = repo or RegistrationRepository()

    async def get_registration(
        self, db: AsyncSession, user_id: str, tournament_id: str
    ) -> RegistrationResponse:
        registration = await self._repo.get_by_user_tournament(db, user_id, tournament_id)
        if registration is None:
            raise RegistrationNotFoundError(tournament_id)
        return RegistrationResponse.from_domain(registration)
