"""tw_registration REST API — register for a tournament, read own registration."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tw_common.database import get_db_session
from src.tw_common.response import ApiResponse, success_response
from src.tw_gateway.auth.dependencies import get_current_user
from src.tw_gateway.middleware.rate_limit import limit_registrations
from src.tw_registration.application.coordinator import RegistrationCoordinator
from src.tw_registration.application.schemas import RegisterRequest, RegistrationOutcomeResponse
from src.tw_registration.application.service import RegistrationApplicationService
from src.tw_wallet.infrastructure.db_models import UserModel

router = APIRouter(prefix="/tournaments", tags=["registrations"])

_coordinator = RegistrationCoordinator(
    max_attempts=settings.REGISTRATION_MAX_ATTEMPTS,
    backoff_seconds=settings.CONFLICT_RETRY_BACKOFF_SECONDS,
)
_service = RegistrationApplicationService()


@router.post("/{tournament_id}/register")
async def register(
    tournament_id: str,
    body: RegisterRequest,
    current_user: Annotated[UserModel, Depends(limit_registrations)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    outcome = await _coordinator.register(
        db, str(current_user.id), tournament_id, body.to_input()
    )
    data = RegistrationOutcomeResponse.from_outcome(outcome)
    resp = success_response(data.model_dump(), message="Successfully registered for tournament")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{tournament_id}/registration")
async def get_my_registration(
    tournament_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_registration(db, str(current_user.id), tournament_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
