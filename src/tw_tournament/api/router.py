"""tw_tournament REST API — public read, admin create, status, room and prizes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.database import get_db_session
from src.tw_common.response import ApiResponse, success_response
from src.tw_gateway.auth.dependencies import get_current_user, require_admin
from src.tw_tournament.application.schemas import (
    CreateTournamentRequest,
    PrizeTableRequest,
    RoomDetailsRequest,
    UpdateStatusRequest,
)
from src.tw_tournament.application.service import TournamentApplicationService
from src.tw_wallet.infrastructure.db_models import UserModel

router = APIRouter(prefix="/tournaments", tags=["tournaments"])

_service = TournamentApplicationService()


@router.get("/{tournament_id}")
async def get_tournament(
    tournament_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_tournament(db, tournament_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("")
async def create_tournament(
    body: CreateTournamentRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_tournament(db, body.to_definition())
    resp = success_response(data.model_dump(mode="json"), message="tournament created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{tournament_id}/status")
async def update_status(
    tournament_id: str,
    body: UpdateStatusRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_status(db, tournament_id, body.status.value)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{tournament_id}/room")
async def get_room(
    tournament_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_room(db, tournament_id, str(current_user.id))
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{tournament_id}/room")
async def update_room_details(
    tournament_id: str,
    body: RoomDetailsRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_room_details(db, tournament_id, body.to_update())
    resp = success_response(data.model_dump(mode="json"), message="room details updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{tournament_id}/prizes")
async def update_prizes(
    tournament_id: str,
    body: PrizeTableRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_prizes(db, tournament_id, body.to_update())
    resp = success_response(data.model_dump(mode="json"), message="prizes updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
