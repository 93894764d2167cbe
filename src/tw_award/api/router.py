"""tw_award REST API — admin-only prize distribution."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_award.application.coordinator import AwardCoordinator
from src.tw_award.application.schemas import AwardRequest, AwardResponse
from src.tw_common.database import get_db_session
from src.tw_common.response import ApiResponse, success_response
from src.tw_gateway.auth.dependencies import require_admin
from src.tw_wallet.infrastructure.db_models import UserModel

router = APIRouter(prefix="/admin/tournaments", tags=["admin"])

_coordinator = AwardCoordinator()


@router.post("/{tournament_id}/award")
async def award_winnings(
    tournament_id: str,
    body: AwardRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    batch = await _coordinator.award(
        db, tournament_id, [w.to_domain() for w in body.winners]
    )
    data = AwardResponse.from_batch(batch)
    resp = success_response(data.model_dump(), message="Winnings processed")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
