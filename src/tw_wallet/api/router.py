"""tw_wallet REST API — own balance, plus admin/system money movements."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tw_common.database import get_db_session
from src.tw_common.response import ApiResponse, success_response
from src.tw_gateway.auth.dependencies import get_current_user, require_admin
from src.tw_wallet.application.schemas import ConfirmDepositRequest, ManualTransactionRequest
from src.tw_wallet.application.service import WalletApplicationService
from src.tw_wallet.infrastructure.db_models import UserModel

router = APIRouter(prefix="/wallet", tags=["wallet"])

_service = WalletApplicationService(
    max_attempts=settings.REGISTRATION_MAX_ATTEMPTS,
    backoff_seconds=settings.CONFLICT_RETRY_BACKOFF_SECONDS,
)


@router.get("/balance")
async def get_balance(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, str(current_user.id))
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/deposits/confirm")
async def confirm_deposit(
    body: ConfirmDepositRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    """Called by the payment layer once the gateway signature has been verified."""
    data = await _service.confirm_deposit(
        db, body.user_id, body.amount_cents, body.payment_id, body.gateway_order_id
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/transactions")
async def record_transaction(
    body: ManualTransactionRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.record_transaction(
        db,
        user_id=body.user_id,
        kind=body.kind,
        amount_cents=body.amount_cents,
        description=body.description,
        reference=body.reference,
        reference_type=body.reference_type,
        metadata={"recorded_by": str(admin.id)},
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
