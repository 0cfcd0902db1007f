"""ty_purchase REST endpoint.

POST /accounts/{account_id}/purchases: buy asset units with coins
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_common.database import get_db_session
from src.ty_common.response import ApiResponse, success_response
from src.ty_purchase.application.schemas import PurchaseRequest
from src.ty_purchase.application.service import PurchaseApplicationService

router = APIRouter(prefix="/accounts", tags=["purchases"])

_service = PurchaseApplicationService()


@router.post("/{account_id}/purchases")
async def purchase(
    account_id: str,
    body: PurchaseRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.purchase(
        db, account_id, body.asset_id, body.quantity, body.unit_cost
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
