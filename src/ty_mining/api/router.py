"""ty_mining REST endpoint.

POST /accounts/{account_id}/mine: 200 with the reward, 429 + Retry-After while cooling down
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_common.database import get_db_session
from src.ty_common.response import ApiResponse, success_response
from src.ty_mining.application.service import MiningApplicationService

router = APIRouter(prefix="/accounts", tags=["mining"])

_service = MiningApplicationService()


@router.post("/{account_id}/mine")
async def mine(
    account_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.mine(db, account_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
