"""ty_leaderboard REST endpoint.

GET /leaderboard?limit=N  top accounts by balance (default 20, capped at 100)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_common.database import get_db_session
from src.ty_common.response import ApiResponse, success_response
from src.ty_leaderboard.application.service import LeaderboardService

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])

_service = LeaderboardService()


@router.get("")
async def leaderboard(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int | None = Query(None, ge=1, description="Rows to return; capped server-side"),
) -> ApiResponse:
    result = await _service.top(db, limit)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
