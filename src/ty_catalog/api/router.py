"""ty_catalog REST endpoints.

GET /assets: catalog with network-wide investment totals
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_catalog.application.service import CatalogApplicationService
from src.ty_common.database import get_db_session
from src.ty_common.response import ApiResponse, success_response

router = APIRouter(prefix="/assets", tags=["assets"])

_service = CatalogApplicationService()


@router.get("")
async def list_assets(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_assets(db)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
