"""ty_account REST API: fetch-or-create, read, profile update, ledger."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_account.application.schemas import (
    FetchOrCreateAccountRequest,
    UpdateAccountRequest,
)
from src.ty_account.application.service import AccountApplicationService
from src.ty_common.database import get_db_session
from src.ty_common.enums import LedgerEntryType
from src.ty_common.response import ApiResponse, success_response

router = APIRouter(prefix="/accounts", tags=["accounts"])

_service = AccountApplicationService()


@router.post("")
async def fetch_or_create_account(
    body: FetchOrCreateAccountRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.fetch_or_create(db, body.id, body.username)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{account_id}")
async def get_account(
    account_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_account(db, account_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.patch("/{account_id}")
async def update_account_fields(
    account_id: str,
    body: UpdateAccountRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_fields(db, account_id, body.username, body.subscribed)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{account_id}/ledger")
async def list_ledger(
    account_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    entry_type: LedgerEntryType | None = Query(None, description="Filter by LedgerEntryType"),
) -> ApiResponse:
    data = await _service.list_ledger(
        db, account_id, cursor, limit, entry_type.value if entry_type else None
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
