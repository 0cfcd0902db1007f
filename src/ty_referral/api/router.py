"""ty_referral REST endpoints.

POST /referrals              200 success | already_applied, 400 self_referral,
                             404 inviter_not_found, 409 already_referred
POST /referrals/by-username  same outcomes, inviter looked up by username
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_common.database import get_db_session
from src.ty_common.response import ApiResponse, success_response
from src.ty_referral.application.schemas import (
    ClaimReferralByUsernameRequest,
    ClaimReferralRequest,
)
from src.ty_referral.application.service import ReferralApplicationService

router = APIRouter(prefix="/referrals", tags=["referrals"])

_service = ReferralApplicationService()


@router.post("")
async def claim_referral(
    body: ClaimReferralRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.claim_or_raise(
        db, body.referrer_id, body.referred_id, body.referred_username
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/by-username")
async def claim_referral_by_username(
    body: ClaimReferralByUsernameRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.claim_by_username_or_raise(
        db, body.inviter_username, body.referred_id, body.referred_username
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
