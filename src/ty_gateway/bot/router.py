"""Chat-bot webhook.

POST /bot/webhook  one bot update per call. Always answers 200 for business
outcomes so the bot platform does not redeliver; the envelope's data says
what happened. Infrastructure failures still surface as 500.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_account.application.service import AccountApplicationService
from src.ty_common.database import get_db_session
from src.ty_common.response import ApiResponse, success_response
from src.ty_gateway.bot.parser import ReferCommand, parse_command
from src.ty_referral.application.service import ReferralApplicationService
from src.ty_referral.domain.models import ReferralResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bot", tags=["bot"])

_accounts = AccountApplicationService()
_referrals = ReferralApplicationService()


def _referral_data(result: ReferralResult, account_id: str) -> dict[str, Any]:
    return {
        "handled": True,
        "action": "referral",
        "ok": result.applied,
        "outcome": result.outcome.value,
        "account_id": account_id,
        "inviter_username": result.payload.get("inviter_username"),
    }


@router.post("/webhook")
async def webhook(
    update: Annotated[dict[str, Any], Body()],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    command = parse_command(update)
    if command is None:
        data: dict[str, Any] = {"handled": False, "action": "ignored"}
    elif isinstance(command, ReferCommand):
        result = await _referrals.claim_by_username(
            db, command.inviter_username, command.account_id, command.username
        )
        logger.info(
            "Bot referral by username: inviter=%s referred=%s outcome=%s",
            command.inviter_username, command.account_id, result.outcome.value,
        )
        data = _referral_data(result, command.account_id)
    elif command.referrer_id is not None:
        result = await _referrals.claim(
            db, command.referrer_id, command.account_id, command.username
        )
        logger.info(
            "Bot referral: referrer=%s referred=%s outcome=%s",
            command.referrer_id, command.account_id, result.outcome.value,
        )
        data = _referral_data(result, command.account_id)
    else:
        account = await _accounts.fetch_or_create(db, command.account_id, command.username)
        data = {
            "handled": True,
            "action": "account",
            "ok": True,
            "account_id": account.id,
        }
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
