"""Chat-bot update parsing.

Turns a raw bot update into a command:
  /start                    -> StartCommand
  /start ref_<referrer_id>  -> StartCommand with referrer_id
  /refer <username>         -> ReferCommand
Anything else parses to None. A referral payload whose id could never match
an account is dropped, leaving a plain /start.
"""

from dataclasses import dataclass
from typing import Any

from src.ty_account.domain.models import MAX_ACCOUNT_ID_LENGTH

REFERRAL_PREFIX = "ref_"


@dataclass(frozen=True)
class StartCommand:
    account_id: str
    username: str
    referrer_id: str | None = None


@dataclass(frozen=True)
class ReferCommand:
    account_id: str
    username: str
    inviter_username: str


BotCommand = StartCommand | ReferCommand


def _sender_username(sender: dict[str, Any], account_id: str) -> str:
    username = (sender.get("username") or "").strip()
    if username:
        return username
    return f"{sender.get('first_name') or 'tg'}_{account_id}"


def _referrer_from_payload(payload: str) -> str | None:
    if not payload.startswith(REFERRAL_PREFIX):
        return None
    referrer_id = payload[len(REFERRAL_PREFIX):].strip()
    if not referrer_id or len(referrer_id) > MAX_ACCOUNT_ID_LENGTH:
        return None
    return referrer_id


def parse_command(update: dict[str, Any]) -> BotCommand | None:
    message = update.get("message") or update.get("edited_message")
    if not isinstance(message, dict):
        return None

    text = (message.get("text") or "").strip()
    parts = text.split()
    if not parts:
        return None
    name = parts[0].split("@", 1)[0]
    if name not in ("/start", "/refer"):
        return None

    sender = message.get("from") or {}
    if sender.get("id") is None:
        return None
    account_id = str(sender["id"])
    username = _sender_username(sender, account_id)

    if name == "/refer":
        inviter = parts[1].lstrip("@") if len(parts) > 1 else ""
        if not inviter:
            return None
        return ReferCommand(account_id=account_id, username=username, inviter_username=inviter)

    referrer_id = _referrer_from_payload(parts[1]) if len(parts) > 1 else None
    return StartCommand(account_id=account_id, username=username, referrer_id=referrer_id)
