"""Redis pub/sub implementation of ReferralNotifier.

A separate bot process subscribes to REFERRAL_NOTIFY_CHANNEL and delivers the
chat messages; this service only publishes the event.
"""

import json
from dataclasses import asdict

from config.settings import settings
from src.ty_common.redis_client import get_redis
from src.ty_referral.domain.events import ReferralSucceeded


class RedisReferralNotifier:
    def __init__(self, channel: str | None = None) -> None:
        self._channel = channel or settings.REFERRAL_NOTIFY_CHANNEL

    async def referral_succeeded(self, event: ReferralSucceeded) -> None:
        redis = await get_redis()
        payload = {"event": "referral_succeeded", **asdict(event)}
        await redis.publish(self._channel, json.dumps(payload))
