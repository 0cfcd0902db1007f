"""Clock helpers."""

import time


def now_ms() -> int:
    """Milliseconds since the Unix epoch: the unit of accounts.last_reward_at."""
    return int(time.time() * 1000)
