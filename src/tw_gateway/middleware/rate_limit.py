"""Per-user fixed-window rate limiting backed by Redis.

Key pattern: "ratelimit:{group}:{user_id}". The first hit in a window sets
the expiry, so the counter disappears on its own when the window ends.

    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, window)
    if count > limit:
        raise RateLimitError()
"""

import logging
from typing import Annotated

import redis.asyncio as aioredis
from fastapi import Depends

from config.settings import settings
from src.tw_common.errors import RateLimitError
from src.tw_common.redis_client import get_redis
from src.tw_gateway.auth.dependencies import get_current_user
from src.tw_wallet.infrastructure.db_models import UserModel

logger = logging.getLogger(__name__)


class FixedWindowRateLimiter:
    def __init__(self, group: str, limit: int, window_seconds: int = 60) -> None:
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self.group = group
        self.limit = limit
        self.window_seconds = window_seconds

    def key_for(self, subject: str) -> str:
        return f"ratelimit:{self.group}:{subject}"

    async def hit(self, redis: aioredis.Redis, subject: str) -> int:
        """Count one request for `subject`; raise RateLimitError over the limit."""
        key = self.key_for(subject)
        count = int(await redis.incr(key))
        if count == 1:
            await redis.expire(key, self.window_seconds)
        if count > self.limit:
            logger.warning(
                "Rate limit hit: group=%s subject=%s count=%d limit=%d",
                self.group, subject, count, self.limit,
            )
            raise RateLimitError()
        return count


registration_limiter = FixedWindowRateLimiter(
    "register", settings.REGISTRATION_RATE_LIMIT_PER_MINUTE, window_seconds=60
)


async def limit_registrations(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    redis: Annotated[aioredis.Redis, Depends(get_redis)],
) -> UserModel:
    """Dependency for the register endpoint: authenticate, then count the attempt."""
    await registration_limiter.hit(redis, str(current_user.id))
    return current_user
