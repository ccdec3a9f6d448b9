import logging

import redis.asyncio as redis
from fastapi import Request, Response
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from idvdemo.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

limiter = RateLimiter(times=settings.rate_limit_times, seconds=settings.rate_limit_seconds)


async def rate_limit(request: Request, response: Response):
    """Global rate limit; requests are let through if the limiter's Redis is down."""
    if not FastAPILimiter.redis:
        return
    try:
        await limiter(request, response)
    except redis.RedisError as e:
        logger.warning(f"Rate limiter unavailable, allowing request: {e}")
