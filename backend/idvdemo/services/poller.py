import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 90
DEFAULT_INTERVAL = 2.0  # seconds; 90 attempts is about three minutes


async def wait_for_result(
    client: httpx.AsyncClient,
    token: str,
    attempts: int = DEFAULT_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
) -> dict[str, Any] | None:
    """Poll ``GET /webhook?token=`` until the job's callback has been stored.

    A 404 means the result has not arrived yet. Returns the stored record,
    or None once every attempt has been used. Other statuses raise
    httpx.HTTPStatusError.
    """
    for attempt in range(1, attempts + 1):
        r = await client.get("/webhook", params={"token": token})
        if r.status_code == 404:
            logger.debug(f"Result not ready (attempt {attempt}/{attempts})")
            if attempt < attempts:
                await asyncio.sleep(interval)
            continue
        r.raise_for_status()
        return r.json()["data"]
    logger.info(f"Gave up waiting for result after {attempts} attempts")
    return None
