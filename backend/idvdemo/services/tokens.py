"""Best-effort extraction of a job id from a Vouched session token.

Tokens are never verified here; they are only used to correlate a
callback with the browser session that started the job.
"""

import base64
import binascii
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

JOB_ID_CLAIM = "job_id"


def _b64url_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def decode_claims(token: str) -> dict[str, Any] | None:
    parts = token.split(".")
    if len(parts) != 3:
        return None
    try:
        claims = json.loads(_b64url_decode(parts[1]).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        logger.info(f"Could not decode token payload: {e}")
        return None
    return claims if isinstance(claims, dict) else None


def lookup_key(token: str) -> str:
    """Job id from a JWT-shaped token, otherwise the raw token."""
    claims = decode_claims(token)
    if claims and claims.get(JOB_ID_CLAIM):
        return str(claims[JOB_ID_CLAIM])
    return token


def extract_token(payload: Any) -> str | None:
    """Token carried by a callback, checked as token, job.token, jobToken."""
    if not isinstance(payload, dict):
        return None
    job = payload.get("job")
    for candidate in (
        payload.get("token"),
        job.get("token") if isinstance(job, dict) else None,
        payload.get("jobToken"),
    ):
        if candidate and isinstance(candidate, str):
            return candidate
    return None
