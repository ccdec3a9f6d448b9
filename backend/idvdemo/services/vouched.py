import logging
from typing import Any

import httpx
from idvdemo.core.masking import mask_secret
from idvdemo.schemas.verification import (
    UpstreamResult,
    VerificationFailure,
    VerificationSuccess,
)

logger = logging.getLogger(__name__)

RAW_BODY_PREVIEW = 500


def local_status(upstream_status: int) -> int:
    """Status this service answers with when the vendor returns a non-2xx."""
    if 400 <= upstream_status < 500:
        return 400
    return 500


class VouchedClient:
    """Single-attempt JSON POSTs to the Vouched REST API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def post(
        self, path: str, payload: dict[str, Any], api_key: str, label: str
    ) -> UpstreamResult:
        logger.info(
            f"{label} request: POST {self.base_url}{path} "
            f"(X-API-Key: {mask_secret(api_key)}, {len(payload)} fields)"
        )
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                r = await client.post(
                    path,
                    json=payload,
                    headers={"X-API-Key": api_key, "Content-Type": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.error(f"{label} request failed: {exc!r}")
            return VerificationFailure(
                status_code=502,
                error="Network Error",
                message=f"Failed to connect to {label} API",
                code="NETWORK_ERROR",
                details=str(exc),
            )

        logger.info(f"{label} response: {r.status_code} ({len(r.content)} bytes)")
        try:
            data = r.json()
        except ValueError:
            logger.error(f"{label} returned a non-JSON body with status {r.status_code}")
            return VerificationFailure(
                status_code=502,
                error="Parse Error",
                message="Failed to parse API response as JSON",
                code="INVALID_RESPONSE_FORMAT",
                details={"responseText": r.text[:RAW_BODY_PREVIEW]},
            )

        if not r.is_success:
            return self._api_error(label, r, data)

        if not isinstance(data, dict):
            return VerificationFailure(
                status_code=502,
                error="Invalid Response",
                message=f"{label} API returned invalid response format",
                code="INVALID_RESPONSE_STRUCTURE",
            )
        return VerificationSuccess(body=data)

    @staticmethod
    def _api_error(label: str, r: httpx.Response, data: Any) -> VerificationFailure:
        fields = data if isinstance(data, dict) else {}
        reason = fields.get("message") or fields.get("error") or r.reason_phrase
        code = fields.get("code") or f"HTTP_{r.status_code}"
        logger.error(f"{label} API error {r.status_code}: code={code}")
        return VerificationFailure(
            status_code=local_status(r.status_code),
            error="API Error",
            message=f"{label} verification failed: {reason}",
            code=str(code),
            details=data,
        )
