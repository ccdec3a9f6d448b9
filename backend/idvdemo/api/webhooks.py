"""Inbound Vouched callbacks and the endpoints pages poll for their results.

No authenticity check is made on inbound callbacks; anyone who knows the
URL can add a record. See DESIGN.md.
"""

import logging
import time
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from idvdemo.api.deps import get_correlator
from idvdemo.core.config import Settings, get_settings
from idvdemo.core.errors import StoreUnavailable
from idvdemo.core.masking import mask_url
from idvdemo.schemas.webhook import JobIndexAck, WebhookAck
from idvdemo.services import tokens
from idvdemo.services.correlator import WebhookCorrelator, utc_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


class InvalidPayload(Exception):
    pass


async def read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        raise InvalidPayload(str(e)) from e


def _describe(payload: Any) -> str:
    # Callback bodies carry PII, so only the job id and status are logged
    if isinstance(payload, dict):
        return f"id={payload.get('id')}, status={payload.get('status')}"
    return type(payload).__name__


# ---------- vendor callback ----------
@router.post("/webhook-callback", name="receive_webhook_callback")
async def receive_webhook_callback(
    request: Request, correlator: WebhookCorrelator = Depends(get_correlator)
):
    try:
        payload = await read_json(request)
    except InvalidPayload as e:
        return JSONResponse(
            {"success": False, "message": "Invalid JSON payload", "error": str(e)},
            status_code=400,
        )

    logger.info(f"Received Vouched webhook: {_describe(payload)}")
    try:
        await correlator.receive(payload)
    except StoreUnavailable as e:
        logger.error(f"Error processing Vouched webhook: {e}")
        return JSONResponse(
            {"success": False, "message": "Error processing webhook", "error": str(e)},
            status_code=500,
        )
    return WebhookAck(timestamp=utc_timestamp())


@router.get("/webhook-callback")
async def list_webhook_callbacks(
    correlator: WebhookCorrelator = Depends(get_correlator),
):
    try:
        records = await correlator.list_records()
    except StoreUnavailable as e:
        return JSONResponse({"responses": [], "error": str(e)}, status_code=500)
    return {"responses": [record.to_json() for record in records]}


@router.delete("/webhook-callback")
async def clear_webhook_callbacks(
    correlator: WebhookCorrelator = Depends(get_correlator),
):
    try:
        await correlator.clear()
    except StoreUnavailable as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)
    return {"success": True}


# ---------- job-token correlation ----------
@router.post("/webhook", response_model=JobIndexAck, response_model_by_alias=True)
async def index_webhook(
    request: Request, correlator: WebhookCorrelator = Depends(get_correlator)
):
    try:
        payload = await read_json(request)
    except InvalidPayload as e:
        return JSONResponse(
            {"error": "Invalid JSON payload", "details": str(e)}, status_code=400
        )

    token = tokens.extract_token(payload)
    if not token:
        logger.info("No job token found in webhook payload")
    try:
        record = await correlator.receive(payload)
    except StoreUnavailable as e:
        logger.error(f"Webhook error: {e}")
        return JSONResponse(
            {"error": "Failed to process webhook", "details": str(e)}, status_code=500
        )
    return JobIndexAck(job_token=token, extracted_job_id=record.extracted_job_id)


@router.get("/webhook")
async def lookup_webhook(
    token: str | None = Query(None),
    correlator: WebhookCorrelator = Depends(get_correlator),
):
    if not token:
        return JSONResponse({"error": "Missing token parameter"}, status_code=400)
    try:
        record = await correlator.lookup_by_token(token)
    except StoreUnavailable as e:
        return JSONResponse(
            {"error": "Failed to retrieve webhook data", "details": str(e)},
            status_code=500,
        )
    if record is None:
        # Not an error for the caller: the result has not arrived yet
        return JSONResponse({"error": "Webhook data not found"}, status_code=404)
    return {"data": record.to_json()}


# ---------- debug ----------
@router.get("/debug-webhook")
async def debug_webhook(
    settings: Settings = Depends(get_settings),
    correlator: WebhookCorrelator = Depends(get_correlator),
):
    result: dict[str, Any] = {
        "store": {"url": mask_url(settings.redis_url)},
        "kv": None,
        "responses": None,
    }
    try:
        records = await correlator.list_records()
        result["kv"] = "connected"
        result["responses"] = [record.to_json() for record in records]
    except StoreUnavailable as e:
        result["kv"] = f"error: {e}"
    return result


@router.post("/debug-webhook")
async def inject_debug_webhook(
    correlator: WebhookCorrelator = Depends(get_correlator),
):
    test_payload = {
        "id": f"debug-test-{int(time.time() * 1000)}",
        "status": "completed",
        "result": {"success": True},
        "_debug": True,
    }
    try:
        await correlator.receive(test_payload)
    except StoreUnavailable as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)
    return {"success": True, "injected": test_payload}
