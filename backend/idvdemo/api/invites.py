import logging
from functools import partial

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from idvdemo.api.deps import get_vouched_client
from idvdemo.api.verification import service_status
from idvdemo.core.config import Settings, get_settings
from idvdemo.core.errors import VerificationError
from idvdemo.schemas.verification import ServiceStatus
from idvdemo.services.products import INVITE, invite_payload
from idvdemo.services.verification import parse_request, verify
from idvdemo.services.vouched import VouchedClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ial2", tags=["ial2"])


def callback_url(request: Request, settings: Settings) -> str:
    """Where Vouched should POST the result of an invited job."""
    if settings.public_base_url:
        return f"{settings.public_base_url.rstrip('/')}/webhook-callback"
    return str(request.url_for("receive_webhook_callback"))


@router.post("/send-invite")
async def send_invite(
    request: Request,
    settings: Settings = Depends(get_settings),
    client: VouchedClient = Depends(get_vouched_client),
):
    try:
        req = await parse_request(request, INVITE.request_model)
        build = partial(invite_payload, callback_url=callback_url(request, settings))
        result = await verify(INVITE, req, settings, client, build_payload=build)
    except VerificationError:
        raise
    except Exception as e:
        logger.exception("IAL2 Send Invite: unexpected error")
        raise VerificationError(
            "An unexpected error occurred while sending the invite",
            "INTERNAL_SERVER_ERROR",
            details=str(e),
        ) from e

    if result.kind == "error":
        return JSONResponse(result.to_dict(), status_code=result.status_code)
    logger.info(f"IAL2 Send Invite: invite sent, id={result.body.get('id')}")
    # The payload is echoed for the demo's "behind the scenes" panel
    return {"success": True, "invite": result.body, "sentPayload": build(req)}


@router.get("/send-invite", response_model=ServiceStatus)
def send_invite_status(settings: Settings = Depends(get_settings)):
    return service_status(INVITE, settings)
