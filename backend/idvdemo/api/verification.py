import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from idvdemo.api.deps import get_vouched_client
from idvdemo.core.config import Settings, get_settings
from idvdemo.core.errors import VerificationError
from idvdemo.schemas.verification import ServiceStatus
from idvdemo.services import products
from idvdemo.services.correlator import utc_timestamp
from idvdemo.services.products import Product
from idvdemo.services.verification import parse_request, verify
from idvdemo.services.vouched import VouchedClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])


def service_status(product: Product, settings: Settings) -> ServiceStatus:
    return ServiceStatus(
        service=product.service,
        configured=bool(settings.api_key_for(product.key_setting)),
        timestamp=utc_timestamp(),
    )


async def proxy(
    product: Product,
    request: Request,
    settings: Settings,
    client: VouchedClient,
) -> JSONResponse:
    try:
        req = await parse_request(request, product.request_model)
        result = await verify(product, req, settings, client)
    except VerificationError:
        raise
    except Exception as e:
        logger.exception(f"Error processing {product.label} verification request")
        raise VerificationError(
            f"An unexpected error occurred while processing the {product.label} verification",
            "INTERNAL_SERVER_ERROR",
            details=str(e),
        ) from e

    if result.kind == "error":
        return JSONResponse(result.to_dict(), status_code=result.status_code)
    return JSONResponse(result.body)


@router.post("/crosscheck")
async def crosscheck(
    request: Request,
    settings: Settings = Depends(get_settings),
    client: VouchedClient = Depends(get_vouched_client),
):
    return await proxy(products.CROSSCHECK, request, settings, client)


@router.get("/crosscheck", response_model=ServiceStatus)
def crosscheck_status(settings: Settings = Depends(get_settings)):
    return service_status(products.CROSSCHECK, settings)


@router.post("/dob")
async def dob(
    request: Request,
    settings: Settings = Depends(get_settings),
    client: VouchedClient = Depends(get_vouched_client),
):
    return await proxy(products.DOB, request, settings, client)


@router.get("/dob", response_model=ServiceStatus)
def dob_status(settings: Settings = Depends(get_settings)):
    return service_status(products.DOB, settings)


@router.post("/ssn")
async def ssn(
    request: Request,
    settings: Settings = Depends(get_settings),
    client: VouchedClient = Depends(get_vouched_client),
):
    return await proxy(products.SSN, request, settings, client)


@router.get("/ssn", response_model=ServiceStatus)
def ssn_status(settings: Settings = Depends(get_settings)):
    return service_status(products.SSN, settings)
