import logging
from typing import Any, Callable, TypeVar

from fastapi import Request
from idvdemo.core.config import Settings
from idvdemo.core.errors import ConfigurationError, RequestValidationFailed
from idvdemo.schemas.verification import UpstreamResult, VerificationRequest
from idvdemo.services.products import Product
from idvdemo.services.validation import validate_request
from idvdemo.services.vouched import VouchedClient
from pydantic import ValidationError

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=VerificationRequest)


async def parse_request(request: Request, model: type[RequestT]) -> RequestT:
    try:
        body = await request.json()
    except ValueError:
        raise RequestValidationFailed("Request body must be valid JSON", "INVALID_JSON")
    if not isinstance(body, dict):
        body = {}
    try:
        return model.model_validate(body)
    except ValidationError:
        # Fields of the wrong type count as absent
        raise RequestValidationFailed(
            f"{model.describe_required()} are required fields",
            "MISSING_REQUIRED_FIELDS",
        )


def require_api_key(product: Product, settings: Settings) -> str:
    api_key = settings.api_key_for(product.key_setting)
    if not api_key:
        logger.error(f"{product.key_setting.upper()} is not set in environment variables")
        raise ConfigurationError(
            f"{product.label} API key is not configured on server", "MISSING_API_KEY"
        )
    return api_key


async def verify(
    product: Product,
    req: VerificationRequest,
    settings: Settings,
    client: VouchedClient,
    build_payload: Callable[[Any], dict[str, Any]] | None = None,
) -> UpstreamResult:
    """Validate, attach the server-held key and forward to Vouched.

    Validation and configuration faults raise; upstream outcomes are
    returned as a VerificationSuccess or VerificationFailure.
    """
    validate_request(req)
    api_key = require_api_key(product, settings)
    logger.info(
        f"Processing {product.label} verification request for: {product.summarize(req)}"
    )
    payload = (build_payload or product.build_payload)(req)
    result = await client.post(product.path, payload, api_key, product.label)
    if result.kind == "ok":
        logger.info(
            f"{product.label} verification completed: id={result.body.get('id')}, "
            f"status={result.body.get('status')}"
        )
    else:
        logger.error(
            f"{product.label} verification failed: {result.code} ({result.status_code})"
        )
    return result
