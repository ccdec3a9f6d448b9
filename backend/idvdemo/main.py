import logging

import redis.asyncio as redis
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi_limiter import FastAPILimiter
from idvdemo.api import invites, verification, webhooks
from idvdemo.api.deps import get_store
from idvdemo.core.config import Settings, get_settings
from idvdemo.core.errors import StoreUnavailable, VerificationError
from idvdemo.core.ratelimit import rate_limit
from idvdemo.middleware.body_size import BodySizeLimitMiddleware
from idvdemo.middleware.security_headers import SecurityHeadersMiddleware
from idvdemo.services.products import PRODUCTS
from idvdemo.storage.kv import KeyValueStore

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Identity Verification Demo Service",
    description="Vouched verification proxy and webhook correlator for the demo wizards",
    version="1.0.0",
)
app.state.redis = None

app.add_middleware(BodySizeLimitMiddleware, max_size=settings.max_body_size)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    allow_credentials=True,
)

for router in (webhooks.router, verification.router, invites.router):
    app.include_router(router, dependencies=[Depends(rate_limit)])


@app.exception_handler(VerificationError)
async def verification_error_handler(request: Request, exc: VerificationError):
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.on_event("startup")
async def startup():
    """Connect to Redis and initialise the rate limiter."""
    if app.state.redis is None:
        app.state.redis = redis.from_url(settings.redis_url, decode_responses=True)
    try:
        await FastAPILimiter.init(app.state.redis)
    except redis.RedisError as e:
        # Requests are still served; the limiter lets them through
        logger.warning(f"Failed to initialise rate limiter: {e}")
        FastAPILimiter.redis = None


@app.on_event("shutdown")
async def shutdown():
    FastAPILimiter.redis = None
    if app.state.redis is not None:
        await app.state.redis.aclose()
        app.state.redis = None


@app.get("/health", include_in_schema=False)
async def health(
    settings: Settings = Depends(get_settings),
    store: KeyValueStore = Depends(get_store),
):
    try:
        await store.ping()
        store_status = "connected"
    except StoreUnavailable as e:
        store_status = f"error: {e}"
    return {
        "status": "ok",
        "store": store_status,
        "products": {
            name: bool(settings.api_key_for(product.key_setting))
            for name, product in PRODUCTS.items()
        },
    }
