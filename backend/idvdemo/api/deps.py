import redis.asyncio as redis
from fastapi import Depends, Request
from idvdemo.core.config import Settings, get_settings
from idvdemo.services.correlator import WebhookCorrelator
from idvdemo.services.vouched import VouchedClient
from idvdemo.storage.kv import KeyValueStore


def get_redis(request: Request) -> redis.Redis:
    return request.app.state.redis


def get_store(client: redis.Redis = Depends(get_redis)) -> KeyValueStore:
    return KeyValueStore(client)


def get_correlator(
    store: KeyValueStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> WebhookCorrelator:
    return WebhookCorrelator(
        store,
        buffer_size=settings.webhook_buffer_size,
        ttl=settings.webhook_ttl_seconds,
    )


def get_vouched_client(settings: Settings = Depends(get_settings)) -> VouchedClient:
    return VouchedClient(
        settings.vouched_base_url, timeout=settings.upstream_timeout_seconds
    )
