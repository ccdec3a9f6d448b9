import logging
from datetime import UTC, datetime
from typing import Any

from idvdemo.schemas.webhook import WebhookRecord
from idvdemo.services import tokens
from idvdemo.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

BUFFER_KEY = "webhook:responses"
JOB_KEY = "webhook:job:{}"


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class WebhookCorrelator:
    """Buffers vendor callbacks so a later, unrelated request can read them.

    Holds no state of its own. Records go to a capped list whose TTL is
    refreshed on every write, and callbacks carrying a session token are
    also indexed by job id under the same TTL.
    """

    def __init__(self, store: KeyValueStore, buffer_size: int = 10, ttl: int = 600):
        self.store = store
        self.buffer_size = buffer_size
        self.ttl = ttl

    async def receive(self, payload: Any) -> WebhookRecord:
        """Buffer a callback and, when it carries a token, index it by job id.

        Both writes share one transaction, so a failed call leaves nothing
        behind for the vendor's retry to duplicate.
        """
        record = WebhookRecord(timestamp=utc_timestamp(), data=payload)
        buffered = record.to_json()
        also_set = None
        token = tokens.extract_token(payload)
        if token:
            job_id = tokens.lookup_key(token)
            record = record.model_copy(
                update={"original_token": token, "extracted_job_id": job_id}
            )
            also_set = (JOB_KEY.format(job_id), record.to_json())
        await self.store.push_capped(
            BUFFER_KEY, buffered, self.buffer_size, self.ttl, also_set=also_set
        )
        logger.info(f"Stored webhook callback received at {record.timestamp}")
        if record.extracted_job_id:
            logger.info(f"Indexed webhook data for job_id: {record.extracted_job_id}")
        return record

    async def list_records(self) -> list[WebhookRecord]:
        items = await self.store.read_list(BUFFER_KEY)
        return [WebhookRecord.model_validate(item) for item in items]

    async def clear(self) -> None:
        await self.store.delete(BUFFER_KEY)
        logger.info("Cleared webhook response buffer")

    async def lookup_by_token(self, token: str) -> WebhookRecord | None:
        key = tokens.lookup_key(token)
        stored = await self.store.get(JOB_KEY.format(key))
        if stored is None:
            logger.info(f"Webhook data not found for key: {key}")
            return None
        logger.info(f"Found webhook data for job_id: {key}")
        return WebhookRecord.model_validate(stored)
