from typing import Any

from pydantic import BaseModel, Field


class WebhookRecord(BaseModel):
    """One stored vendor callback. ``data`` is kept exactly as received."""

    timestamp: str = Field(..., description="When the callback arrived (ISO 8601)")
    data: Any = None
    original_token: str | None = Field(None, alias="originalToken")
    extracted_job_id: str | None = Field(None, alias="extractedJobId")

    model_config = {"populate_by_name": True}

    def to_json(self) -> dict[str, Any]:
        # data is always present, even when the callback body was null
        unset = {
            name
            for name in ("original_token", "extracted_job_id")
            if getattr(self, name) is None
        }
        return self.model_dump(by_alias=True, exclude=unset)


class WebhookAck(BaseModel):
    success: bool = True
    message: str = "Webhook received successfully"
    timestamp: str


class JobIndexAck(BaseModel):
    success: bool = True
    message: str = "Webhook received successfully"
    job_token: str | None = Field(None, serialization_alias="jobToken")
    extracted_job_id: str | None = Field(None, serialization_alias="extractedJobId")
