from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    vouched_base_url: str = "https://verify.vouched.id"
    vouched_private_api_key: str | None = None
    vouched_ssn_private_api_key: str | None = None
    redis_url: str = Field(
        "redis://localhost:6379/0",
        validation_alias=AliasChoices("redis_url", "kv_url"),
    )
    webhook_buffer_size: int = 10
    webhook_ttl_seconds: int = 600  # 10 minutes
    upstream_timeout_seconds: float = 30.0
    public_base_url: str | None = None
    allowed_origins: str = "http://localhost:3000"
    max_body_size: int = 1_048_576  # 1 MiB
    rate_limit_times: int = 100
    rate_limit_seconds: int = 60
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    def api_key_for(self, setting_name: str) -> str | None:
        # Blank values in .env count as unset
        return getattr(self, setting_name) or None


@lru_cache
def get_settings() -> Settings:
    return Settings()
