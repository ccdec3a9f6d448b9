"""Helpers that keep PII and secrets out of the process log."""

import re
from urllib.parse import urlsplit

SSN_MASK = "***masked***"
NOT_PROVIDED = "not provided"


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", value)


def mask_phone(phone: str | None) -> str:
    if not phone:
        return NOT_PROVIDED
    return f"***{digits_only(phone)[-4:]}"


def mask_ssn(ssn: str | None) -> str:
    return SSN_MASK if ssn else NOT_PROVIDED


def mask_secret(secret: str | None) -> str:
    if not secret:
        return "MISSING"
    return f"{secret[:4]}..."


def mask_url(url: str) -> str:
    """Drop credentials from a connection URL, keeping scheme, host and path."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return f"{parts.scheme}://{host}{parts.path}"
