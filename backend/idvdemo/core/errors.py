from typing import Any


class StoreUnavailable(Exception):
    """Raised when the key-value store cannot be reached or rejects a command."""


class VerificationError(Exception):
    """An error rendered to the caller as ``{error, message, code[, details]}``."""

    status_code = 500
    error = "Server Error"

    def __init__(
        self,
        message: str,
        code: str,
        details: Any = None,
        status_code: int | None = None,
        error: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        if error is not None:
            self.error = error

    def to_dict(self) -> dict[str, Any]:
        body = {"error": self.error, "message": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


class RequestValidationFailed(VerificationError):
    status_code = 400
    error = "Validation Error"


class ConfigurationError(VerificationError):
    status_code = 503
    error = "Configuration Error"
