from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared body is larger than ``max_size`` bytes."""

    def __init__(self, app, max_size: int = 1_048_576):  # 1 MiB
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            if int(content_length) > self.max_size:
                return JSONResponse({"detail": "Payload too large"}, status_code=413)
        return await call_next(request)
