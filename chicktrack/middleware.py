import time
import uuid
import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from .core.config import settings

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

# Responses under these prefixes carry session or proof tokens
NO_STORE_PREFIXES = ("/api/auth", "/api/otp")


class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        if request.url.path.startswith(NO_STORE_PREFIXES):
            response.headers["Cache-Control"] = "no-store"
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and echoes an X-Request-ID back to the caller."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"[{request_id}] {request.method} {request.url.path} from {client_host}")

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(f"[{request_id}] {response.status_code} in {duration:.3f}s")
        response.headers["X-Request-ID"] = request_id
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            # Raw storage/provider exceptions never reach the client
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {e}", exc_info=True)
            body = {"error": "Internal server error"}
            if settings.DEBUG:
                body["detail"] = str(e)
            return JSONResponse(status_code=500, content=body)
