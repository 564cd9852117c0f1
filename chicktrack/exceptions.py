import logging
from typing import Any, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .application.errors import AuthCoreError

logger = logging.getLogger(__name__)

def create_error_response(error_message: str, detail: Optional[Any] = None) -> dict:
    """Create a standardized error response"""
    body = {"error": error_message}
    if detail is not None:
        body["detail"] = detail
    return body

async def auth_core_exception_handler(request: Request, exc: AuthCoreError) -> JSONResponse:
    """Render typed service failures with their status and public message"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.detail})")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.__class__.__name__}")
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.message, exc.detail)
    )

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # Convert 403 from HTTPBearer to 401 for missing authentication
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("Authentication required")
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail))
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed body fields are client input errors (400)"""
    fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
    fields = [f for f in fields if f]
    message = f"{', '.join(fields)} required or invalid" if fields else "Invalid request"
    return JSONResponse(
        status_code=400,
        content=create_error_response(message)
    )
