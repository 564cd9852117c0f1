# chicktrack/schemas/common/common.py
from pydantic import BaseModel
from typing import Any, Optional

class ErrorResponse(BaseModel):
    error: str
    detail: Optional[Any] = None

class HealthResponse(BaseModel):
    ok: bool = True
    service: str
    version: str
    timestamp: str
    smsProviderConfigured: bool
