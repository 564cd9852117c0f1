# chicktrack/schemas/otp/otp.py
from pydantic import BaseModel, BeforeValidator, Field
from typing import Annotated, Any, Dict, List, Optional, Union

def _code_as_text(v):
    # Numeric JSON codes are accepted but always compared as text
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v

OtpCodeText = Annotated[str, BeforeValidator(_code_as_text)]

class OtpRequestBody(BaseModel):
    to: Union[str, List[str]] = Field(..., description="Phone in +countrycode format")

class OtpRequestResponse(BaseModel):
    ok: bool = True
    sent: bool = True
    ttlSeconds: int
    provider: str
    data: Optional[Dict[str, Any]] = None

class OtpVerifyBody(BaseModel):
    to: Union[str, List[str]]
    code: OtpCodeText = Field(..., min_length=1)

class OtpVerifyResponse(BaseModel):
    ok: bool = True
    verified: bool = True
    proofToken: Optional[str] = None
