# chicktrack/schemas/auth/auth.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from ..otp.otp import OtpCodeText

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
    phone: Optional[str] = None

class UserPublic(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    twoFAEnabled: bool = False

class AuthResponse(BaseModel):
    token: str
    user: UserPublic

class OtpRequiredResponse(BaseModel):
    requireOtp: bool = True
    userId: int
    phoneMasked: str

class VerifyOtpRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")
    code: OtpCodeText = Field(..., min_length=1)

class ResendOtpRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")

class ResendOtpResponse(BaseModel):
    ok: bool = True
    resent: bool = True
    provider: str
