# chicktrack/schemas/users/user.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

class TwoFARequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enabled: bool
    phone: Optional[str] = None
    proof_token: Optional[str] = Field(None, alias="proofToken")

class TwoFAUser(BaseModel):
    id: int
    twoFAEnabled: bool
    phone: Optional[str] = None

class TwoFAResponse(BaseModel):
    ok: bool = True
    user: TwoFAUser

class ProfileRegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = None

class UserProfile(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
