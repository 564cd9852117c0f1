from fastapi import APIRouter, Depends
from typing import Union
import logging

from ..application.services import AuthService, OtpRequired
from ..dependencies import get_auth_service, get_current_user_id
from ..schemas.common.common import ErrorResponse
from ..schemas.auth.auth import (
    AuthResponse, LoginRequest, OtpRequiredResponse, RegisterRequest,
    ResendOtpRequest, ResendOtpResponse, UserPublic, VerifyOtpRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["Authentication"],
    responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)


@router.post("/register", response_model=AuthResponse)
def register(payload: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    issued = auth.register(payload.name, payload.email, payload.password, payload.phone)
    return AuthResponse(token=issued.token, user=UserPublic(**issued.user))


@router.post("/login", response_model=Union[AuthResponse, OtpRequiredResponse])
async def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Password login. Users with 2FA get an OTP instead of a token and must
    finish through /verify-otp
    """
    outcome = await auth.login(payload.email, payload.password)
    if isinstance(outcome, OtpRequired):
        return OtpRequiredResponse(userId=outcome.user_id, phoneMasked=outcome.phone_masked)
    return AuthResponse(token=outcome.token, user=UserPublic(**outcome.user))


@router.post("/verify-otp", response_model=AuthResponse)
def verify_otp(payload: VerifyOtpRequest, auth: AuthService = Depends(get_auth_service)):
    issued = auth.verify_otp_and_login(payload.user_id, payload.code)
    return AuthResponse(token=issued.token, user=UserPublic(**issued.user))


@router.post("/resend-otp", response_model=ResendOtpResponse)
async def resend_otp(payload: ResendOtpRequest, auth: AuthService = Depends(get_auth_service)):
    result = await auth.resend_otp(payload.user_id)
    return ResendOtpResponse(provider=result.provider)


@router.get("/me", response_model=UserPublic)
def me(user_id: int = Depends(get_current_user_id), auth: AuthService = Depends(get_auth_service)):
    return UserPublic(**auth.current_user(user_id).public())
