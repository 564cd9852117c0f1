from fastapi import APIRouter, Depends
import logging

from ..application.services import OtpIssuanceService, OtpVerificationService
from ..dependencies import get_issuance_service, get_verification_service
from ..schemas.common.common import ErrorResponse
from ..schemas.otp.otp import OtpRequestBody, OtpRequestResponse, OtpVerifyBody, OtpVerifyResponse
from ..utils import create_phone_proof_token

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/otp",
    tags=["OTP"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@router.post("/request", response_model=OtpRequestResponse)
async def request_otp(
    payload: OtpRequestBody,
    issuer: OtpIssuanceService = Depends(get_issuance_service),
):
    """
    Send a verification code to a phone, independent of any user account
    """
    result = await issuer.issue(payload.to)
    return OtpRequestResponse(ttlSeconds=result.ttl_seconds, provider=result.provider, data=result.provider_data)


@router.post("/verify", response_model=OtpVerifyResponse)
def verify_otp(
    payload: OtpVerifyBody,
    verifier: OtpVerificationService = Depends(get_verification_service),
):
    """
    Prove possession of a phone; the returned proofToken can be handed to the
    2FA settings endpoint
    """
    result = verifier.verify(payload.to, payload.code)
    return OtpVerifyResponse(proofToken=create_phone_proof_token(result.phone))
