from fastapi import APIRouter, Depends
import logging

from ..application.services import TwoFactorService, UserProfileService
from ..dependencies import get_profile_service, get_twofa_service
from ..schemas.users.user import ProfileRegisterRequest, TwoFARequest, TwoFAResponse, TwoFAUser, UserProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("/register", response_model=UserProfile)
def register_profile(payload: ProfileRegisterRequest, profiles: UserProfileService = Depends(get_profile_service)):
    """
    Create the farm profile for an email, or update its name/phone if it exists.
    No password is set here
    """
    user = profiles.register_profile(payload.name, payload.email, payload.phone)
    return UserProfile(id=user.id, name=user.name, email=user.email, phone=user.phone)


@router.post("/{user_id}/twofa", response_model=TwoFAResponse)
def update_twofa(user_id: int, payload: TwoFARequest, twofa: TwoFactorService = Depends(get_twofa_service)):
    """
    Enable (with a +countrycode phone) or disable OTP step-up for a user
    """
    user = twofa.set_two_factor(user_id, payload.enabled, payload.phone, payload.proof_token)
    return TwoFAResponse(user=TwoFAUser(id=user.id, twoFAEnabled=user.two_fa_enabled, phone=user.phone))
