# Services package (re-export feature modules for stable imports)
from .otp_issuance_service import OtpIssuanceService, IssueResult
from .otp_verification_service import OtpVerificationService, VerifyResult
from .auth_service import AuthService, LoginState, OtpRequired, SessionIssued
from .twofa_service import TwoFactorService
from .user_profile_service import UserProfileService
from .otp_janitor import OtpJanitor

__all__ = [
    "OtpIssuanceService",
    "IssueResult",
    "OtpVerificationService",
    "VerifyResult",
    "AuthService",
    "LoginState",
    "OtpRequired",
    "SessionIssued",
    "TwoFactorService",
    "UserProfileService",
    "OtpJanitor",
]
