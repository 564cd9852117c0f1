import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from passlib.context import CryptContext

from ..errors import (
    CodeExpired,
    CodeMismatch,
    EmailInUse,
    InvalidCredentials,
    InvalidOrExpiredCode,
    NoPendingCode,
    OtpSendFailed,
    DispatchFailed,
    ProviderUnconfigured,
    ResendTooSoon,
    TwoFANotEnabled,
    TwoFAPhoneInvalid,
    UserNotFound,
)
from ..ports.audit_logger import AuditLogger
from ..ports.rate_limiter import RateLimiter
from ..ports.user_repo import UserDto, UserRepository
from .otp_issuance_service import OtpIssuanceService
from .otp_verification_service import OtpVerificationService
from ...utils import create_session_token, is_valid_phone, mask_phone

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class LoginState(str, Enum):
    AWAITING_CREDENTIALS = "awaiting_credentials"
    PASSWORD_VERIFIED = "password_verified"
    AWAITING_OTP = "awaiting_otp"
    SESSION_ISSUED = "session_issued"


@dataclass
class SessionIssued:
    token: str
    user: Dict[str, Any]
    state: LoginState = LoginState.SESSION_ISSUED


@dataclass
class OtpRequired:
    user_id: int
    phone_masked: str
    provider: Optional[str] = None
    state: LoginState = LoginState.AWAITING_OTP


@dataclass
class ResendResult:
    provider: str
    ttl_seconds: int


LoginOutcome = Union[SessionIssued, OtpRequired]


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Unrecognised hash format counts as a mismatch
        return False


@dataclass
class AuthService:
    """Password login with conditional OTP step-up.

    Nothing about an in-progress login is kept server-side: the client holds
    the ``user_id`` between ``login`` and ``verify_otp_and_login``, and every
    call re-reads the user, so any failure simply leaves the client back at
    ``AWAITING_CREDENTIALS``.
    """

    user_repo: UserRepository
    issuer: OtpIssuanceService
    verifier: OtpVerificationService
    resend_limiter: Optional[RateLimiter] = None
    resend_cooldown_seconds: int = 30
    audit: Optional[AuditLogger] = None

    def _issue_session(self, user: UserDto) -> SessionIssued:
        token = create_session_token(user.id, user.email)
        return SessionIssued(token=token, user=user.public())

    def _two_factor_phone(self, user: UserDto) -> str:
        phone = (user.phone or "").strip()
        if not is_valid_phone(phone):
            logger.error(f"User {user.id} has 2FA enabled but a malformed phone on record")
            raise TwoFAPhoneInvalid()
        return phone

    def _load_two_factor_user(self, user_id: int) -> UserDto:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise UserNotFound()
        if not user.two_fa_enabled:
            raise TwoFANotEnabled()
        return user

    async def _send_code(self, phone: str) -> str:
        try:
            result = await self.issuer.issue(phone)
        except ProviderUnconfigured:
            raise ProviderUnconfigured("2FA requires SMS provider")
        except DispatchFailed as e:
            raise OtpSendFailed(e.cause)
        return result.provider

    async def login(self, email: str, password: str) -> LoginOutcome:
        user = self.user_repo.get_by_email(email)
        if not user or not user.has_password:
            logger.warning("Login rejected: unknown email or passwordless account")
            raise InvalidCredentials()
        # bcrypt is CPU-bound; keep it off the event loop
        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            logger.warning(f"Login rejected: wrong password for user {user.id}")
            raise InvalidCredentials()

        if not user.two_fa_enabled:
            return self._issue_session(user)

        phone = self._two_factor_phone(user)
        provider = await self._send_code(phone)
        if self.resend_limiter is not None:
            # The login send opens the cooldown window for resends
            self.resend_limiter.allow(f"otp-resend:{user.id}", 1, self.resend_cooldown_seconds)
        if self.audit is not None:
            self.audit.log("login_otp_required", phone, user_id=user.id)
        return OtpRequired(user_id=user.id, phone_masked=mask_phone(phone), provider=provider)

    async def resend_otp(self, user_id: int) -> ResendResult:
        user = self._load_two_factor_user(user_id)
        phone = self._two_factor_phone(user)
        if self.resend_limiter is not None and not self.resend_limiter.allow(
            f"otp-resend:{user.id}", 1, self.resend_cooldown_seconds
        ):
            logger.warning(f"Resend OTP throttled for user {user.id}")
            raise ResendTooSoon()
        try:
            provider = await self._send_code(phone)
        except (ProviderUnconfigured, OtpSendFailed):
            # Nothing was delivered, so the cooldown slot is given back
            if self.resend_limiter is not None:
                self.resend_limiter.reset(f"otp-resend:{user.id}")
            raise
        return ResendResult(provider=provider, ttl_seconds=self.issuer.ttl_seconds)

    def verify_otp_and_login(self, user_id: int, code: str) -> SessionIssued:
        user = self._load_two_factor_user(user_id)
        phone = self._two_factor_phone(user)
        try:
            self.verifier.verify(phone, code)
        except (CodeExpired, CodeMismatch, NoPendingCode) as e:
            logger.warning(f"Login OTP rejected for user {user.id}: {e.reason}")
            raise InvalidOrExpiredCode()
        if self.audit is not None:
            self.audit.log("login_otp_verified", phone, user_id=user.id)
        return self._issue_session(user)

    def register(self, name: str, email: str, password: str, phone: Optional[str] = None) -> SessionIssued:
        if self.user_repo.get_by_email(email):
            raise EmailInUse()
        user = self.user_repo.create(name=name, email=email, password_hash=hash_password(password), phone=phone)
        logger.info(f"Registered user {user.id}")
        return self._issue_session(user)

    def current_user(self, user_id: int) -> UserDto:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise UserNotFound()
        return user
