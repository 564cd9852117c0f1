"""Dependency providers used by the routers.

Repositories are built per request on the request's SQLModel session; the
SMS gateway, resend limiter and audit logger are process-wide singletons.
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from .application.ports.audit_logger import AuditLogger
from .application.ports.otp_store import OtpStore
from .application.ports.rate_limiter import RateLimiter
from .application.ports.sms_gateway import SmsGateway
from .application.ports.user_repo import UserRepository
from .application.services import (
    AuthService,
    OtpIssuanceService,
    OtpVerificationService,
    TwoFactorService,
    UserProfileService,
)
from .core.config import settings
from .database import get_session
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.persistence.sqlalchemy.repositories.otp_store_sql import SqlOtpStore
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from .infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter
from .infrastructure.sms.gateway import SmsConfig, SmsGatewayAdapter
from .utils import decode_jwt_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_sms_gateway() -> SmsGateway:
    return SmsGatewayAdapter(SmsConfig.from_settings(settings))


@lru_cache()
def get_resend_limiter() -> RateLimiter:
    if settings.REDIS_URL:
        logger.info("Using Redis for OTP resend cooldown")
        return RedisRateLimiter(settings.REDIS_URL, prefix="chicktrack:")
    return InMemoryRateLimiter()


@lru_cache()
def get_audit_logger() -> AuditLogger:
    return StdAuditLogger()


def get_otp_store(session: Session = Depends(get_session)) -> OtpStore:
    return SqlOtpStore(session)


def get_user_repo(session: Session = Depends(get_session)) -> UserRepository:
    return SqlUserRepository(session)


def get_issuance_service(
    store: OtpStore = Depends(get_otp_store),
    gateway: SmsGateway = Depends(get_sms_gateway),
    audit: AuditLogger = Depends(get_audit_logger),
) -> OtpIssuanceService:
    return OtpIssuanceService(
        store=store,
        gateway=gateway,
        ttl_seconds=settings.OTP_TTL_SECONDS,
        message_template=settings.OTP_MESSAGE_TEMPLATE,
        audit=audit,
    )


def get_verification_service(
    store: OtpStore = Depends(get_otp_store),
    audit: AuditLogger = Depends(get_audit_logger),
) -> OtpVerificationService:
    return OtpVerificationService(store=store, audit=audit)


def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repo),
    issuer: OtpIssuanceService = Depends(get_issuance_service),
    verifier: OtpVerificationService = Depends(get_verification_service),
    limiter: RateLimiter = Depends(get_resend_limiter),
    audit: AuditLogger = Depends(get_audit_logger),
) -> AuthService:
    return AuthService(
        user_repo=user_repo,
        issuer=issuer,
        verifier=verifier,
        resend_limiter=limiter,
        resend_cooldown_seconds=settings.OTP_RESEND_COOLDOWN_SECONDS,
        audit=audit,
    )


def get_twofa_service(user_repo: UserRepository = Depends(get_user_repo)) -> TwoFactorService:
    return TwoFactorService(user_repo=user_repo, require_phone_proof=settings.TWOFA_REQUIRE_PHONE_PROOF)


def get_profile_service(user_repo: UserRepository = Depends(get_user_repo)) -> UserProfileService:
    return UserProfileService(user_repo=user_repo)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> int:
    token = credentials.credentials if credentials and credentials.credentials else None
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")
    payload = decode_jwt_token(token)
    if not payload or payload.get("type") != "access":
        logger.warning("JWT token decode failed - invalid or expired token")
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token: invalid user ID format")
