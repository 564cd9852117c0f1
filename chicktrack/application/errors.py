"""Typed failures raised by the OTP and login services.

Each error carries the HTTP status and client-facing message the routes
render, so translation happens in one exception handler instead of in every
endpoint. ``detail`` is only populated where operators need it (provider and
configuration problems); per-user state errors keep it empty.
"""

from typing import Any, Optional


class AuthCoreError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Any = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


# Input errors

class InvalidPhone(AuthCoreError):
    status_code = 400
    message = "Invalid phone format"

    def __init__(self, message: Optional[str] = None, detail: Any = "Use international format like +2557XXXXXXXX"):
        super().__init__(message, detail)


class InvalidPhoneProof(AuthCoreError):
    status_code = 400
    message = "Phone ownership not proven"


# State errors

class VerificationError(AuthCoreError):
    status_code = 400
    message = "Invalid or expired code"


class NoPendingCode(VerificationError):
    reason = "no_pending"


class CodeExpired(VerificationError):
    reason = "expired"


class CodeMismatch(VerificationError):
    reason = "mismatch"


class InvalidOrExpiredCode(VerificationError):
    pass


class InvalidCredentials(AuthCoreError):
    status_code = 401
    message = "Invalid credentials"


class UserNotFound(AuthCoreError):
    status_code = 404
    message = "User not found"


class TwoFANotEnabled(AuthCoreError):
    status_code = 400
    message = "2FA not enabled"


class EmailInUse(AuthCoreError):
    status_code = 409
    message = "Email already in use"


class ResendTooSoon(AuthCoreError):
    status_code = 429
    message = "Please wait before requesting another code"


# Configuration errors

class TwoFAPhoneInvalid(AuthCoreError):
    status_code = 500
    message = "2FA phone invalid"

    def __init__(self, message: Optional[str] = None, detail: Any = "Stored phone must be in +countrycode format"):
        super().__init__(message, detail)


# SMS gateway errors

class SmsError(AuthCoreError):
    status_code = 500
    message = "SMS send failed"


class ProviderUnconfigured(SmsError):
    message = "SMS provider not configured"

    def __init__(self, message: Optional[str] = None, detail: Any = "Set BRIQ_API_KEY or AT_API_KEY/AT_USERNAME"):
        super().__init__(message, detail)


class ProviderError(SmsError):
    def __init__(self, provider: str, status: Optional[int] = None, body: str = "", message: Optional[str] = None):
        self.provider = provider
        self.status = status
        self.body = body
        if status is None:
            text = f"{provider} request failed: {body}"
        else:
            text = f"{provider} HTTP {status}: {body}"
        super().__init__(message, text)


# Issuance errors

class IssuanceError(AuthCoreError):
    status_code = 500
    message = "OTP request failed"


class DispatchFailed(IssuanceError):
    def __init__(self, cause: SmsError, message: Optional[str] = None):
        self.cause = cause
        super().__init__(message, cause.detail or cause.message)


class OtpSendFailed(DispatchFailed):
    """Login/resend flavour of a dispatch failure: upstream, so 502."""

    status_code = 502
    message = "Failed to send OTP"
