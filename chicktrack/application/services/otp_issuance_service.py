import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..errors import DispatchFailed, InvalidPhone, ProviderUnconfigured, SmsError
from ..ports.audit_logger import AuditLogger
from ..ports.otp_store import OtpStore
from ..ports.sms_gateway import SmsGateway
from ...utils import generate_otp, is_valid_phone, normalize_phone

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Your ChickTrack verification code is {code}"


@dataclass
class IssueResult:
    ttl_seconds: int
    provider: str
    provider_data: Dict[str, Any] = field(default_factory=dict)


def render_message(code: str, template: Optional[str] = None) -> str:
    """Substitute the code into the template; templates without ``{code}`` are ignored."""
    if template and "{code}" in template:
        return template.replace("{code}", code)
    return DEFAULT_MESSAGE.replace("{code}", code)


@dataclass
class OtpIssuanceService:
    store: OtpStore
    gateway: SmsGateway
    ttl_seconds: int = 60
    message_template: Optional[str] = None
    audit: Optional[AuditLogger] = None

    async def issue(self, phone: str, message_template: Optional[str] = None) -> IssueResult:
        phone = normalize_phone(phone)
        if not is_valid_phone(phone):
            raise InvalidPhone()

        code = generate_otp()
        # Persisted before dispatch so a slow provider holds no store state
        self.store.put(phone, code, self.ttl_seconds)
        message = render_message(code, message_template or self.message_template)

        try:
            result = await self.gateway.send([phone], message)
        except ProviderUnconfigured:
            logger.error("OTP issue failed: no SMS provider configured")
            self._audit("otp_issue", phone, False, {"reason": "provider_unconfigured"})
            raise
        except SmsError as e:
            logger.error(f"OTP dispatch failed: {e.detail or e.message}")
            self._audit("otp_issue", phone, False, {"reason": "dispatch_failed"})
            raise DispatchFailed(e)

        self._audit("otp_issue", phone, True, {"provider": result.provider, "ttl": self.ttl_seconds})
        return IssueResult(ttl_seconds=self.ttl_seconds, provider=result.provider, provider_data=result.provider_data)

    def _audit(self, action: str, phone: str, success: bool, details: dict) -> None:
        if self.audit is not None:
            self.audit.log(action, phone, success=success, details=details)
