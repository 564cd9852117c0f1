import hmac
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..errors import CodeExpired, CodeMismatch, InvalidPhone, NoPendingCode
from ..ports.audit_logger import AuditLogger
from ..ports.otp_store import OtpStore
from ...utils import is_valid_phone, normalize_phone, utcnow

logger = logging.getLogger(__name__)


@dataclass
class VerifyResult:
    phone: str
    verified: bool = True


@dataclass
class OtpVerificationService:
    store: OtpStore
    audit: Optional[AuditLogger] = None
    clock: Callable[[], datetime] = utcnow

    def verify(self, phone: str, submitted_code: str) -> VerifyResult:
        phone = normalize_phone(phone)
        if not is_valid_phone(phone):
            raise InvalidPhone()

        record = self.store.get(phone)
        if record is None:
            self._fail(phone, NoPendingCode)

        if self.clock() >= record.expires_at:
            self.store.consume(phone)
            self._fail(phone, CodeExpired)

        # Codes compare as strings: no numeric coercion
        submitted = str(submitted_code if submitted_code is not None else "").strip()
        if not hmac.compare_digest(submitted.encode(), str(record.code).encode()):
            # Left in place so the user can retry until expiry
            self._fail(phone, CodeMismatch)

        self.store.consume(phone)
        if self.audit is not None:
            self.audit.log("otp_verify", phone, success=True)
        return VerifyResult(phone=phone)

    def _fail(self, phone: str, error_cls) -> None:
        logger.warning(f"OTP verification failed: {error_cls.reason}")
        if self.audit is not None:
            self.audit.log("otp_verify", phone, success=False, details={"reason": error_cls.reason})
        raise error_cls()
