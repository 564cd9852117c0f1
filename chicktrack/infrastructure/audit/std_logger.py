import hashlib
import json
import logging
from typing import Optional, Dict, Any

from ...application.ports.audit_logger import AuditLogger
from ...utils import utcnow


def hash_phone_number(phone: str) -> str:
    return hashlib.sha256(phone.encode()).hexdigest()


class StdAuditLogger(AuditLogger):
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def log(self, action: str, phone: str, user_id: Optional[int] = None, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        entry = {
            "timestamp": utcnow().isoformat(),
            "action": action,
            "phone_hash": hash_phone_number(phone or ""),
            "user_id": user_id,
            "success": success,
            "details": details or {},
        }
        self._logger.info(f"AUDIT: {json.dumps(entry)}")
