from typing import Protocol, Optional
from dataclasses import dataclass
from datetime import datetime


@dataclass
class OtpCodeDto:
    phone: str
    code: str
    expires_at: datetime


class OtpStore(Protocol):
    def put(self, phone: str, code: str, ttl_seconds: int) -> OtpCodeDto:
        ...

    def get(self, phone: str) -> Optional[OtpCodeDto]:
        ...

    def consume(self, phone: str) -> None:
        ...

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        ...
