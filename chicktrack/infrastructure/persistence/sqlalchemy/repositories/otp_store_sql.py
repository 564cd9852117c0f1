from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import delete
from sqlmodel import Session, select

from .....db.models import OTPCode
from .....application.ports.otp_store import OtpStore, OtpCodeDto
from .....utils import as_utc, utcnow

class SqlOtpStore(OtpStore):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, row: OTPCode) -> OtpCodeDto:
        return OtpCodeDto(phone=row.phone, code=row.code, expires_at=as_utc(row.expires_at))

    def put(self, phone: str, code: str, ttl_seconds: int) -> OtpCodeDto:
        # Delete and insert share one commit so two live codes never coexist
        row = OTPCode(phone=phone, code=code, expires_at=utcnow() + timedelta(seconds=ttl_seconds))
        try:
            self.session.exec(delete(OTPCode).where(OTPCode.phone == phone))
            self.session.add(row)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(row)
        return self._to_dto(row)

    def get(self, phone: str) -> Optional[OtpCodeDto]:
        row = self.session.exec(
            select(OTPCode).where(OTPCode.phone == phone).order_by(OTPCode.id.desc())
        ).first()
        return self._to_dto(row) if row else None

    def consume(self, phone: str) -> None:
        self.session.exec(delete(OTPCode).where(OTPCode.phone == phone))
        self.session.commit()

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        result = self.session.exec(delete(OTPCode).where(OTPCode.expires_at <= now))
        self.session.commit()
        return result.rowcount or 0
