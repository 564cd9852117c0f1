# chicktrack/db/models/auth/otp.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

from ....utils import utcnow

class OTPCode(SQLModel, table=True):
    __tablename__ = "otp_codes"
    id: Optional[int] = Field(default=None, primary_key=True)
    phone: str = Field(max_length=20, index=True)
    code: str = Field(max_length=6)
    # Aware UTC; SQLite hands these back naive, repositories re-stamp them
    expires_at: datetime = Field(sa_type=DateTime(timezone=True), index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
