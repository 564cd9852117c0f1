# chicktrack/db/models/users/user.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

from ....utils import utcnow

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(max_length=255, unique=True, index=True)
    phone: Optional[str] = Field(max_length=20, default=None)
    # Passwordless rows (created through /api/users/register) leave this empty
    password_hash: Optional[str] = Field(max_length=255, default=None)
    two_fa_enabled: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
