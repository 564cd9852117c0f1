import re
import jwt
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from .core.config import settings

# =========================
# Phone numbers
# =========================
PHONE_PATTERN = re.compile(r"^\+[1-9]\d{7,14}$")

def normalize_phone(phone: Any) -> str:
    """Trim a submitted phone; list payloads use their first entry."""
    if isinstance(phone, (list, tuple)):
        phone = phone[0] if phone else ""
    return str(phone or "").strip()

def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and PHONE_PATTERN.match(phone) is not None

def mask_phone(phone: str) -> str:
    """Keep the leading three digits after '+' and the last two, star the rest."""
    head, middle, tail = phone[:4], phone[4:-2], phone[-2:]
    return f"{head}{'*' * len(middle)}{tail}"

# =========================
# Time
# =========================
def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(value: datetime) -> datetime:
    """Stamp naive values (SQLite drops the offset) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

# =========================
# OTP Generation
# =========================
def generate_otp() -> str:
    """Generate a uniformly random 6-digit OTP in [100000, 999999]."""
    return str(100000 + secrets.randbelow(900000))

# =========================
# JWT Token Handling
# =========================
def create_session_token(user_id: int, email: str) -> str:
    """Create the stateless session token (fixed 7 day validity)."""
    expire = utcnow() + timedelta(days=settings.SESSION_TOKEN_DAYS)
    to_encode = {"sub": str(user_id), "email": email, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def create_phone_proof_token(phone: str) -> str:
    """Short-lived token returned after a standalone phone verification."""
    expire = utcnow() + timedelta(seconds=settings.PHONE_PROOF_TTL_SECONDS)
    to_encode = {"sub": phone, "exp": expire, "type": "phone_proof"}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

def verify_phone_proof(token: str, phone: str) -> bool:
    payload = decode_jwt_token(token)
    if not payload or payload.get("type") != "phone_proof":
        return False
    return payload.get("sub") == phone
