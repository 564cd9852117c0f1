from typing import Protocol, Optional
from datetime import datetime

class UserDto:
    def __init__(self, id: int, name: Optional[str], email: str, phone: Optional[str],
                 password_hash: Optional[str], two_fa_enabled: bool,
                 created_at: Optional[datetime] = None, updated_at: Optional[datetime] = None):
        self.id = id
        self.name = name
        self.email = email
        self.phone = phone
        self.password_hash = password_hash
        self.two_fa_enabled = two_fa_enabled
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)

    def public(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "twoFAEnabled": self.two_fa_enabled,
        }

class UserRepository(Protocol):
    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        ...

    def create(self, name: str, email: str, password_hash: Optional[str], phone: Optional[str]) -> UserDto:
        ...

    def upsert_profile(self, name: str, email: str, phone: Optional[str]) -> UserDto:
        ...

    def set_two_factor(self, user_id: int, enabled: bool, phone: Optional[str]) -> Optional[UserDto]:
        ...
