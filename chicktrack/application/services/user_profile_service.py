import logging
from dataclasses import dataclass
from typing import Optional

from ..ports.user_repo import UserDto, UserRepository

logger = logging.getLogger(__name__)


@dataclass
class UserProfileService:
    """Farm-profile sign-up: users identified by email, no password.

    Rows created here cannot log in with a password until they register
    through the auth flow.
    """

    user_repo: UserRepository

    def register_profile(self, name: str, email: str, phone: Optional[str] = None) -> UserDto:
        name = name.strip()
        email = email.strip()
        phone = phone.strip() if phone else None
        user = self.user_repo.upsert_profile(name=name, email=email, phone=phone)
        logger.info(f"Profile registered for user {user.id}")
        return user
