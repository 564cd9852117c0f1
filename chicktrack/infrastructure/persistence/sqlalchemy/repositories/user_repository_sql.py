from typing import Optional
from sqlmodel import Session, select

from .....db.models import User
from .....application.ports.user_repo import UserRepository, UserDto
from .....utils import utcnow

class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            password_hash=user.password_hash,
            two_fa_enabled=bool(user.two_fa_enabled),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def get_by_email(self, email: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.email == email)).first()
        return self._to_dto(user) if user else None

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        return self._to_dto(user) if user else None

    def create(self, name: str, email: str, password_hash: Optional[str], phone: Optional[str]) -> UserDto:
        user = User(name=name, email=email, password_hash=password_hash, phone=phone)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return self._to_dto(user)

    def upsert_profile(self, name: str, email: str, phone: Optional[str]) -> UserDto:
        user = self.session.exec(select(User).where(User.email == email)).first()
        if user is None:
            user = User(name=name, email=email, phone=phone)
        else:
            # Existing rows keep their phone unless a new one is sent
            user.name = name
            user.phone = phone if phone is not None else user.phone
            user.updated_at = utcnow()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return self._to_dto(user)

    def set_two_factor(self, user_id: int, enabled: bool, phone: Optional[str]) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        if not user:
            return None
        if enabled:
            user.phone = phone
        user.two_fa_enabled = enabled
        user.updated_at = utcnow()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return self._to_dto(user)
