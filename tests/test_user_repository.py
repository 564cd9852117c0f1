import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from chicktrack.application.errors import InvalidCredentials
from chicktrack.application.services.auth_service import AuthService
from chicktrack.application.services.user_profile_service import UserProfileService
from chicktrack.db import models  # noqa: F401
from chicktrack.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository


@pytest.fixture
def session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


def test_create_and_toggle_two_factor(session):
    repo = SqlUserRepository(session)
    user = repo.create(name="Amina", email="amina@example.com", password_hash="hash", phone=None)

    assert user.id is not None
    assert user.created_at is not None

    updated = repo.set_two_factor(user.id, True, "+254712345678")
    assert updated.two_fa_enabled is True
    assert updated.phone == "+254712345678"

    updated = repo.set_two_factor(user.id, False, None)
    assert updated.two_fa_enabled is False
    assert updated.phone == "+254712345678"


def test_profile_register_creates_then_updates_by_email(session):
    profiles = UserProfileService(user_repo=SqlUserRepository(session))

    first = profiles.register_profile("Amina", "amina@example.com", "+254712345678")
    assert first.has_password is False

    second = profiles.register_profile("Amina W.", "amina@example.com")
    assert second.id == first.id
    assert second.name == "Amina W."
    assert second.phone == "+254712345678"

    third = profiles.register_profile("Amina W.", "amina@example.com", "+255700000000")
    assert third.phone == "+255700000000"


@pytest.mark.asyncio
async def test_profile_only_account_cannot_log_in(session):
    repo = SqlUserRepository(session)
    UserProfileService(user_repo=repo).register_profile("Juma", "juma@example.com")
    auth = AuthService(user_repo=repo, issuer=None, verifier=None)

    with pytest.raises(InvalidCredentials):
        await auth.login("juma@example.com", "")
    with pytest.raises(InvalidCredentials):
        await auth.login("juma@example.com", "anything")
