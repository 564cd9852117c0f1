from contextlib import contextmanager
from datetime import timedelta

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from chicktrack.application.services.otp_janitor import OtpJanitor
from chicktrack.db.models import OTPCode
from chicktrack.infrastructure.persistence.sqlalchemy.repositories.otp_store_sql import SqlOtpStore
from chicktrack.utils import utcnow

PHONE = "+254712345678"


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def test_put_replaces_prior_code(session):
    store = SqlOtpStore(session)
    store.put(PHONE, "111111", 60)
    store.put(PHONE, "222222", 60)

    rows = session.exec(select(OTPCode).where(OTPCode.phone == PHONE)).all()
    assert [r.code for r in rows] == ["222222"]
    assert store.get(PHONE).code == "222222"


def test_put_sets_expiry_from_ttl(session):
    store = SqlOtpStore(session)
    before = utcnow()
    rec = store.put(PHONE, "123456", 60)
    assert before + timedelta(seconds=59) <= rec.expires_at <= utcnow() + timedelta(seconds=61)


def test_codes_are_isolated_per_phone(session):
    store = SqlOtpStore(session)
    store.put(PHONE, "111111", 60)
    store.put("+255700000000", "222222", 60)

    store.consume(PHONE)

    assert store.get(PHONE) is None
    assert store.get("+255700000000").code == "222222"


def test_consume_is_idempotent(session):
    store = SqlOtpStore(session)
    store.put(PHONE, "123456", 60)
    store.consume(PHONE)
    store.consume(PHONE)
    assert store.get(PHONE) is None


def test_get_missing_returns_none(session):
    assert SqlOtpStore(session).get(PHONE) is None


def test_purge_expired_removes_only_expired_rows(session):
    store = SqlOtpStore(session)
    store.put(PHONE, "111111", 60)
    session.add(OTPCode(phone="+255700000000", code="222222", expires_at=utcnow() - timedelta(seconds=5)))
    session.commit()

    assert store.purge_expired() == 1
    assert store.get(PHONE) is not None
    assert store.get("+255700000000") is None


def test_janitor_run_once_purges_through_scope(engine):
    with Session(engine) as session:
        session.add(OTPCode(phone=PHONE, code="111111", expires_at=utcnow() - timedelta(seconds=5)))
        session.commit()

    @contextmanager
    def scope():
        with Session(engine) as s:
            yield SqlOtpStore(s)

    janitor = OtpJanitor(scope, interval_seconds=60)
    assert janitor.run_once() == 1
    assert janitor.run_once() == 0


def test_expiry_reads_back_as_utc_and_verifies(session):
    from chicktrack.application.services.otp_verification_service import OtpVerificationService

    store = SqlOtpStore(session)
    store.put(PHONE, "123456", 60)
    session.expire_all()

    rec = store.get(PHONE)
    assert rec.expires_at.utcoffset() == timedelta(0)
    assert OtpVerificationService(store=store).verify(PHONE, "123456").verified is True
    assert store.get(PHONE) is None


def test_expired_row_from_database_is_rejected(session):
    from chicktrack.application.errors import CodeExpired
    from chicktrack.application.services.otp_verification_service import OtpVerificationService

    session.add(OTPCode(phone=PHONE, code="123456", expires_at=utcnow() - timedelta(seconds=1)))
    session.commit()

    with pytest.raises(CodeExpired):
        OtpVerificationService(store=SqlOtpStore(session)).verify(PHONE, "123456")
    assert SqlOtpStore(session).get(PHONE) is None
