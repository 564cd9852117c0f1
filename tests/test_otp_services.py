from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from chicktrack.application.errors import (
    CodeExpired,
    CodeMismatch,
    DispatchFailed,
    InvalidPhone,
    NoPendingCode,
    ProviderError,
    ProviderUnconfigured,
)
from chicktrack.application.ports.otp_store import OtpCodeDto
from chicktrack.application.ports.sms_gateway import SmsResult
from chicktrack.application.services.otp_issuance_service import OtpIssuanceService
from chicktrack.application.services.otp_verification_service import OtpVerificationService
from chicktrack.utils import utcnow

PHONE = "+254712345678"


class FakeOtpStore:
    def __init__(self):
        self.rows: Dict[str, OtpCodeDto] = {}
        self.consumed: List[str] = []

    def put(self, phone: str, code: str, ttl_seconds: int) -> OtpCodeDto:
        rec = OtpCodeDto(phone=phone, code=code, expires_at=utcnow() + timedelta(seconds=ttl_seconds))
        self.rows[phone] = rec
        return rec

    def get(self, phone: str) -> Optional[OtpCodeDto]:
        return self.rows.get(phone)

    def consume(self, phone: str) -> None:
        self.consumed.append(phone)
        self.rows.pop(phone, None)


class FakeGateway:
    def __init__(self, error: Exception = None, provider: str = "briq"):
        self.sent = []
        self.error = error
        self.provider = provider

    @property
    def configured(self) -> bool:
        return True

    async def send(self, recipients, message):
        self.sent.append((recipients, message))
        if self.error:
            raise self.error
        return SmsResult(provider=self.provider)


class FakeAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, phone, user_id=None, success=True, details=None):
        self.entries.append((action, success, details or {}))


def make_services(gateway=None, ttl=60, template=None):
    store = FakeOtpStore()
    issuer = OtpIssuanceService(store=store, gateway=gateway or FakeGateway(), ttl_seconds=ttl, message_template=template)
    verifier = OtpVerificationService(store=store)
    return store, issuer, verifier


@pytest.mark.asyncio
async def test_issue_then_verify_succeeds_exactly_once():
    store, issuer, verifier = make_services()
    result = await issuer.issue(PHONE)
    assert result.ttl_seconds == 60
    assert result.provider == "briq"

    code = store.rows[PHONE].code
    assert verifier.verify(PHONE, code).verified is True
    with pytest.raises(NoPendingCode):
        verifier.verify(PHONE, code)


@pytest.mark.asyncio
async def test_reissue_invalidates_previous_code():
    store, issuer, verifier = make_services()
    await issuer.issue(PHONE)
    first = store.rows[PHONE].code
    await issuer.issue(PHONE)
    second = store.rows[PHONE].code

    if first != second:
        with pytest.raises(CodeMismatch):
            verifier.verify(PHONE, first)
    assert verifier.verify(PHONE, second).verified is True


@pytest.mark.asyncio
async def test_wrong_code_keeps_pending_record():
    store, issuer, verifier = make_services()
    await issuer.issue(PHONE)
    code = store.rows[PHONE].code
    wrong = "000000" if code != "000000" else "111111"

    with pytest.raises(CodeMismatch):
        verifier.verify(PHONE, wrong)
    assert PHONE in store.rows
    assert verifier.verify(PHONE, f"  {code} ").verified is True


def test_expired_code_is_consumed():
    store = FakeOtpStore()
    store.rows[PHONE] = OtpCodeDto(phone=PHONE, code="123456", expires_at=utcnow() - timedelta(seconds=1))
    verifier = OtpVerificationService(store=store)

    with pytest.raises(CodeExpired):
        verifier.verify(PHONE, "123456")
    with pytest.raises(NoPendingCode):
        verifier.verify(PHONE, "123456")


def test_code_expires_at_the_deadline_instant():
    store = FakeOtpStore()
    deadline = datetime(2030, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    store.rows[PHONE] = OtpCodeDto(phone=PHONE, code="123456", expires_at=deadline)
    verifier = OtpVerificationService(store=store, clock=lambda: deadline)

    with pytest.raises(CodeExpired):
        verifier.verify(PHONE, "123456")


def test_codes_compare_as_strings():
    store = FakeOtpStore()
    store.rows[PHONE] = OtpCodeDto(phone=PHONE, code="123456", expires_at=utcnow() + timedelta(seconds=60))
    verifier = OtpVerificationService(store=store)

    with pytest.raises(CodeMismatch):
        verifier.verify(PHONE, "0123456")
    assert verifier.verify(PHONE, "123456").verified is True


def test_verify_rejects_invalid_phone_before_touching_store():
    store = FakeOtpStore()
    verifier = OtpVerificationService(store=store)
    with pytest.raises(InvalidPhone):
        verifier.verify("0712345678", "123456")
    assert store.consumed == []


@pytest.mark.asyncio
async def test_issue_rejects_invalid_phone_without_sending():
    gateway = FakeGateway()
    store, issuer, _ = make_services(gateway=gateway)
    with pytest.raises(InvalidPhone):
        await issuer.issue("+0123456789")
    assert gateway.sent == []
    assert store.rows == {}


@pytest.mark.asyncio
async def test_issue_renders_template_and_sends_to_phone():
    gateway = FakeGateway()
    store, issuer, _ = make_services(gateway=gateway, template="Farm code {code}")
    await issuer.issue(PHONE)

    recipients, message = gateway.sent[0]
    assert recipients == [PHONE]
    assert message == f"Farm code {store.rows[PHONE].code}"


@pytest.mark.asyncio
async def test_dispatch_failure_surfaces_and_leaves_row_persisted():
    gateway = FakeGateway(error=ProviderError("briq", 503, "unavailable"))
    store, issuer, _ = make_services(gateway=gateway)

    with pytest.raises(DispatchFailed) as exc:
        await issuer.issue(PHONE)
    assert "503" in exc.value.detail
    assert PHONE in store.rows


@pytest.mark.asyncio
async def test_unconfigured_provider_is_not_wrapped():
    store, issuer, _ = make_services(gateway=FakeGateway(error=ProviderUnconfigured()))
    with pytest.raises(ProviderUnconfigured):
        await issuer.issue(PHONE)


@pytest.mark.asyncio
async def test_audit_never_records_the_code():
    audit = FakeAudit()
    store = FakeOtpStore()
    issuer = OtpIssuanceService(store=store, gateway=FakeGateway(), audit=audit)
    await issuer.issue(PHONE)

    action, success, details = audit.entries[0]
    assert action == "otp_issue"
    assert success is True
    assert store.rows[PHONE].code not in str(details)


@pytest.mark.asyncio
async def test_issue_passes_provider_data_through():
    class DataGateway(FakeGateway):
        async def send(self, recipients, message):
            await super().send(recipients, message)
            return SmsResult(provider="africastalking", provider_data={"SMSMessageData": {"Message": "Sent to 1/1"}})

    _, issuer, _ = make_services(gateway=DataGateway())
    result = await issuer.issue(PHONE)
    assert result.provider == "africastalking"
    assert result.provider_data == {"SMSMessageData": {"Message": "Sent to 1/1"}}
