import pytest
import requests

from civic_tracker.services import sms_service
from civic_tracker.services.sms_service import SmsGateway, to_e164


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("9876543210", "+919876543210"),
        ("98765 43210", "+919876543210"),
        ("919876543210", "+919876543210"),
        ("+91 98765-43210", "+919876543210"),
        ("09876543210", "+919876543210"),
        ("+14155550123", "+14155550123"),
        ("4155550123456", "+4155550123456"),
    ],
)
def test_to_e164(raw, expected):
    assert to_e164(raw) == expected


def test_to_e164_uses_configured_country_code():
    assert to_e164("2025550123", country_code="1") == "+12025550123"
    assert to_e164("12025550123", country_code="1") == "+12025550123"


class _Response:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture
def twilio_settings(settings):
    return settings.model_copy(update={
        "sms_local_echo": False,
        "twilio_account_sid": "AC123",
        "twilio_auth_token": "secret",
        "twilio_from": "+15550001111",
    })


def test_local_echo_without_credentials(settings, monkeypatch):
    gateway = SmsGateway(settings.model_copy(update={"sms_local_echo": False, "twilio_account_sid": ""}))
    monkeypatch.setattr(sms_service.requests, "post", pytest.fail)

    result = gateway.send("+919999999999", "Your OTP is 123456")

    assert gateway.local_echo
    assert result.delivered and result.via_local_echo
    assert gateway.outbox[-1] == {"to": "+919999999999", "body": "Your OTP is 123456"}


def test_local_echo_flag_wins_over_credentials(twilio_settings, monkeypatch):
    gateway = SmsGateway(twilio_settings.model_copy(update={"sms_local_echo": True}))
    monkeypatch.setattr(sms_service.requests, "post", pytest.fail)

    assert gateway.send("+919999999999", "hi").via_local_echo


def test_twilio_success(twilio_settings, monkeypatch):
    calls = []

    def fake_post(url, data, auth, timeout):
        calls.append((url, data, auth, timeout))
        return _Response(201, {"sid": "SM1"})

    monkeypatch.setattr(sms_service.requests, "post", fake_post)
    result = SmsGateway(twilio_settings).send("+919999999999", "Your OTP is 123456")

    assert result.delivered and not result.via_local_echo
    url, data, auth, _ = calls[0]
    assert url.endswith("/Accounts/AC123/Messages.json")
    assert data == {"To": "+919999999999", "From": "+15550001111", "Body": "Your OTP is 123456"}
    assert auth == ("AC123", "secret")


def test_twilio_rejection_is_a_hard_failure(twilio_settings, monkeypatch):
    monkeypatch.setattr(
        sms_service.requests, "post",
        lambda *a, **kw: _Response(400, {"message": "Invalid 'To' Phone Number"}),
    )
    result = SmsGateway(twilio_settings).send("+91123", "x")

    assert not result.delivered and not result.via_local_echo
    assert result.error == "Invalid 'To' Phone Number"


def test_twilio_unreachable(twilio_settings, monkeypatch):
    def boom(*a, **kw):
        raise requests.ConnectionError("no route")

    monkeypatch.setattr(sms_service.requests, "post", boom)
    result = SmsGateway(twilio_settings).send("+919999999999", "x")

    assert not result.delivered
    assert result.error == "sms_transport_unreachable"
