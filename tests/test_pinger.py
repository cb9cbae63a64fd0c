import requests

from keepalive.config import PingSettings
from keepalive.pinger import execute_ping
from keepalive.policy import TickDecision, Mode, HEAVY_PAYLOAD, LIGHT_PAYLOAD

SETTINGS = PingSettings(url="https://example.test/api", timeout_seconds=130)
HEAVY = TickDecision(False, Mode.HEAVY, HEAVY_PAYLOAD, 200, {"x-warmup": "true"})
LIGHT = TickDecision(False, Mode.LIGHT, LIGHT_PAYLOAD, 400)


def test_posts_payload_with_timeout_and_headers(fake_session):
    session = fake_session(status=200)
    outcome = execute_ping(HEAVY, SETTINGS, session)

    assert outcome.succeeded
    assert outcome.observed_status == 200
    assert outcome.error_message is None
    assert outcome.duration_ms >= 0
    call, = session.calls
    assert call["url"] == "https://example.test/api"
    assert call["json"] == {"email": HEAVY_PAYLOAD}
    assert call["headers"] == {"x-warmup": "true"}
    assert call["timeout"] == 130


def test_expected_rejection_is_success(fake_session):
    session = fake_session(status=400)
    outcome = execute_ping(LIGHT, SETTINGS, session)
    assert outcome.succeeded
    assert outcome.observed_status == 400
    assert session.calls[0]["headers"] is None


def test_unexpected_status_is_failure(fake_session):
    outcome = execute_ping(LIGHT, SETTINGS, fake_session(status=200))
    assert not outcome.succeeded
    assert outcome.observed_status == 200
    assert outcome.error_message == "HTTP 200"


def test_timeout_is_failure(fake_session, timeout_error):
    outcome = execute_ping(HEAVY, SETTINGS, fake_session(error=timeout_error))
    assert not outcome.succeeded
    assert outcome.observed_status is None
    assert "timeout" in outcome.error_message


def test_connection_error_is_failure(fake_session):
    error = requests.ConnectionError("connection refused")
    outcome = execute_ping(HEAVY, SETTINGS, fake_session(error=error))
    assert not outcome.succeeded
    assert outcome.observed_status is None
    assert "connection refused" in outcome.error_message


def test_uses_requests_module_without_session(monkeypatch, fake_session):
    session = fake_session(status=400)
    monkeypatch.setattr(requests, "post", session.post)
    assert execute_ping(LIGHT, SETTINGS).succeeded
    assert len(session.calls) == 1
