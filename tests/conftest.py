import pytest
import requests

from keepalive import config as config_module

ENV_KEYS = (
    "HTTP_TRIGGER_URL",
    "WARMUP_INTERVAL_MINUTES",
    "PING_REQUEST_HEADER",
    "PING_MODE",
    "PING_TIMEOUT_SECONDS",
    "SCHEDULE_INTERVAL_MINUTES",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("KEEPALIVE_CONFIG", str(tmp_path / "config.yaml"))
    monkeypatch.setenv("KEEPALIVE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.chdir(tmp_path)
    config_module.reset_config()
    yield
    config_module.reset_config()


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code


class FakeSession:
    """Records posts and answers with a fixed status or raises a given error."""

    def __init__(self, status=200, error=None):
        self.status = status
        self.error = error
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status)


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def timeout_error():
    return requests.Timeout("read timed out")
