import pytest
import yaml

from keepalive.config import (
    get_config, load_settings, heavy_interval_from, reset_config,
    DEFAULT_HEAVY_INTERVAL, DEFAULT_TIMEOUT,
)
from keepalive.exceptions import ConfigurationMissingError


def test_defaults():
    s = load_settings()
    assert s.url is None
    assert not s.configured
    assert s.heavy_interval_minutes == DEFAULT_HEAVY_INTERVAL
    assert s.strategy == "time"
    assert s.timeout_seconds == DEFAULT_TIMEOUT
    assert s.schedule_minutes == 3


@pytest.mark.parametrize("raw,expected", [
    ("1", 5), ("61", 5), ("2", 2), ("60", 60), ("15", 15),
    ("abc", 5), ("", 5), (None, 5), ("0", 5), ("-3", 5),
])
def test_heavy_interval_clamp(raw, expected):
    assert heavy_interval_from(raw) == expected


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("HTTP_TRIGGER_URL", "https://example.test/api")
    monkeypatch.setenv("WARMUP_INTERVAL_MINUTES", "61")
    monkeypatch.setenv("PING_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("SCHEDULE_INTERVAL_MINUTES", "1")
    reset_config()

    s = load_settings()
    assert s.url == "https://example.test/api"
    assert s.configured
    assert s.heavy_interval_minutes == 5
    assert s.timeout_seconds == 30
    assert s.schedule_minutes == 1


def test_header_enables_header_strategy(monkeypatch):
    monkeypatch.setenv("PING_REQUEST_HEADER", "x-warmup")
    reset_config()
    s = load_settings()
    assert s.request_header == "x-warmup"
    assert s.strategy == "header"


def test_explicit_strategy_wins(monkeypatch):
    monkeypatch.setenv("PING_REQUEST_HEADER", "x-warmup")
    monkeypatch.setenv("PING_MODE", "TIME")
    reset_config()
    assert load_settings().strategy == "time"


def test_yaml_file_is_merged(tmp_path):
    (tmp_path / "config.yaml").write_text(yaml.safe_dump({
        "ping": {"url": "https://from-file.test", "heavy_interval": 10},
    }))
    reset_config()
    s = load_settings()
    assert s.url == "https://from-file.test"
    assert s.heavy_interval_minutes == 10
    # untouched keys keep their defaults
    assert s.timeout_seconds == DEFAULT_TIMEOUT


def test_env_beats_yaml(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text("ping:\n  url: https://from-file.test\n")
    monkeypatch.setenv("HTTP_TRIGGER_URL", "https://from-env.test")
    reset_config()
    assert load_settings().url == "https://from-env.test"


def test_get_set_and_save(tmp_path):
    config = get_config()
    config.set("ping.url", "https://set.test")
    assert config.get("ping.url") == "https://set.test"
    assert config.get("missing.key", "fallback") == "fallback"

    out = tmp_path / "saved.yaml"
    config.save(str(out))
    assert yaml.safe_load(out.read_text())["ping"]["url"] == "https://set.test"


def test_require_url_raises():
    with pytest.raises(ConfigurationMissingError) as exc:
        load_settings(require_url=True)
    assert exc.value.setting == "HTTP_TRIGGER_URL"
