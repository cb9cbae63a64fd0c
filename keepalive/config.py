import os
import copy
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv
from keepalive.exceptions import ConfigurationMissingError

DEFAULT_HEAVY_INTERVAL = 5
HEAVY_INTERVAL_MIN = 2
HEAVY_INTERVAL_MAX = 60

DEFAULT_TIMEOUT = 130
TIMEOUT_MIN = 30
TIMEOUT_MAX = 130

DEFAULT_SCHEDULE_INTERVAL = 3

STRATEGIES = ('time', 'header')

# Environment variable -> dot-path in the config tree
ENV_OVERRIDES = {
    'HTTP_TRIGGER_URL': 'ping.url',
    'WARMUP_INTERVAL_MINUTES': 'ping.heavy_interval',
    'PING_REQUEST_HEADER': 'ping.request_header',
    'PING_MODE': 'ping.strategy',
    'PING_TIMEOUT_SECONDS': 'ping.timeout',
    'SCHEDULE_INTERVAL_MINUTES': 'schedule.interval',
    'LOG_LEVEL': 'logging.level',
}

DEFAULTS = {
    'ping': {
        'url': None,
        'heavy_interval': DEFAULT_HEAVY_INTERVAL,
        'request_header': None,
        'strategy': None,
        'timeout': DEFAULT_TIMEOUT,
    },
    'schedule': {
        'interval': DEFAULT_SCHEDULE_INTERVAL,
    },
    'logging': {
        'level': 'INFO',
        'verbose': False,
        'quiet': False
    },
}

class Config:
    """Configuration management for keepalive."""

    _instance = None
    _config = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if Config._config is not None:
            return
        self.reload()

    def reload(self, path: Optional[str] = None):
        """Rebuild the configuration from defaults, config.yaml, .env and the environment."""
        config = copy.deepcopy(DEFAULTS)

        config_path = Path(path or os.getenv('KEEPALIVE_CONFIG', 'config.yaml'))
        if config_path.exists():
            try:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
                self._merge_config(config, file_config)
            except (OSError, yaml.YAMLError) as e:
                print(f"Warning: Could not load {config_path}: {e}")

        # .env never overrides variables already present in the environment
        load_dotenv()
        for env_name, key_path in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is not None and value.strip() != '':
                self._set(config, key_path, value.strip())

        Config._config = config

    def _merge_config(self, base: Dict, override: Dict):
        """Recursively merge override config into base config."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    @staticmethod
    def _set(config: Dict, key_path: str, value: Any):
        keys = key_path.split('.')
        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]
        config[keys[-1]] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path (e.g., 'ping.timeout')."""
        keys = key_path.split('.')
        value = Config._config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any):
        """Set config value by dot-separated path."""
        self._set(Config._config, key_path, value)

    def save(self, path: Optional[str] = None):
        """Save current configuration to YAML file."""
        if path is None:
            path = 'config.yaml'

        with open(path, 'w') as f:
            yaml.dump(Config._config, f, default_flow_style=False, sort_keys=False)

# Global config instance
_config = None

def get_config():
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config

def reset_config():
    """Drop the cached configuration so the next get_config() re-reads everything."""
    global _config
    _config = None
    Config._config = None


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None

def heavy_interval_from(value: Any) -> int:
    """Heavy warmup interval in minutes; anything outside 2..60 falls back to 5."""
    v = _to_int(value)
    if v is None or not (HEAVY_INTERVAL_MIN <= v <= HEAVY_INTERVAL_MAX):
        return DEFAULT_HEAVY_INTERVAL
    return v

def clamp_int(value: Any, default: int, min_val: int, max_val: int) -> int:
    v = _to_int(value)
    if v is None:
        return default
    return max(min_val, min(max_val, v))


@dataclass(frozen=True)
class PingSettings:
    """Effective settings for one keep-alive target."""
    url: Optional[str] = None
    heavy_interval_minutes: int = DEFAULT_HEAVY_INTERVAL
    request_header: Optional[str] = None
    strategy: str = 'time'
    timeout_seconds: int = DEFAULT_TIMEOUT
    schedule_minutes: int = DEFAULT_SCHEDULE_INTERVAL

    @property
    def configured(self) -> bool:
        return bool(self.url)


def load_settings(config: Optional[Config] = None, require_url: bool = False) -> PingSettings:
    """Snapshot the current configuration into PingSettings."""
    config = config or get_config()

    header = config.get('ping.request_header') or None
    strategy = str(config.get('ping.strategy') or '').strip().lower()
    if strategy not in STRATEGIES:
        strategy = 'header' if header else 'time'

    settings = PingSettings(
        url=config.get('ping.url') or None,
        heavy_interval_minutes=heavy_interval_from(config.get('ping.heavy_interval')),
        request_header=header,
        strategy=strategy,
        timeout_seconds=clamp_int(config.get('ping.timeout'), DEFAULT_TIMEOUT, TIMEOUT_MIN, TIMEOUT_MAX),
        schedule_minutes=clamp_int(config.get('schedule.interval'), DEFAULT_SCHEDULE_INTERVAL, 1, 60),
    )

    if require_url and not settings.configured:
        raise ConfigurationMissingError("HTTP_TRIGGER_URL")
    return settings
