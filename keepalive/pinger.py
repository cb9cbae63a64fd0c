"""
HTTP side of a keep-alive tick: one POST, one outcome.
"""
import time
import requests
from typing import Optional
from keepalive.config import PingSettings
from keepalive.logger import get_logger
from keepalive.policy import TickDecision, PingOutcome


def execute_ping(decision: TickDecision, settings: PingSettings,
                 session: Optional[requests.Session] = None) -> PingOutcome:
    """Send the warmup request described by ``decision``.

    A response whose status matches the expected one is a success even when
    it is a 4xx. Any other status, a timeout or a transport error is a
    failure. Network problems are reported in the outcome, never raised.
    """
    logger = get_logger()
    http = session or requests
    start = time.monotonic()

    try:
        response = http.post(
            settings.url,
            json={'email': decision.payload},
            headers=decision.headers or None,
            timeout=settings.timeout_seconds,
        )
    except requests.Timeout:
        duration = int((time.monotonic() - start) * 1000)
        return PingOutcome(False, None, duration, f"timeout after {settings.timeout_seconds}s")
    except requests.RequestException as e:
        duration = int((time.monotonic() - start) * 1000)
        return PingOutcome(False, None, duration, str(e) or e.__class__.__name__)

    duration = int((time.monotonic() - start) * 1000)
    status = response.status_code
    logger.debug(f"POST {settings.url} -> {status} in {duration}ms")

    if decision.accepts(status):
        return PingOutcome(True, status, duration)
    return PingOutcome(False, status, duration, f"HTTP {status}")
