import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Optional
import requests
from keepalive.config import PingSettings, load_settings
from keepalive.exceptions import TransportFailureError, UnexpectedStatusError
from keepalive.logger import get_logger
from keepalive.pinger import execute_ping
from keepalive.policy import (
    BackoffState, TickDecision, PingOutcome, decide_tick, apply_outcome
)


class ResultKind(Enum):
    OK = 'ok'
    SKIPPED = 'skipped'
    NOT_CONFIGURED = 'not_configured'
    UNEXPECTED_STATUS = 'unexpected_status'
    TRANSPORT_FAILURE = 'transport_failure'


@dataclass(frozen=True)
class TickResult:
    kind: ResultKind
    state: BackoffState
    decision: Optional[TickDecision] = None
    outcome: Optional[PingOutcome] = None

    @property
    def ok(self) -> bool:
        return self.kind in (ResultKind.OK, ResultKind.SKIPPED, ResultKind.NOT_CONFIGURED)


def classify(outcome: PingOutcome) -> ResultKind:
    if outcome.succeeded:
        return ResultKind.OK
    if outcome.observed_status is None or outcome.observed_status >= 500:
        return ResultKind.TRANSPORT_FAILURE
    return ResultKind.UNEXPECTED_STATUS


class KeepAliveTask:
    """Scheduler adapter that owns the backoff state between ticks."""

    def __init__(self, settings: Optional[PingSettings] = None,
                 session: Optional[requests.Session] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.logger = get_logger()
        self.settings = settings or load_settings()
        self.session = session
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.state = BackoffState()
        self.ticks = 0
        self.last_result: Optional[TickResult] = None
        self._lock = threading.Lock()

    def run_tick(self, now: Optional[datetime] = None) -> TickResult:
        """Run one tick and report what happened without raising."""
        with self._lock:
            result = self._tick(now or self.clock())
            self.state = result.state
            self.ticks += 1
            self.last_result = result
            return result

    def _tick(self, now: datetime) -> TickResult:
        if not self.settings.configured:
            self.logger.error("❌ Missing HTTP_TRIGGER_URL, skipping tick")
            return TickResult(ResultKind.NOT_CONFIGURED, self.state)

        decision, state = decide_tick(now, self.settings, self.state)
        if decision.should_skip:
            self.logger.warning(
                f"⏸️ backing off, tick skipped "
                f"(failures={state.consecutive_failures} skip={state.skip_count})"
            )
            return TickResult(ResultKind.SKIPPED, state, decision)

        outcome = execute_ping(decision, self.settings, self.session)
        state = apply_outcome(outcome, state, self.settings, decision)
        return TickResult(classify(outcome), state, decision, outcome)

    def __call__(self) -> TickResult:
        """Entry point for the host scheduler; failing ticks raise."""
        result = self.run_tick()
        if result.kind is ResultKind.UNEXPECTED_STATUS:
            raise UnexpectedStatusError(result)
        if result.kind is ResultKind.TRANSPORT_FAILURE:
            raise TransportFailureError(result)
        return result

    def status(self) -> Dict:
        with self._lock:
            return {
                'consecutive_failures': self.state.consecutive_failures,
                'skip_count': self.state.skip_count,
                'phase': self.state.phase.value,
                'ticks': self.ticks,
                'last_result': self.last_result.kind.value if self.last_result else None,
            }
