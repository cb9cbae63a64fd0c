"""
Ping scheduler policy.

Decides, on every timer tick, whether the tick is skipped because of active
backoff, which warmup to send and which status to expect, then folds the
ping outcome back into the backoff counters.

    LIGHT  invalid payload, target is expected to reject it (HTTP 400).
           Warms the front-line API only.
    HEAVY  valid payload, target is expected to process it (HTTP 200).
           Warms the API and its database.

The functions here are pure apart from logging: ``BackoffState`` is an
immutable value owned by the caller and every operation returns a new one.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple, Union
from keepalive.config import PingSettings
from keepalive.logger import get_logger

MAX_BACKOFF = 5

HEAVY_PAYLOAD = 'warmup-system@artificialbug.com'
LIGHT_PAYLOAD = 'ping-api-only'

HEAVY_STATUS = 200
LIGHT_STATUS = 400


class Mode(Enum):
    LIGHT = 'light'
    HEAVY = 'heavy'

    @property
    def label(self) -> str:
        return 'FULL (API+DB)' if self is Mode.HEAVY else 'LIGHT (API only)'


class Phase(Enum):
    ACTIVE = 'active'
    BACKING_OFF = 'backing_off'


@dataclass(frozen=True)
class BackoffState:
    consecutive_failures: int = 0
    skip_count: int = 0

    @property
    def phase(self) -> Phase:
        return Phase.BACKING_OFF if self.skip_count > 0 else Phase.ACTIVE


@dataclass(frozen=True)
class TickDecision:
    should_skip: bool
    mode: Mode = Mode.LIGHT
    payload: Optional[str] = None
    expected_status: Union[int, FrozenSet[int], None] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def accepts(self, status: Optional[int]) -> bool:
        """True when ``status`` is the answer this tick was waiting for."""
        if status is None or self.expected_status is None:
            return False
        if isinstance(self.expected_status, int):
            return status == self.expected_status
        return status in self.expected_status

    def describe_expected(self) -> str:
        if isinstance(self.expected_status, int) or self.expected_status is None:
            return str(self.expected_status)
        return '|'.join(str(s) for s in sorted(self.expected_status))


@dataclass(frozen=True)
class PingOutcome:
    succeeded: bool
    observed_status: Optional[int] = None
    duration_ms: int = 0
    error_message: Optional[str] = None


def select_mode(now: datetime, settings: PingSettings) -> Mode:
    """Pick the warmup mode for a tick that is not skipped."""
    if settings.strategy == 'header':
        return Mode.HEAVY if settings.request_header else Mode.LIGHT

    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return Mode.HEAVY if now.minute % settings.heavy_interval_minutes == 0 else Mode.LIGHT


def decide_tick(now: datetime, settings: PingSettings,
                state: BackoffState) -> Tuple[TickDecision, BackoffState]:
    """Return the decision for this tick together with the updated state."""
    if state.skip_count > 0:
        return TickDecision(should_skip=True), replace(state, skip_count=state.skip_count - 1)

    mode = select_mode(now, settings)
    headers = {}
    if mode is Mode.HEAVY and settings.strategy == 'header':
        headers[settings.request_header] = 'true'

    if mode is Mode.HEAVY:
        decision = TickDecision(False, mode, HEAVY_PAYLOAD, HEAVY_STATUS, headers)
    else:
        decision = TickDecision(False, mode, LIGHT_PAYLOAD, LIGHT_STATUS, headers)
    return decision, state


def apply_outcome(outcome: PingOutcome, state: BackoffState, settings: PingSettings,
                  decision: Optional[TickDecision] = None) -> BackoffState:
    """Fold a ping outcome into the backoff state and log the tick summary."""
    if outcome.succeeded:
        new_state = BackoffState(0, 0)
    else:
        failures = min(state.consecutive_failures + 1, MAX_BACKOFF)
        new_state = BackoffState(failures, failures)

    logger = get_logger()
    mode = decision.mode.label if decision else 'UNKNOWN'
    expected = decision.describe_expected() if decision else '?'
    summary = (
        f"mode={mode} duration_ms={outcome.duration_ms} "
        f"expected={expected} observed={outcome.observed_status} "
        f"failures={new_state.consecutive_failures} skip={new_state.skip_count}"
    )
    if outcome.succeeded:
        logger.info(f"✅ warmup OK {summary}")
    else:
        logger.error(f"❌ warmup failed {summary} error={outcome.error_message}")
    return new_state
