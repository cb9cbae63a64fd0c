"""
Error taxonomy for the keep-alive task.

An expected rejection (LIGHT warmup answered with 400) is a success and has
no exception. Missing configuration is reported through the tick result and
only raised by ``load_settings(require_url=True)``.
"""


class KeepAliveError(Exception):
    """Base class for keep-alive errors."""


class ConfigurationMissingError(KeepAliveError):
    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"Missing {setting}")


class PingFailedError(KeepAliveError):
    """A tick reached the target but did not get the expected answer."""

    def __init__(self, result):
        self.result = result
        outcome = result.outcome
        message = outcome.error_message if outcome and outcome.error_message else "ping failed"
        super().__init__(f"{result.decision.mode.label} warmup failed: {message}")


class UnexpectedStatusError(PingFailedError):
    pass


class TransportFailureError(PingFailedError):
    """Timeout, DNS, refused connection or a 5xx answer."""
