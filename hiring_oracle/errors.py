"""Exception types raised by the Hiring Oracle."""


class OracleError(Exception):
    """Base class for errors raised by the forecast engine."""


class InvalidConfigError(OracleError, ValueError):
    """A forecast knob is outside its allowed range."""


class ForecastCancelled(OracleError):
    """A forecast run was stopped by its cancellation token or deadline."""

    def __init__(self, completed_iterations: int, reason: str):
        self.completed_iterations = completed_iterations
        self.reason = reason
        super().__init__(
            f"Forecast cancelled after {completed_iterations} iterations ({reason})"
        )
