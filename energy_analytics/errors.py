"""Error taxonomy for the analytics engine.

All errors are local, recoverable precondition failures. They subclass
``ValueError`` so callers that already guard numeric input keep working.
"""


class EngineError(ValueError):
    """Base class for every error raised by the engine."""


class EmptySeriesError(EngineError):
    """No observations exist for a requested (location, source) key."""


class InsufficientHistoryError(EngineError):
    """The series is too short for the requested operation."""


class InvalidParameterError(EngineError):
    """A parameter is outside its valid domain (alpha, horizon, ...)."""
