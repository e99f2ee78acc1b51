"""
Domain-specific exception hierarchy for the lifecycle engine.
"""


class LifecycleError(Exception):
    """Base class for all application-level errors."""


class ClockNotProvided(LifecycleError):
    """Raised when an evaluation is requested without an explicit instant."""


class OrderNotFoundError(LifecycleError):
    """Raised when the order store has no record for the requested id."""


class TransitionRejected(LifecycleError):
    """Raised by callers that prefer exceptions over transition results."""

    def __init__(self, error):
        super().__init__(error.message)
        self.error = error
