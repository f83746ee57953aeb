"""Exception types raised inside the pitch board engine."""


class PitchboardError(Exception):
    """Base class for engine errors."""


class StoreUnavailableError(PitchboardError):
    """The match store could not be read or written, or returned malformed data."""


class PlanEditError(PitchboardError):
    """An edit was rejected; the plan is left unchanged."""


class ClockConfigurationError(PitchboardError, ValueError):
    """The match timer was configured with invalid values."""
