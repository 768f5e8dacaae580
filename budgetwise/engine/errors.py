"""Exceptions raised by the calculation engines."""


class EngineError(Exception):
    """Base exception for engine operations."""
    pass


class InvalidFrequencyError(EngineError, ValueError):
    """Frequency tag is not monthly, quarterly or yearly."""

    def __init__(self, frequency):
        self.frequency = frequency
        super().__init__(f"Unrecognized frequency: {frequency!r}")


class InvalidWindowError(EngineError, ValueError):
    """A look-ahead window in days was negative."""
    pass


class InvalidContributionError(EngineError, ValueError):
    """Contribution amount is NaN or infinite."""
    pass
