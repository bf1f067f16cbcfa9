"""Engine error types."""


class EngineError(Exception):
    """Base class for all scenario engine errors."""


class InvalidConfig(EngineError, ValueError):
    """Raised when a caller passes an invalid simulation or method config."""


class InvalidLevers(InvalidConfig):
    """Raised for unknown lever keys or non-numeric lever values."""


class SimulationCancelled(EngineError):
    """Raised when a batch is abandoned through its cancellation event."""
