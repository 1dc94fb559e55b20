class NEATError(RuntimeError):
    """Base class for engine failures that indicate corrupted state."""

class NetworkError(NEATError):
    """A genome could not be turned into (or evaluated as) a network."""

class PopulationError(NEATError):
    """The generational cycle hit a state it cannot continue from."""
