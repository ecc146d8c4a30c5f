class InvalidPlacementRequest(ValueError):
    """Footprint or rack parameters the placement model cannot evaluate."""


class NotARackError(ValueError):
    """Raised when a location record does not describe a rack."""
