INSUFFICIENT_POINTS_MESSAGE = "Route optimization requires at least two points."


class RouteOptimizerError(Exception):
    """Base exception for route optimization errors."""


class InsufficientPointsError(RouteOptimizerError):
    """Raised when a route resolves to fewer than two points."""

    def __init__(self, message: str = INSUFFICIENT_POINTS_MESSAGE) -> None:
        super().__init__(message)


class ProviderError(RouteOptimizerError):
    """Raised when a single estimation provider call fails."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider
