class NibeStatsError(Exception):
    """Base class for all collector errors."""


class TokenRefreshFailure(NibeStatsError):
    """The OAuth refresh-token exchange did not yield a new token pair."""


class FetchFailure(NibeStatsError):
    """A category endpoint could not be fetched or parsed."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url


class PersistenceFailure(NibeStatsError):
    """A measurement could not be written to storage."""
