from typing import Protocol

from nibe_stats.domain.metrics import Category, FetchResult, OperationResult


class TelemetryPort(Protocol):
    async def refresh(self) -> OperationResult:
        """
        Exchange the current refresh token for a new token pair.
        Failures are returned, never raised.
        """
        ...

    async def fetch(self, url: str) -> FetchResult:
        """
        Authenticated GET of one parameter list.
        Failures are returned, never raised.
        """
        ...

    async def fetch_category(self, category: Category) -> FetchResult:
        """
        Fetch the parameter list of one serviceinfo category.
        """
        ...

    async def close(self) -> None:
        ...
