import logging
from typing import Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str


class TokenStore:
    """
    In-memory holder of the current OAuth token pair.

    Until the first successful refresh, the configured seed tokens are returned.
    Nothing is persisted: a restart falls back to the seeds again.
    """

    def __init__(self, seed_access_token: str, seed_refresh_token: str):
        self._seed = TokenPair(access_token=seed_access_token, refresh_token=seed_refresh_token)
        self._current: Optional[TokenPair] = None

    def get_access_token(self) -> str:
        if self._current is not None:
            return self._current.access_token
        return self._seed.access_token

    def get_refresh_token(self) -> str:
        if self._current is not None:
            return self._current.refresh_token
        return self._seed.refresh_token

    def set_tokens(self, access_token: str, refresh_token: str) -> None:
        self._current = TokenPair(access_token=access_token, refresh_token=refresh_token)
        logger.debug(f"Token pair replaced (access={hint(access_token)}, refresh={hint(refresh_token)})")

    @property
    def has_refreshed(self) -> bool:
        return self._current is not None


def hint(token: str) -> str:
    """Redacted rendering of a token, safe for logs."""
    if not token:
        return "<empty>"
    if len(token) < 12:
        return "***"
    return f"{token[:4]}...{token[-4:]}"
