import httpx
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from nibe_stats.domain.errors import FetchFailure, TokenRefreshFailure
from nibe_stats.domain.metrics import Category, FetchResult, OperationResult, ParameterRecord
from nibe_stats.domain.tokens import TokenPair, TokenStore, hint

logger = logging.getLogger(__name__)


class NibeUplinkAdapter:
    """
    Client for the NIBE Uplink REST API.

    Every public call converts its failures into result values so a single bad
    endpoint degrades one cycle instead of aborting it.
    """

    def __init__(
        self,
        token_store: TokenStore,
        client_id: str,
        client_secret: str,
        system_id: str,
        base_url: str = "https://api.nibeuplink.com",
        timeout: float = 30.0,
    ):
        self.token_store = token_store
        self.client_id = client_id
        self.client_secret = client_secret
        self.system_id = system_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def token_url(self) -> str:
        return f"{self.base_url}/oauth/token"

    def category_url(self, category: Category) -> str:
        return f"{self.base_url}/api/v1/systems/{self.system_id}/serviceinfo/categories/{category.value}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def refresh(self) -> OperationResult:
        """
        OAuth2 refresh_token grant. On success the token store holds the new pair;
        on failure it keeps whatever it held before.
        """
        logger.info("Trying to refresh token...")
        try:
            tokens = await self._request_tokens(self.token_store.get_refresh_token())
        except TokenRefreshFailure as e:
            logger.error(f"Token refresh failed: {e}")
            if not self.token_store.has_refreshed:
                logger.warning("No refresh has succeeded yet, still using the configured seed tokens")
            return OperationResult.failure(e)

        self.token_store.set_tokens(tokens.access_token, tokens.refresh_token)
        logger.info(f"Token refreshed successfully (access={hint(tokens.access_token)})")
        return OperationResult.success()

    async def _request_tokens(self, refresh_token: str) -> TokenPair:
        client = self._get_client()
        form = {
            "grant_type": "refresh_token",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
        }
        headers = {
            "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
            "Accept": "application/json",
        }

        try:
            response = await client.post(self.token_url, data=form, headers=headers)
            response.raise_for_status()
            body = response.json()
            # Upstream may omit refresh_token when it does not rotate it
            return TokenPair(
                access_token=body["access_token"],
                refresh_token=body.get("refresh_token") or refresh_token,
            )
        except httpx.HTTPError as e:
            raise TokenRefreshFailure(f"HTTP error: {e}") from e
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise TokenRefreshFailure(f"Malformed token response: {e}") from e

    async def fetch(self, url: str, category: Optional[Category] = None) -> FetchResult:
        client = self._get_client()
        headers = {
            "Authorization": f"Bearer {self.token_store.get_access_token()}",
            "Accept": "application/json",
        }

        try:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
            records = self._parse_parameters(response.json(), url)
        except httpx.HTTPError as e:
            error = FetchFailure(url, f"HTTP error: {e}")
        except ValueError as e:
            # Body is not JSON or not a list
            error = FetchFailure(url, f"Unexpected payload: {e}")
        else:
            logger.info(f"Retrieved {len(records)} parameters from {category.value if category else url}")
            return FetchResult(url=url, category=category, data=records)

        logger.error(f"Fetch failed: {error}")
        return FetchResult(url=url, category=category, error=error)

    async def fetch_category(self, category: Category) -> FetchResult:
        return await self.fetch(self.category_url(category), category=category)

    def _parse_parameters(self, payload: Any, url: str) -> List[ParameterRecord]:
        """
        Validates each entry on its own. Entries without a usable parameterId or
        rawValue are skipped so they cannot hide the rest of the category.
        """
        if not isinstance(payload, list):
            raise ValueError(f"expected a list of parameters, got {type(payload).__name__}")

        records = []
        for index, entry in enumerate(payload):
            try:
                records.append(ParameterRecord.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping parameter #{index} from {url}: {e.error_count()} invalid field(s) ({entry!r})")
        return records
