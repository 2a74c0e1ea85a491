"""Client for the social feed recent-search endpoint."""

from typing import Optional

import httpx
from pydantic import ValidationError

from .errors import FeedError
from .logging_setup import get_logger
from .types import SearchPage

logger = get_logger(__name__)


class FeedClient:
    """Searches the feed for alert posts newer than a given post id."""

    def __init__(
        self,
        search_url: str,
        query: str,
        bearer_token: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.search_url = search_url
        self.query = query
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {bearer_token}"},
            timeout=timeout,
            transport=transport,
        )

    def _params(self, since_id: Optional[str]) -> dict:
        params = {
            "query": self.query,
            "sort_order": "recency",
            "tweet.fields": "created_at",
        }
        if since_id:
            params["since_id"] = since_id
        return params

    async def search(self, since_id: Optional[str] = None) -> SearchPage:
        """Fetch posts newer than ``since_id`` (all recent posts when None).

        Raises:
            FeedError: on an invalid URL, transport failure or timeout,
                a non-200 status, or a body that does not parse.
        """
        try:
            response = await self._client.get(self.search_url, params=self._params(since_id))
        except httpx.InvalidURL as e:
            raise FeedError(f"Bad feed URL: {e}") from e
        except httpx.HTTPError as e:
            raise FeedError(f"Failed to call feed search: {e!r}") from e

        if response.status_code != httpx.codes.OK:
            raise FeedError(f"Feed search returned {response.status_code}: {response.text}")

        try:
            page = SearchPage.model_validate_json(response.content)
        except ValidationError as e:
            raise FeedError(f"Bad feed response: {e}") from e

        logger.debug(
            "feed_search_complete",
            since_id=since_id,
            result_count=page.result_count,
            newest_id=page.newest_id,
        )
        return page

    async def close(self) -> None:
        await self._client.aclose()
