"""YouTube Data API v3 search client used by the searchYoutubeVideo action."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class YoutubeSearchClient:
    """Searches YouTube for videos matching a free-text query."""

    def __init__(self, http_client: httpx.AsyncClient, api_key: str, url: str) -> None:
        self._client = http_client
        self._api_key = api_key
        self._url = url

    async def search_videos(self, query: str, max_results: int = 5) -> list[dict[str, Any]]:
        """Return the raw search items (``id.videoId`` plus ``snippet``)."""
        response = await self._client.get(
            self._url,
            params={
                "part": "snippet",
                "q": query,
                "type": "video",
                "maxResults": max_results,
                "key": self._api_key,
            },
        )
        response.raise_for_status()
        items = response.json().get("items") or []
        logger.debug(f"🔎 YouTube search returned {len(items)} items")
        return items
