"""iTunes Search API provider for song metadata"""

import asyncio
from typing import Optional, Dict, Any

from .base import MetadataProvider, LookupResult
from config import LOOKUP
from logging_config import get_logger

logger = get_logger(__name__)


def enhance_artwork_url(url: Optional[str], size: int) -> Optional[str]:
    """
    Ask iTunes for a larger cover than the 100px default.
    iTunes URLs can be modified: .../100x100bb.jpg -> .../600x600bb.jpg
    """
    if not url or size == 100:
        return url
    enhanced = url.replace("100x100bb", f"{size}x{size}bb")
    if enhanced == url:
        enhanced = url.replace("100x100", f"{size}x{size}")
    return enhanced


class ItunesMetadataProvider(MetadataProvider):
    BASE_URL = "https://itunes.apple.com/search"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 artwork_size: Optional[int] = None):
        super().__init__(provider_name="itunes", timeout=timeout or LOOKUP["timeout"])
        self.BASE_URL = base_url or LOOKUP.get("base_url", self.BASE_URL)
        self.artwork_size = artwork_size or LOOKUP["artwork_size"]
        self.session.headers.update(LOOKUP.get("headers", {}))

    async def search(self, query: str) -> LookupResult:
        query = (query or "").strip()
        if not query:
            return LookupResult.failed("Empty search query")
        # Cancellation interrupts the await right away; the worker thread's
        # response is simply dropped.
        return await asyncio.to_thread(self._search_sync, query)

    def _search_sync(self, query: str) -> LookupResult:
        params = {
            "media": "music",
            "entity": "song",
            "limit": 1,
            "term": query,
        }
        try:
            logger.info(f"iTunes - Searching for: {query}")
            response = self.session.get(self.BASE_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            return self._parse_response(data)
        except Exception as e:
            logger.warning(f"iTunes - Lookup failed for '{query}': {e}")
            return LookupResult.failed(str(e) or e.__class__.__name__)

    def _parse_response(self, data: Dict[str, Any]) -> LookupResult:
        if not isinstance(data, dict):
            return LookupResult.failed("Malformed response")

        results = data.get("results") or []
        if not isinstance(results, list):
            return LookupResult.failed("Malformed response")
        first = results[0] if results else None
        if not first:
            logger.info("iTunes - No results")
            return LookupResult.failed("No results")
        if not isinstance(first, dict):
            return LookupResult.failed("Malformed response")

        logger.info(f"iTunes - Found: {first.get('trackName')} by {first.get('artistName')}")
        return LookupResult.found(
            track_name=first.get("trackName"),
            artist_name=first.get("artistName"),
            album_name=first.get("collectionName"),
            artwork_url=enhance_artwork_url(first.get("artworkUrl100"), self.artwork_size),
        )
