"""
Base Provider Class
All song metadata providers must inherit from this base class.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import requests
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LookupResult:
    """Outcome of one remote search: either metadata or an error message, never both."""
    success: bool
    track_name: Optional[str] = None
    artist_name: Optional[str] = None
    album_name: Optional[str] = None
    artwork_url: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def found(cls, track_name: Optional[str], artist_name: Optional[str],
              album_name: Optional[str], artwork_url: Optional[str]) -> "LookupResult":
        return cls(True, track_name, artist_name, album_name, artwork_url)

    @classmethod
    def failed(cls, message: str) -> "LookupResult":
        return cls(False, error_message=message)


class MetadataProvider(ABC):
    """Base class for remote song metadata providers."""

    def __init__(self, provider_name: str, timeout: float = 10):
        self.name = provider_name
        self.timeout = timeout
        self.session = requests.Session()
        logger.info(f"Initialized {self.name} provider (timeout: {self.timeout}s)")

    @abstractmethod
    async def search(self, query: str) -> LookupResult:
        """
        Look up metadata for a free-text query.

        Ordinary failures (network, HTTP status, no results, bad payload) come
        back as a failed LookupResult. Cancelling the awaiting task raises
        asyncio.CancelledError, which callers treat as "no result".

        Args:
            query (str): Search term built from the file name

        Returns:
            LookupResult: Metadata of the first match, or the failure reason
        """
        pass

    def close(self) -> None:
        self.session.close()

    def __str__(self) -> str:
        return f"{self.name} Provider"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name='{self.name}' timeout={self.timeout}>"
