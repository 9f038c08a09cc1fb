"""
Artwork rotation for the song that is currently playing.
Shows the first user image right away, then cycles through the rest on a
fixed interval until stopped.
"""
from __future__ import annotations
import asyncio
from typing import Callable, List, Optional

from config import ARTWORK
from logging_config import get_logger

logger = get_logger(__name__)


class ArtworkRotation:
    def __init__(self, on_image: Callable[[str], None], interval: Optional[float] = None):
        """
        Args:
            on_image: Called with the image path every time the shown image changes
            interval: Seconds between images (defaults to artwork.rotation_interval)
        """
        self.on_image = on_image
        self.interval = interval if interval is not None else ARTWORK["rotation_interval"]
        self._images: List[str] = []
        self._index = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def current_image(self) -> Optional[str]:
        if not self._images:
            return None
        return self._images[self._index]

    def start(self, images: List[str]) -> None:
        """Show images[0] now; with two or more images, rotate until stop()."""
        self.stop()
        if not images:
            return

        self._images = list(images)
        self._index = 0
        self.on_image(self._images[0])

        if len(self._images) > 1:
            self._task = asyncio.get_running_loop().create_task(self._run())
            logger.debug(f"Artwork rotation started with {len(self._images)} images every {self.interval}s")

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._images = []
        self._index = 0

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if not self._images:
                return
            self._index = (self._index + 1) % len(self._images)
            self.on_image(self._images[self._index])
