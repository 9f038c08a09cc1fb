"""
User image storage for system_utils package.
Copies user-picked images into a per-song folder and removes them again.

Dependencies: paths
"""
from __future__ import annotations
import os
import uuid
import shutil
import asyncio
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .paths import get_song_images_root, get_song_images_folder_path
from logging_config import get_logger

logger = get_logger(__name__)


def is_supported_image(path: str) -> bool:
    """True when Pillow recognizes the file as an image."""
    try:
        with Image.open(path) as img:
            img.verify()
        return True
    except (OSError, UnidentifiedImageError, SyntaxError, ValueError):
        return False


class ImageStorage:
    """Stores user-supplied images under <images_root>/<sha256 of song path>/."""

    def __init__(self, images_root: Optional[Path] = None):
        self.images_root = Path(images_root) if images_root else get_song_images_root()

    def song_folder(self, song_path: str) -> Path:
        return get_song_images_folder_path(song_path, self.images_root)

    async def copy_to_song_folder(self, song_path: str, source_image_path: str) -> str:
        return await asyncio.to_thread(self._copy_sync, song_path, source_image_path)

    async def delete_if_exists(self, image_path: str) -> None:
        await asyncio.to_thread(self._delete_sync, image_path)

    def _copy_sync(self, song_path: str, source_image_path: str) -> str:
        folder = self.song_folder(song_path)
        folder.mkdir(parents=True, exist_ok=True)

        source = Path(source_image_path)
        # Unique suffix so repeated adds of the same file never collide
        dest = folder / f"{source.stem}_{uuid.uuid4().hex}{source.suffix}"
        shutil.copyfile(source, dest)
        logger.info(f"Stored image {source.name} for {song_path} as {dest.name}")
        return str(dest)

    @staticmethod
    def _delete_sync(image_path: str) -> None:
        try:
            os.remove(image_path)
            logger.info(f"Deleted image {image_path}")
        except FileNotFoundError:
            pass
