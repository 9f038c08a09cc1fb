"""
Edit session for one song's cached metadata and user images.
The shell shows it in an edit window; after save() it asks the coordinator to
refresh_after_edit() so the main display picks up the changes.
"""
import os
import asyncio
from typing import List, Optional

from config import ARTWORK
from logging_config import get_logger
from player import Song, resolve_image_path
from system_utils.helpers import existing_files
from system_utils.image_storage import ImageStorage, is_supported_image
from system_utils.metadata_cache import MetadataCache, SongCacheEntry

logger = get_logger(__name__)


class SongEditor:
    def __init__(self, song: Song, cache: MetadataCache, image_storage: ImageStorage,
                 default_cover: Optional[str] = None):
        self.song = song
        self.cache = cache
        self.image_storage = image_storage
        self.default_cover = default_cover or ARTWORK["default_cover"]

        self.track_name = ""
        self.artist_name = ""
        self.album_name = ""
        self.api_artwork_url = ""
        self.user_images: List[str] = []
        self.selected_image: Optional[str] = None
        self.status_message = ""

    @property
    def cover_image_path(self) -> str:
        if self.user_images:
            return resolve_image_path(self.user_images[0])
        return resolve_image_path(self.api_artwork_url or self.default_cover)

    async def load(self) -> None:
        self.status_message = "Loading..."
        try:
            entry = await self.cache.get(self.song.full_path)
        except Exception as e:
            logger.error(f"Cache read failed for {self.song.full_path}: {e}")
            self.status_message = f"Cache error: {e}"
            return

        if entry is None:
            entry = SongCacheEntry(
                file_path=self.song.full_path,
                track_name=self.song.file_name_without_ext,
                api_artwork_url=self.default_cover,
            )

        self.track_name = entry.track_name or self.song.file_name_without_ext
        self.artist_name = entry.artist_name
        self.album_name = entry.album_name
        self.api_artwork_url = entry.api_artwork_url or self.default_cover
        # Images deleted outside the app are dropped here and disappear on the next save
        self.user_images = await asyncio.to_thread(existing_files, entry.user_images)
        self.selected_image = self.user_images[0] if self.user_images else None
        self.status_message = "Ready"

    async def add_image(self, source_path: Optional[str]) -> Optional[str]:
        if not source_path or not source_path.strip():
            return None
        if not await asyncio.to_thread(is_supported_image, source_path):
            self.status_message = f"Image error: {os.path.basename(source_path)} is not a supported image"
            return None

        try:
            stored = await self.image_storage.copy_to_song_folder(self.song.full_path, source_path)
        except Exception as e:
            logger.error(f"Could not store image {source_path}: {e}")
            self.status_message = f"Image error: {e}"
            return None

        self.user_images.append(stored)
        self.selected_image = stored
        self.status_message = "Image added"
        return stored

    async def remove_image(self, image_path: Optional[str] = None) -> None:
        to_remove = image_path or self.selected_image
        if to_remove is None or to_remove not in self.user_images:
            return

        self.user_images.remove(to_remove)
        self.selected_image = self.user_images[0] if self.user_images else None

        try:
            await self.image_storage.delete_if_exists(to_remove)
            self.status_message = "Image removed"
        except Exception as e:
            logger.error(f"Could not delete image {to_remove}: {e}")
            self.status_message = f"Image error: {e}"

    async def save(self) -> bool:
        entry = SongCacheEntry(
            file_path=self.song.full_path,
            track_name=self.track_name,
            artist_name=self.artist_name,
            album_name=self.album_name,
            api_artwork_url=self.api_artwork_url,
            user_images=list(self.user_images),
        )
        try:
            await self.cache.upsert(entry)
        except Exception as e:
            logger.error(f"Cache write failed for {self.song.full_path}: {e}")
            self.status_message = f"Cache error: {e}"
            return False
        self.status_message = "Saved"
        return True
