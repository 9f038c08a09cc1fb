"""
Song metadata cache.
One JSON file maps absolute song path -> entry. Every read and write is a full
load/act/save cycle guarded by a single lock, so callers see fully serialized
access and never observe a half-written file.

Dependencies: paths
"""
from __future__ import annotations
import os
import json
import uuid
import asyncio
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List

from .paths import get_cache_file_path
from logging_config import get_logger

logger = get_logger(__name__)


class CacheError(Exception):
    """Raised when the cache file cannot be read or decoded."""


@dataclass
class SongCacheEntry:
    file_path: str = ""
    track_name: str = ""
    artist_name: str = ""
    album_name: str = ""
    api_artwork_url: str = ""
    user_images: List[str] = field(default_factory=list)

    # JSON field name -> attribute name
    _FIELDS = {
        "filePath": "file_path",
        "trackName": "track_name",
        "artistName": "artist_name",
        "albumName": "album_name",
        "apiArtworkUrl": "api_artwork_url",
    }

    def copy(self) -> "SongCacheEntry":
        return SongCacheEntry(
            file_path=self.file_path,
            track_name=self.track_name,
            artist_name=self.artist_name,
            album_name=self.album_name,
            api_artwork_url=self.api_artwork_url,
            user_images=list(self.user_images),
        )

    def normalized(self) -> "SongCacheEntry":
        """Copy with blank and case-insensitive duplicate image paths dropped (first wins)."""
        images = []
        seen = set()
        for path in self.user_images:
            if not path or not path.strip():
                continue
            key = path.casefold()
            if key in seen:
                continue
            seen.add(key)
            images.append(path)
        entry = self.copy()
        entry.user_images = images
        return entry

    def to_dict(self) -> Dict[str, Any]:
        data = {json_name: getattr(self, attr) for json_name, attr in self._FIELDS.items()}
        data["userImages"] = list(self.user_images)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SongCacheEntry":
        """Build an entry from its JSON object. Field names match case-insensitively, extras are ignored."""
        lowered = {str(k).lower(): v for k, v in data.items()}
        kwargs = {}
        for json_name, attr in cls._FIELDS.items():
            value = lowered.get(json_name.lower())
            kwargs[attr] = str(value) if value is not None else ""
        images = lowered.get("userimages") or []
        if not isinstance(images, list):
            images = []
        kwargs["user_images"] = [str(p) for p in images if p is not None]
        return cls(**kwargs)


class MetadataCache:
    """
    File-backed song metadata cache.

    The async methods run the whole locked cycle in a worker thread. A
    cancelled awaiter therefore never releases the lock while the file is
    still being written.
    """

    def __init__(self, cache_file_path: Optional[Path] = None):
        self.cache_file_path = Path(cache_file_path) if cache_file_path else get_cache_file_path()
        self._io_lock = threading.Lock()

    async def get(self, file_path: str) -> Optional[SongCacheEntry]:
        return await asyncio.to_thread(self.get_sync, file_path)

    async def upsert(self, entry: SongCacheEntry, keep_user_images: bool = False) -> SongCacheEntry:
        return await asyncio.to_thread(self.upsert_sync, entry, keep_user_images)

    def get_sync(self, file_path: str) -> Optional[SongCacheEntry]:
        with self._io_lock:
            cache = self._load()
            key = self._find_key(cache, file_path)
            if key is None:
                return None
            return cache[key].copy()

    def upsert_sync(self, entry: SongCacheEntry, keep_user_images: bool = False) -> SongCacheEntry:
        """
        Insert or replace the entry for entry.file_path and return a copy of what was stored.

        With keep_user_images the images already stored under the key survive; remote
        lookups use this so they never erase images attached by an edit in the meantime.
        """
        if not entry.file_path:
            raise ValueError("Cache entry needs a file path")

        with self._io_lock:
            cache = self._load()
            stored = entry.normalized()
            existing_key = self._find_key(cache, entry.file_path)
            if existing_key is not None:
                if keep_user_images:
                    stored.user_images = list(cache[existing_key].user_images)
                del cache[existing_key]
            cache[entry.file_path] = stored
            self._save(cache)
        logger.debug(f"Cached metadata for {stored.file_path} ({len(stored.user_images)} user images)")
        return stored.copy()

    @staticmethod
    def _find_key(cache: Dict[str, SongCacheEntry], file_path: str) -> Optional[str]:
        if file_path in cache:
            return file_path
        wanted = file_path.casefold()
        for key in cache:
            if key.casefold() == wanted:
                return key
        return None

    def _load(self) -> Dict[str, SongCacheEntry]:
        """Read the whole mapping. Missing, empty or null file means an empty cache."""
        if not self.cache_file_path.exists():
            return {}

        try:
            with open(self.cache_file_path, 'r', encoding='utf-8') as f:
                raw = f.read()
        except OSError as e:
            raise CacheError(f"Cannot read {self.cache_file_path}: {e}") from e

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheError(f"Malformed cache file {self.cache_file_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise CacheError(f"Malformed cache file {self.cache_file_path}: expected an object")

        cache = {}
        for key, value in data.items():
            if not isinstance(value, dict):
                logger.warning(f"Skipping malformed cache entry for {key}")
                continue
            entry = SongCacheEntry.from_dict(value)
            if not entry.file_path:
                entry.file_path = key
            # Hand-edited files may carry blank or duplicate image paths
            cache[key] = entry.normalized()
        return cache

    def _save(self, cache: Dict[str, SongCacheEntry]) -> None:
        """Write to a unique temp file in the same folder, then atomically replace."""
        folder = self.cache_file_path.parent
        folder.mkdir(parents=True, exist_ok=True)
        temp_path = folder / f"metadata_cache_{uuid.uuid4().hex}.json.tmp"

        payload = {key: entry.to_dict() for key, entry in cache.items()}
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.cache_file_path)
        except Exception:
            try:
                if temp_path.exists():
                    os.remove(temp_path)
            except OSError:
                pass
            raise
