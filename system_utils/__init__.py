"""
System Utils Package

The internal structure is:
    state.py            - Task tracker and status strings
    helpers.py          - Query building, path comparison, tracked tasks
    paths.py            - App data locations
    metadata_cache.py   - JSON metadata cache
    image_storage.py    - Per-song user image folders
    artwork_rotation.py - Timed cover rotation for the playing song
"""

from .helpers import build_query_from_file_name, create_tracked_task, existing_files, same_path
from .paths import (
    get_app_root_path,
    get_cache_file_path,
    get_song_images_root,
    get_song_images_folder_path,
)
from .metadata_cache import CacheError, MetadataCache, SongCacheEntry
from .image_storage import ImageStorage, is_supported_image
from .artwork_rotation import ArtworkRotation

__all__ = [
    'build_query_from_file_name',
    'create_tracked_task',
    'existing_files',
    'same_path',
    'get_app_root_path',
    'get_cache_file_path',
    'get_song_images_root',
    'get_song_images_folder_path',
    'CacheError',
    'MetadataCache',
    'SongCacheEntry',
    'ImageStorage',
    'is_supported_image',
    'ArtworkRotation',
]
