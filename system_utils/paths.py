"""
Application data locations: metadata cache file and per-song image folders.
"""
from __future__ import annotations
import hashlib
from pathlib import Path
from typing import Optional

from config import APP_DATA_DIR, CACHE


def get_app_root_path() -> Path:
    return APP_DATA_DIR


def get_cache_file_path(root: Optional[Path] = None) -> Path:
    return Path(root or get_app_root_path()) / CACHE["file_name"]


def get_song_images_root(root: Optional[Path] = None) -> Path:
    return Path(root or get_app_root_path()) / CACHE["images_folder"]


def song_folder_name(song_path: str) -> str:
    """Hex SHA-256 of the song path; stable, collision-resistant and filesystem safe."""
    return hashlib.sha256(song_path.encode("utf-8")).hexdigest()


def get_song_images_folder_path(song_path: str, images_root: Optional[Path] = None) -> Path:
    root = Path(images_root) if images_root else get_song_images_root()
    return root / song_folder_name(song_path)
