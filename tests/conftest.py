"""Pytest configuration and shared fixtures"""
import os
import sys
import asyncio
import tempfile
from pathlib import Path
from unittest.mock import Mock

# Keep the suite away from the user's real settings and data folders
_sandbox = Path(tempfile.mkdtemp(prefix="songmeta-tests-"))
os.environ.setdefault("SONGMETA_SETTINGS_FILE", str(_sandbox / "settings.json"))
os.environ.setdefault("SONGMETA_DATA_DIR", str(_sandbox / "data"))
os.environ.setdefault("SONGMETA_LOGS_DIR", str(_sandbox / "logs"))

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

import pytest
from PIL import Image

from providers.base import LookupResult
from system_utils.metadata_cache import MetadataCache


class FakeProvider:
    """Remote lookup whose answers are released by the test."""

    def __init__(self):
        self.calls = []
        self.pending = {}

    async def search(self, query):
        self.calls.append(query)
        future = asyncio.get_running_loop().create_future()
        self.pending[query] = future
        return await future

    def answer(self, query, result):
        self.pending[query].set_result(result)


class InstantProvider:
    """Remote lookup that answers immediately with a fixed result."""

    def __init__(self, result):
        self.result = result
        self.calls = []

    async def search(self, query):
        self.calls.append(query)
        return self.result


async def wait_for(predicate, timeout=2.0):
    """Poll until predicate() is true, failing the test on timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


def make_image(path: Path, color=(200, 40, 40)) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (4, 4), color).save(path)
    return str(path)


def found(track="Song", artist="Artist", album="Album", artwork="https://example.com/100x100bb.jpg"):
    return LookupResult.found(track, artist, album, artwork)


@pytest.fixture
def cache(tmp_path):
    return MetadataCache(tmp_path / "song-metadata-cache.json")


@pytest.fixture
def playback():
    return Mock(spec=["play", "stop"])


@pytest.fixture
def music_dir(tmp_path):
    folder = tmp_path / "Music"
    folder.mkdir()
    return folder
