"""Tests for the command line shell"""
import asyncio
import json

import pytest
from click.testing import CliRunner

import song_meta
from conftest import make_image
from system_utils import paths
from system_utils.metadata_cache import MetadataCache, SongCacheEntry


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(paths, "APP_DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(song_meta, "setup_logging", lambda **kwargs: None)
    return tmp_path / "data"


def test_show_unknown_song(data_dir, tmp_path):
    result = CliRunner().invoke(song_meta.cli, ["show", str(tmp_path / "nothing.mp3")])

    assert result.exit_code == 0
    assert "Not cached" in result.output


def test_show_cached_song(data_dir, tmp_path):
    song_path = str(tmp_path / "song.mp3")
    MetadataCache().upsert_sync(SongCacheEntry(file_path=song_path, track_name="Song", artist_name="Artist"))

    result = CliRunner().invoke(song_meta.cli, ["show", song_path])

    assert result.exit_code == 0
    assert json.loads(result.output)["artistName"] == "Artist"


def test_add_and_remove_image(data_dir, tmp_path):
    song_path = str(tmp_path / "song.mp3")
    image = make_image(tmp_path / "cover.png")
    runner = CliRunner()

    result = runner.invoke(song_meta.cli, ["add-image", song_path, image])
    assert result.exit_code == 0
    assert "Saved: 1 image(s)" in result.output

    stored = MetadataCache().get_sync(song_path).user_images
    assert len(stored) == 1
    assert stored[0].startswith(str(data_dir / "song-images"))

    result = runner.invoke(song_meta.cli, ["remove-image", song_path, stored[0]])
    assert result.exit_code == 0
    assert MetadataCache().get_sync(song_path).user_images == []


def test_show_reports_broken_cache(data_dir, tmp_path):
    data_dir.mkdir(parents=True)
    (data_dir / "song-metadata-cache.json").write_text("{broken", encoding="utf-8")

    result = CliRunner().invoke(song_meta.cli, ["show", str(tmp_path / "song.mp3")])

    assert result.exit_code == 0
    assert "Cache error: Malformed cache file" in result.output


def test_add_image_stops_on_broken_cache(data_dir, tmp_path):
    data_dir.mkdir(parents=True)
    cache_file = data_dir / "song-metadata-cache.json"
    cache_file.write_text("{broken", encoding="utf-8")
    image = make_image(tmp_path / "cover.png")

    result = CliRunner().invoke(song_meta.cli, ["add-image", str(tmp_path / "song.mp3"), image])

    assert result.exit_code == 0
    assert "Cache error: " in result.output
    assert not (data_dir / "song-images").exists()
    assert cache_file.read_text(encoding="utf-8") == "{broken"


class _HangingProvider:
    def __init__(self):
        self.started = asyncio.Event()
        self.unwound = False

    async def search(self, query):
        self.started.set()
        try:
            await asyncio.Event().wait()
        finally:
            self.unwound = True

    def close(self):
        pass


async def test_interrupted_resolve_waits_for_lookup(data_dir, tmp_path, monkeypatch):
    provider = _HangingProvider()
    monkeypatch.setattr(song_meta, "ItunesMetadataProvider", lambda: provider)
    song = tmp_path / "song.mp3"
    song.write_bytes(b"")

    run = asyncio.create_task(song_meta._resolve_all([str(song)], verbose=False))
    await asyncio.wait_for(provider.started.wait(), 2)
    run.cancel()
    with pytest.raises(asyncio.CancelledError):
        await run

    assert provider.unwound
