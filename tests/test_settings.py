"""Tests for settings.json handling"""
import json

from settings import SettingsManager


def test_defaults_without_file(tmp_path):
    manager = SettingsManager(tmp_path / "settings.json")

    assert manager.get("artwork.rotation_interval") == 3.0
    assert manager.get("cache.file_name") == "song-metadata-cache.json"
    assert manager.get("unknown.key", "fallback") == "fallback"
    assert not (tmp_path / "settings.json").exists()


def test_values_are_converted_and_validated(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "artwork.rotation_interval": "5",
        "lookup.artwork_size": 99999,
        "debug.log_to_console": "false",
        "custom.thing": [1, 2],
    }))

    manager = SettingsManager(path)

    assert manager.get("artwork.rotation_interval") == 5.0
    assert manager.get("lookup.artwork_size") == 600  # out of range -> default
    assert manager.get("debug.log_to_console") is False
    assert manager.get("custom.thing") == [1, 2]


def test_corrupted_file_is_backed_up_and_reset(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{oops")

    manager = SettingsManager(path)

    assert manager.get("artwork.rotation_interval") == 3.0
    assert (tmp_path / "settings.json.corrupted").read_text() == "{oops"
    assert json.loads(path.read_text())["artwork.rotation_interval"] == 3.0


def test_set_and_save(tmp_path):
    path = tmp_path / "settings.json"
    manager = SettingsManager(path)

    assert manager.set("artwork.rotation_interval", 1.5)
    assert not manager.set("nope", 1)
    manager.save_to_config()

    assert SettingsManager(path).get("artwork.rotation_interval") == 1.5
    assert "Artwork" in manager.get_all()
