"""
SongMeta Configuration Loader
Loads values from settings.json via the settings manager.
"""
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

from settings import settings

# ==========================================
# Path Configuration
# ==========================================
if "__compiled__" in globals() or getattr(sys, 'frozen', False):
    ROOT_DIR = Path(sys.executable).parent
else:
    ROOT_DIR = Path(__file__).parent

# ==========================================
# Version
# ==========================================
VERSION = "1.0.0"

# Only load .env if it exists
env_file = ROOT_DIR / '.env'
if env_file.exists():
    load_dotenv(env_file)


# Helper to prefer Env Var > Settings JSON > Default
def conf(key, default=None):
    # 1. Check Env Var (Highest Priority - good for docker/dev)
    env_val = os.getenv(key.upper().replace('.', '_'))
    if env_val is not None:
        return env_val

    # 2. Check Settings JSON
    json_val = settings.get(key)
    if json_val is not None:
        return json_val

    # 3. Default
    return default


# Env vars arrive as strings
def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes', 'on')
    return bool(value)


def _default_app_data_dir() -> Path:
    """Per-user application data folder (roaming AppData on Windows, XDG elsewhere)."""
    if sys.platform.startswith('win') and os.getenv("APPDATA"):
        return Path(os.environ["APPDATA"]) / "SongMeta"
    xdg = os.getenv("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / "SongMeta"


# ==========================================
# EXPORTED CONFIG DICTS
# ==========================================

RESOURCES_DIR = ROOT_DIR / "resources"

# Data directory - can be overridden for portable installs and tests
APP_DATA_DIR = Path(os.getenv("SONGMETA_DATA_DIR", str(_default_app_data_dir())))

DEBUG = {
    "log_file": conf("debug.log_file", "songmeta.log"),
    "log_level": conf("debug.log_level", "INFO"),
    "log_to_console": _as_bool(conf("debug.log_to_console", True)),
    "log_detailed": _as_bool(conf("debug.log_detailed", False)),
}

LOOKUP = {
    "base_url": conf("lookup.base_url", "https://itunes.apple.com/search"),
    "timeout": float(conf("lookup.timeout", 10.0)),
    "artwork_size": int(conf("lookup.artwork_size", 600)),
    "headers": {
        "User-Agent": f"SongMeta/{VERSION}",
    },
}

CACHE = {
    "file_name": conf("cache.file_name", "song-metadata-cache.json"),
    "images_folder": "song-images",
}

ARTWORK = {
    "rotation_interval": float(conf("artwork.rotation_interval", 3.0)),
    "default_cover": conf("artwork.default_cover", "Assets/default_cover.png"),
}
