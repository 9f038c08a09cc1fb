"""
SongMeta Settings Manager
Handles dynamic configuration management using settings.json
"""

import json
import shutil
import os
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass
from logging_config import get_logger

logger = get_logger(__name__)

# Allow overriding the settings file location via environment variable
if "__compiled__" in globals() or getattr(sys, 'frozen', False):
    ROOT_DIR = Path(sys.executable).parent
else:
    ROOT_DIR = Path(__file__).parent

SETTINGS_FILE = Path(os.getenv("SONGMETA_SETTINGS_FILE", str(ROOT_DIR / "settings.json")))


@dataclass
class Setting:
    """Represents a single configurable setting"""
    name: str
    type: type
    default: Any
    category: Optional[str] = None
    description: Optional[str] = None
    min_val: Optional[float] = None
    max_val: Optional[float] = None

    def validate_and_convert(self, value: Any) -> Any:
        try:
            if self.type == bool and isinstance(value, str):
                return value.lower() in ('true', '1', 'yes', 'on')

            converted = self.type(value)
            if self.min_val is not None and converted < self.min_val:
                return self.default
            if self.max_val is not None and converted > self.max_val:
                return self.default
            return converted
        except (ValueError, TypeError):
            return self.default


class SettingsManager:
    def __init__(self, settings_file: Optional[Path] = None):
        self.settings_file = Path(settings_file) if settings_file else SETTINGS_FILE
        self._settings: Dict[str, Any] = {}

        self._definitions = {
            # Debug
            "debug.log_file": Setting("Log File", str, "songmeta.log", "Debug", "Log file name"),
            "debug.log_level": Setting("Log Level", str, "INFO", "Debug", "Console logging verbosity"),
            "debug.log_detailed": Setting("Detailed Logging", bool, False, "Debug", "Write DEBUG records to the log file"),
            "debug.log_to_console": Setting("Log to Console", bool, True, "Debug", "Print logs to terminal"),

            # Remote lookup
            "lookup.timeout": Setting("Lookup Timeout", float, 10.0, "Lookup", "Remote lookup timeout (s)", min_val=1, max_val=120),
            "lookup.artwork_size": Setting("Artwork Size", int, 600, "Lookup", "Requested cover size (px)", min_val=100, max_val=3000),

            # Cache
            "cache.file_name": Setting("Cache File", str, "song-metadata-cache.json", "Cache", "Metadata cache file name"),

            # Artwork
            "artwork.rotation_interval": Setting("Rotation Interval", float, 3.0, "Artwork", "Seconds between user images", min_val=0.1, max_val=3600),
            "artwork.default_cover": Setting("Default Cover", str, "Assets/default_cover.png", "Artwork", "Fallback cover (relative to resources)"),
        }

        self.load_settings()

    def load_settings(self) -> None:
        """Load settings from JSON, fall back to defaults"""
        self._settings = {}

        # 1. Load defaults first
        for key, definition in self._definitions.items():
            self._settings[key] = definition.default

        # 2. Load from JSON if exists
        if not self.settings_file.exists():
            return

        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                saved = json.load(f)
            for key, val in saved.items():
                # Unknown keys are kept as-is
                if key in self._definitions:
                    self._settings[key] = self._definitions[key].validate_and_convert(val)
                else:
                    self._settings[key] = val
        except Exception as e:
            logger.error(f"Failed to load {self.settings_file}: {e} - resetting to defaults")
            backup_path = self.settings_file.with_suffix('.json.corrupted')
            try:
                shutil.copy2(self.settings_file, backup_path)
                logger.info(f"Backed up corrupted settings to {backup_path}")
            except OSError as backup_error:
                logger.warning(f"Could not back up corrupted settings: {backup_error}")
            self.save_to_config()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value.
        Priority:
        1. Loaded value (from JSON or Schema Default)
        2. Provided 'default' argument (if key unknown)
        """
        if key in self._settings:
            return self._settings[key]
        return default

    def set(self, key: str, value: Any) -> bool:
        if key not in self._definitions:
            return False
        self._settings[key] = self._definitions[key].validate_and_convert(value)
        return True

    def save_to_config(self) -> None:
        """Save current memory settings to JSON file"""
        temp_path = self.settings_file.parent / f"settings_{uuid.uuid4().hex}.json.tmp"
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(self._settings, f, indent=4, sort_keys=True)
            os.replace(temp_path, self.settings_file)
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            if temp_path.exists():
                try:
                    os.remove(temp_path)
                except OSError:
                    pass

    def get_all(self) -> Dict:
        """Return settings grouped by category"""
        result = {}
        for key, val in self._settings.items():
            defin = self._definitions.get(key)
            if not defin:
                continue
            cat = defin.category or "Misc"
            result.setdefault(cat, {})[key] = {
                "value": val,
                "name": defin.name,
                "description": defin.description,
                "type": defin.type.__name__,
            }
        return result


settings = SettingsManager()
